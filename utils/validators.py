"""
Input validation for the JSON endpoints.
"""


def validate_email(email) -> bool:
    """Non-empty string containing '@'. The identity provider does the strict check."""
    return isinstance(email, str) and bool(email.strip()) and "@" in email


def validate_password(password):
    """Return (is_valid, error_message)."""
    if not isinstance(password, str) or not password:
        return False, "Password is required."
    return True, None


def clean_str(value) -> str:
    """Strip strings; anything else becomes ''."""
    return value.strip() if isinstance(value, str) else ""
