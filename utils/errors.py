"""
Error kinds raised by the token scheme, the provider clients and the services.
Each carries the redirect reason code used by /verify and an HTTP status for JSON routes.
"""


class VerifyServiceError(Exception):
    """Base class for every error this service raises on purpose."""
    reason = "server_error"
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class ValidationFailed(VerifyServiceError):
    """Invalid input."""
    reason = "validation_failed"
    status_code = 400


class ServerMisconfigured(VerifyServiceError):
    """Server not configured"""
    reason = "server_config"


class MalformedToken(VerifyServiceError):
    """Token is structurally invalid."""
    reason = "bad_token"
    status_code = 400


class InvalidSignature(VerifyServiceError):
    """Token signature does not match."""
    reason = "invalid_signature"
    status_code = 400


class TokenExpired(VerifyServiceError):
    """Token has expired."""
    reason = "expired"
    status_code = 400


class ProviderCallFailed(VerifyServiceError):
    """
    An outbound call answered with a non-2xx status.
    status and body are kept for server-side logs only.
    """
    reason = "provider_failed"

    def __init__(self, message=None, status=None, body=""):
        super().__init__(message)
        self.status = status
        self.body = body

    def diagnostics(self):
        return {"status": self.status, "body": self.body}


class ProviderUnavailable(ProviderCallFailed):
    """Provider could not be reached."""
    reason = "provider_error"


class AccountCreateFailed(ProviderCallFailed):
    """Appwrite create user failed"""


class CredentialIssueFailed(ProviderCallFailed):
    """Appwrite token creation failed"""


class MailDeliveryFailed(ProviderCallFailed):
    """Unable to send email. Please try again later."""


class UnexpectedError(VerifyServiceError):
    """server error"""
    reason = "server_error"
