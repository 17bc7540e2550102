"""
Signed email verification token: base64url(account id) . expiry in ms . hex HMAC-SHA256.
Validity depends only on the token, the secret and the clock. There is no used-token
store, so an unexpired token can be replayed; rotating TOKEN_SECRET revokes all of them.
"""
import base64
import binascii
import hmac
import re
import time
from collections import namedtuple

from utils.errors import InvalidSignature, MalformedToken, ServerMisconfigured, TokenExpired


class DecodedToken(namedtuple("DecodedToken", ["subject_segment", "expires_segment", "signature"])):
    """The three raw segments; the signature covers the first two exactly as supplied."""
    __slots__ = ()

    @property
    def expires_at_ms(self) -> int:
        return int(self.expires_segment)


_DIGITS_RE = re.compile(r"[0-9]+")
_HEX_RE = re.compile(r"[0-9a-f]+")


def now_millis() -> int:
    return int(time.time() * 1000)


def b64url_encode(value: str) -> str:
    return base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii").rstrip("=")


def b64url_decode(segment: str) -> str:
    """Decode an unpadded base64url segment. Raises MalformedToken on bad input."""
    padded = segment.replace("-", "+").replace("_", "/")
    padded += "=" * (-len(padded) % 4)
    try:
        return base64.b64decode(padded, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        raise MalformedToken("Token subject is not valid base64url.")


def _sign(secret: str, payload: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), "sha256").hexdigest()


def encode_token(subject_id, ttl_ms, secret, now_ms=None):
    """
    Create a verification token for subject_id that expires ttl_ms from now.

    Args:
        subject_id: Identity-provider account id
        ttl_ms: Lifetime in milliseconds
        secret: TOKEN_SECRET used for the HMAC
        now_ms: Current time in epoch milliseconds (defaults to the wall clock)
    """
    if not secret:
        raise ServerMisconfigured("TOKEN_SECRET is not set.")
    if now_ms is None:
        now_ms = now_millis()
    expires = int(now_ms) + int(ttl_ms)
    payload = f"{b64url_encode(subject_id)}.{expires}"
    return f"{payload}.{_sign(secret, payload)}"


def decode_token(token) -> DecodedToken:
    """Split a token into its segments. Raises MalformedToken on structural problems."""
    if not token or not isinstance(token, str):
        raise MalformedToken("Token is empty.")
    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise MalformedToken("Token must have three non-empty segments.")
    subject_segment, expires_str, signature = parts
    if not _DIGITS_RE.fullmatch(expires_str):
        raise MalformedToken("Token expiry is not an integer.")
    return DecodedToken(subject_segment, expires_str, signature)


def constant_time_equals(a: bytes, b: bytes) -> bool:
    """Compare two byte strings in constant time; different lengths are simply unequal."""
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a, b)


def verify_token(decoded: DecodedToken, secret, now_ms=None) -> str:
    """
    Check the signature, then the expiry, and return the account id carried by the token.

    The signature is checked before the expiry so a forged token never learns
    whether its timestamp would have been accepted.
    """
    if not secret:
        raise ServerMisconfigured("TOKEN_SECRET is not set.")
    if now_ms is None:
        now_ms = now_millis()

    payload = f"{decoded.subject_segment}.{decoded.expires_segment}"
    expected = bytes.fromhex(_sign(secret, payload))
    if not _HEX_RE.fullmatch(decoded.signature or "") or len(decoded.signature) % 2:
        raise MalformedToken("Token signature is not lowercase hex.")
    supplied = bytes.fromhex(decoded.signature)
    if not constant_time_equals(expected, supplied):
        raise InvalidSignature()

    if now_ms > decoded.expires_at_ms:
        raise TokenExpired()

    return b64url_decode(decoded.subject_segment)


def read_token(token, secret, now_ms=None) -> str:
    """Decode and verify in one step."""
    return verify_token(decode_token(token), secret, now_ms)
