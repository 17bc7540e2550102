"""
Appwrite admin API client: create account, issue short-lived login token, set the
email-verified flag, and ask Appwrite to send its own verification email.
"""
import logging
from collections import namedtuple
from urllib.parse import quote

from utils.errors import (
    AccountCreateFailed,
    CredentialIssueFailed,
    ProviderCallFailed,
    ServerMisconfigured,
)
from utils.http_client import send_json

logger = logging.getLogger(__name__)

LoginCredential = namedtuple("LoginCredential", ["account_id", "secret", "expires_in"])

# One step in an ordered fallback chain; accept(response) decides success.
Attempt = namedtuple("Attempt", ["label", "method", "path", "payload", "accept"])


def _is_2xx(resp):
    return resp.ok


def first_success(attempts, send):
    """
    Run attempts in order and return the first response its predicate accepts.
    Raises ProviderCallFailed with the last response when every attempt is rejected.
    """
    last = None
    for attempt in attempts:
        resp = send(attempt.method, attempt.path, attempt.payload)
        if attempt.accept(resp):
            return resp
        logger.warning("%s responded %s: %s", attempt.label, resp.status, resp.body)
        last = resp
    if last is None:
        raise ProviderCallFailed("No attempts to run.")
    raise ProviderCallFailed("All attempts failed.", status=last.status, body=last.body)


def _account_id_from(body):
    for key in ("$id", "id", "userId"):
        value = body.get(key)
        if value:
            return str(value)
    return None


class AppwriteAdminClient:
    """Server-side (API key) calls against an Appwrite project."""

    def __init__(self, endpoint, project, api_key, timeout=None):
        self.endpoint = endpoint
        self.project = project
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings):
        return cls(
            settings.provider_endpoint,
            settings.provider_project,
            settings.provider_api_key,
            timeout=settings.provider_timeout,
        )

    @property
    def is_configured(self):
        return bool(self.endpoint and self.project and self.api_key)

    def _send(self, method, path, payload=None):
        if not self.is_configured:
            raise ServerMisconfigured("Appwrite admin config missing.")
        headers = {
            "X-Appwrite-Project": self.project,
            "X-Appwrite-Key": self.api_key,
        }
        return send_json(method, f"{self.endpoint}/v1{path}", payload, headers, timeout=self.timeout)

    def create_account(self, email, password, name="", account_id=None) -> str:
        """
        Create a user and return its id. account_id=None lets Appwrite pick one.
        Raises AccountCreateFailed with the provider status and body on rejection.
        """
        payload = {"email": email, "password": password, "name": name}
        if account_id:
            payload["userId"] = account_id
        resp = self._send("POST", "/users", payload)
        if not resp.ok:
            raise AccountCreateFailed("Appwrite create user failed", status=resp.status, body=resp.body)
        created_id = _account_id_from(resp.json())
        if not created_id:
            raise AccountCreateFailed("Appwrite did not return user id", status=resp.status, body=resp.body)
        return created_id

    def issue_credential(self, account_id, expire_seconds) -> LoginCredential:
        """Create a short-lived token the client exchanges for a session."""
        resp = self._send("POST", f"/users/{quote(account_id, safe='')}/tokens", {"expire": expire_seconds})
        if not resp.ok:
            raise CredentialIssueFailed("Appwrite token creation failed", status=resp.status, body=resp.body)
        secret = resp.json().get("secret")
        if not secret:
            raise CredentialIssueFailed("Token secret missing", status=resp.status, body=resp.body)
        return LoginCredential(account_id, secret, expire_seconds)

    def mark_verified(self, account_id):
        """
        Set emailVerification=true. Endpoints differ between Appwrite versions,
        so the known shapes are tried in order until one answers 2xx.
        """
        user_path = f"/users/{quote(account_id, safe='')}"
        body = {"emailVerification": True}
        attempts = [
            Attempt("PATCH verification", "PATCH", f"{user_path}/verification", body, _is_2xx),
            Attempt("PATCH user", "PATCH", user_path, body, _is_2xx),
            Attempt("PUT user", "PUT", user_path, body, _is_2xx),
        ]
        return first_success(attempts, self._send)

    def request_verification_email(self, email, redirect_url=None):
        """
        Ask Appwrite to send its own verification email.
        Returns the parsed JSON answer, or the raw text when it is not a JSON object.
        """
        payload = {"email": email}
        if redirect_url:
            payload["url"] = redirect_url
        resp = self._send("POST", "/account/verification", payload)
        if not resp.ok:
            raise ProviderCallFailed(f"Appwrite error {resp.status}", status=resp.status, body=resp.body)
        logger.info("Appwrite verification email requested for %s (%s)", email, resp.status)
        return resp.json() or resp.body
