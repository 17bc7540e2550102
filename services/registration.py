"""
Registration: create the account with the identity provider, issue the first
auto-login credential, and kick off the welcome email without waiting for it.
"""
import logging
import uuid
from collections import namedtuple

from utils.background import run_detached
from utils.errors import AccountCreateFailed, ServerMisconfigured, ValidationFailed
from utils.http_client import send_json
from utils.validators import clean_str, validate_email, validate_password

logger = logging.getLogger(__name__)

RegistrationResult = namedtuple(
    "RegistrationResult", ["account_id", "credential_secret", "credential_expiry_seconds"]
)

# Provider answers that mean "pick the id yourself"
RETRYABLE_CREATE_STATUSES = (400, 409)


class RegistrationService:
    def __init__(self, settings, identity, spawn=run_detached, id_factory=None):
        self.settings = settings
        self.identity = identity
        self.spawn = spawn
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))

    def register(self, name, email, password) -> RegistrationResult:
        """
        Create an account and return its id plus a short-lived login secret.

        Raises:
            ValidationFailed: email or password unusable (no network call made)
            ServerMisconfigured: identity provider settings missing
            AccountCreateFailed / CredentialIssueFailed: provider rejected a call
        """
        if not validate_email(email):
            raise ValidationFailed("Invalid email")
        is_valid, pwd_error = validate_password(password)
        if not is_valid:
            raise ValidationFailed(pwd_error)
        if not self.identity.is_configured:
            raise ServerMisconfigured()

        email = email.strip()
        name = clean_str(name)

        account_id = self._create_account(name, email, password)
        credential = self.identity.issue_credential(account_id, self.settings.credential_ttl_seconds)
        self._fire_welcome(email, name, account_id)

        return RegistrationResult(account_id, credential.secret, credential.expires_in)

    def _create_account(self, name, email, password):
        """Try with our own id first; on 400/409 retry once and let the provider choose."""
        requested_id = self.id_factory()
        try:
            return self.identity.create_account(email, password, name, account_id=requested_id)
        except AccountCreateFailed as e:
            if e.status not in RETRYABLE_CREATE_STATUSES:
                raise
            logger.info(f"Create user with requested id rejected ({e.status}); retrying with provider id")
        return self.identity.create_account(email, password, name)

    def _fire_welcome(self, email, name, account_id):
        endpoint = self.settings.welcome_endpoint
        if not endpoint:
            logger.info("No welcome endpoint configured; skipping welcome email")
            return
        try:
            self.spawn(
                post_welcome, endpoint, email, name, account_id,
                timeout=self.settings.provider_timeout, name="welcome-email",
            )
        except Exception as e:
            logger.warning(f"Could not start welcome email task for {account_id}: {e}")


def post_welcome(endpoint, email, name, account_id, timeout=None):
    """Body of the detached welcome task. Never raises."""
    try:
        resp = send_json("POST", endpoint, {"email": email, "name": name, "accountId": account_id}, timeout=timeout)
    except Exception as e:
        logger.warning(f"welcome fire failed: {e}")
        return None
    if not resp.ok:
        logger.warning(f"welcome endpoint responded {resp.status}: {resp.body}")
    return resp
