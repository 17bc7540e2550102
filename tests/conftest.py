import pytest

from app import create_app
from config import Config
from utils.errors import AccountCreateFailed, CredentialIssueFailed, MailDeliveryFailed, ProviderCallFailed
from utils.identity_provider import LoginCredential

FIXED_NOW = 1_700_000_000_000
SECRET = "test-token-secret"
VERIFY_BASE = "https://verify.example.com"
MOBILE_SCHEME = "petranker://auth/verified"
IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 Mobile/15E148"
DESKTOP_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"


class VerifyTestConfig(Config):
    TESTING = True
    APP_NAME = "PetRanker"
    DEBUG = False
    TOKEN_SECRET = SECRET
    APPWRITE_ENDPOINT = "https://appwrite.example.com/v1/"
    APPWRITE_PROJECT = "project-1"
    APPWRITE_API_KEY = "admin-key"
    VERIFY_BASE = VERIFY_BASE
    MOBILE_DEEP_LINK_SCHEME = MOBILE_SCHEME
    VERIFY_WELCOME_ENDPOINT = "https://verify.example.com/send-welcome"
    REGISTER_TOKEN_EXPIRE_SECONDS = 120
    VERIFY_TOKEN_TTL_SECONDS = 24 * 60 * 60
    BREVO_API_KEY = ""
    MAIL_SERVER = None
    RETURN_LINK_WHEN_MAIL_UNCONFIGURED = True


class FakeIdentityProvider:
    """In-memory stand-in for the Appwrite admin client."""

    def __init__(self):
        self.is_configured = True
        self.accounts = {}
        self.calls = []
        self.create_failures = []
        self.verify_fails = False
        self.credential_fails = False
        self.explode = False
        self.issued = 0
        self.verification_email_status = None

    def create_account(self, email, password, name="", account_id=None):
        self.calls.append(("create_account", account_id))
        if self.create_failures:
            raise AccountCreateFailed("Appwrite create user failed", status=self.create_failures.pop(0),
                                      body='{"message":"rejected"}')
        new_id = account_id or f"provider-{len(self.accounts) + 1}"
        self.accounts[new_id] = {"email": email, "name": name, "verified": False}
        return new_id

    def issue_credential(self, account_id, expire_seconds):
        self.calls.append(("issue_credential", account_id))
        if self.explode:
            raise RuntimeError("boom")
        if self.credential_fails:
            raise CredentialIssueFailed("Appwrite token creation failed", status=500, body="down")
        self.issued += 1
        return LoginCredential(account_id, f"login-secret-{self.issued}", expire_seconds)

    def mark_verified(self, account_id):
        self.calls.append(("mark_verified", account_id))
        if self.verify_fails:
            raise ProviderCallFailed("All attempts failed.", status=404, body="user not found")
        self.accounts.setdefault(account_id, {})["verified"] = True

    def request_verification_email(self, email, redirect_url=None):
        self.calls.append(("request_verification_email", email, redirect_url))
        if self.verification_email_status:
            raise ProviderCallFailed(f"Appwrite error {self.verification_email_status}",
                                     status=self.verification_email_status, body='{"message":"rate limit"}')
        return {"$id": "verification-1", "userId": "acc-1"}


class FakeMailer:
    name = "fake"

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, recipient, subject, html, text=None, recipient_name=""):
        if self.fail:
            raise MailDeliveryFailed("Brevo API error", status=401, body="unauthorized")
        self.sent.append({"to": recipient, "subject": subject, "html": html, "text": text, "name": recipient_name})
        return {"messageId": f"<{len(self.sent)}@fake>"}


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def spawned():
    return []


@pytest.fixture
def make_app(identity, spawned):
    """Build an app; keyword overrides become config attributes."""

    def factory(mailer=None, **overrides):
        config_class = type("OverrideConfig", (VerifyTestConfig,), overrides)

        def spawn(target, *args, name=None, **kwargs):
            spawned.append((target, args, kwargs))

        return create_app(config_class, identity=identity, mailer=mailer, spawn=spawn, clock=lambda: FIXED_NOW)

    return factory


@pytest.fixture
def app(make_app, mailer):
    return make_app(mailer=mailer)


@pytest.fixture
def client(app):
    return app.test_client()
