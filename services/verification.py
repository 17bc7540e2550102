"""
Email verification link handler.

Turns a verification token into a verified account plus a fresh login credential, and
decides where to send the user agent. Every outcome is a redirect:

    {verify_base}/?verified=0&reason=<code>                              failure
    {verify_base}/?verified=1|partial&accountId=<id>&autologin=0         web (no secret)
    {mobile_scheme}?accountId=<id>&secret=<secret>&verified=1|0          mobile deep link

The same service can also ask Appwrite to send its built-in verification email
(request_provider_email), for clients that use Appwrite's own confirmation page.

Marking the account verified is not fatal: when it fails the flow continues and the
redirect says verified=partial (web) or verified=0 (mobile).
"""
import logging
import re
from collections import namedtuple
from urllib.parse import urlencode

from utils.errors import ProviderCallFailed, ServerMisconfigured, UnexpectedError, ValidationFailed, VerifyServiceError
from utils.validators import clean_str, validate_email
from utils.verification_token import now_millis, read_token

logger = logging.getLogger(__name__)

MOBILE_UA_RE = re.compile(r"android|iphone|ipad|mobile", re.IGNORECASE)

MISSING_TOKEN = "missing_token"

VerificationRedirect = namedtuple("VerificationRedirect", ["location", "reason", "verified", "autologin"])


def is_mobile_user_agent(user_agent) -> bool:
    return bool(user_agent) and MOBILE_UA_RE.search(user_agent) is not None


class VerificationService:
    def __init__(self, settings, identity, clock=now_millis):
        self.settings = settings
        self.identity = identity
        self.clock = clock

    def complete(self, token, user_agent="") -> VerificationRedirect:
        """Run the whole flow. Never raises; failures become reason redirects."""
        try:
            return self._complete(token, user_agent)
        except Exception as e:
            logger.error(f"verify: unexpected error: {e}", exc_info=True)
            return self._failure(UnexpectedError.reason)

    def _complete(self, token, user_agent):
        if not token:
            return self._failure(MISSING_TOKEN)

        try:
            account_id = read_token(token, self.settings.token_secret, self.clock())
        except ServerMisconfigured:
            logger.error("verify: TOKEN_SECRET not set")
            return self._failure(ServerMisconfigured.reason)
        except VerifyServiceError as e:
            logger.warning(f"verify: rejected token ({e.reason})")
            return self._failure(e.reason)

        if not self.identity.is_configured:
            logger.error("verify: Appwrite admin config missing")
            return self._failure(ServerMisconfigured.reason)

        verified = self._mark_verified(account_id)

        try:
            credential = self.identity.issue_credential(account_id, self.settings.credential_ttl_seconds)
        except ProviderCallFailed as e:
            logger.error(f"verify: token create failed for {account_id}: {e.status} {e.body}")
            return self._web_success(account_id, verified)

        if is_mobile_user_agent(user_agent):
            return self._deep_link(account_id, credential.secret, verified)
        return self._web_success(account_id, verified)

    def request_provider_email(self, email, redirect_url=""):
        """Have Appwrite send its own verification email; returns its answer."""
        if not validate_email(email):
            raise ValidationFailed("Missing email")
        if not self.identity.is_configured:
            raise ServerMisconfigured()
        return self.identity.request_verification_email(email.strip(), clean_str(redirect_url) or None)

    def _mark_verified(self, account_id) -> bool:
        try:
            self.identity.mark_verified(account_id)
        except ProviderCallFailed as e:
            logger.error(f"verify: Appwrite verification failed for {account_id}: {e.status} {e.body}")
            return False
        logger.info(f"verify: account {account_id} marked verified")
        return True

    def _landing(self, params):
        return f"{self.settings.verify_base}/?{urlencode(params)}"

    def _failure(self, reason):
        return VerificationRedirect(
            self._landing([("verified", "0"), ("reason", reason)]), reason, False, False
        )

    def _web_success(self, account_id, verified):
        # The secret never goes into a desktop URL (history, Referer).
        params = [("verified", "1" if verified else "partial"), ("accountId", account_id), ("autologin", "0")]
        return VerificationRedirect(self._landing(params), None, verified, False)

    def _deep_link(self, account_id, secret, verified):
        query = urlencode([("accountId", account_id), ("secret", secret), ("verified", "1" if verified else "0")])
        return VerificationRedirect(f"{self.settings.mobile_scheme}?{query}", None, verified, True)
