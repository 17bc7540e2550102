"""
Welcome emails: the verification-link email (mints the signed token) and a plain greeting.
"""
import logging
from collections import namedtuple

from utils.errors import ServerMisconfigured, ValidationFailed
from utils.mail import verification_email, welcome_email
from utils.validators import clean_str, validate_email
from utils.verification_token import encode_token, now_millis

logger = logging.getLogger(__name__)

WelcomeResult = namedtuple("WelcomeResult", ["sent", "link"])


class WelcomeService:
    def __init__(self, settings, mailer, clock=now_millis):
        self.settings = settings
        self.mailer = mailer
        self.clock = clock

    def verification_link(self, account_id, base_url=""):
        """Mint a token for account_id and build the /verify link around it."""
        token = encode_token(
            account_id, self.settings.token_ttl_seconds * 1000, self.settings.token_secret, self.clock()
        )
        base = (self.settings.verify_base or base_url or "").rstrip("/")
        return f"{base}/verify?token={token}"

    def send_verification(self, email, name, account_id, base_url="") -> WelcomeResult:
        """
        Email the verification link. With no mail backend the link is handed back
        instead (dev only); in production that is a configuration error.
        """
        if not validate_email(email):
            raise ValidationFailed("Missing email")
        account_id = clean_str(account_id)
        if not account_id:
            raise ValidationFailed("Missing accountId")
        if not self.settings.token_secret:
            raise ServerMisconfigured()

        name = clean_str(name)
        link = self.verification_link(account_id, base_url)

        if self.mailer is None:
            if self.settings.return_link_when_mail_unconfigured:
                logger.info(f"No mail backend configured; returning verification link for {account_id}")
                return WelcomeResult(False, link)
            raise ServerMisconfigured("Email service is not configured.")

        subject, text, html = verification_email(
            self.settings.app_name, name, link, ttl_hours=max(1, self.settings.token_ttl_seconds // 3600)
        )
        self.mailer.send(email.strip(), subject, html, text=text, recipient_name=name)
        logger.info(f"Verification email sent for account {account_id}")
        return WelcomeResult(True, None)

    def send_greeting(self, email, name):
        """Plain welcome message, no link."""
        if not validate_email(email):
            raise ValidationFailed("Missing email")
        if self.mailer is None:
            raise ServerMisconfigured("Email service is not configured.")
        name = clean_str(name)
        subject, text, html = welcome_email(self.settings.app_name, name)
        return self.mailer.send(email.strip(), subject, html, text=text, recipient_name=name)
