"""
Email delivery: Brevo transactional API when BREVO_API_KEY is set, SMTP via Flask-Mail
when MAIL_SERVER is set, otherwise no backend (callers decide what to do).
"""
import logging

from flask_mail import Mail, Message
from markupsafe import escape

from utils.errors import MailDeliveryFailed, ProviderUnavailable
from utils.http_client import send_json

logger = logging.getLogger(__name__)

mail = Mail()

BREVO_SEND_URL = "https://api.brevo.com/v3/smtp/email"


class BrevoMailer:
    """Sends through Brevo (Sendinblue) /v3/smtp/email."""
    name = "brevo"

    def __init__(self, api_key, sender_email, sender_name, timeout=None):
        self.api_key = api_key
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.timeout = timeout

    def send(self, recipient, subject, html, text=None, recipient_name=""):
        payload = {
            "sender": {"email": self.sender_email, "name": self.sender_name},
            "to": [{"email": recipient, "name": recipient_name or ""}],
            "subject": subject,
            "htmlContent": html,
        }
        if text:
            payload["textContent"] = text
        try:
            resp = send_json("POST", BREVO_SEND_URL, payload, {"api-key": self.api_key}, timeout=self.timeout)
        except ProviderUnavailable as e:
            raise MailDeliveryFailed(f"Brevo unreachable: {e}")
        if not resp.ok:
            raise MailDeliveryFailed("Brevo API error", status=resp.status, body=resp.body)
        logger.info("Brevo send success for %s: %s", recipient, resp.body)
        return resp.json()


class SmtpMailer:
    """Sends through the Flask-Mail extension. Needs an app context."""
    name = "smtp"

    def send(self, recipient, subject, html, text=None, recipient_name=""):
        msg = Message(
            subject=subject,
            recipients=[(recipient_name, recipient) if recipient_name else recipient],
            body=text,
            html=html,
        )
        try:
            mail.send(msg)
        except Exception as e:
            logger.error(f"SMTP error sending email to {recipient}: {str(e)}", exc_info=True)
            raise MailDeliveryFailed(f"SMTP error: {e}")
        return {}


def build_mailer(config, timeout=None):
    """Pick the mail backend for this config, or None when none is configured."""
    if config.get("BREVO_API_KEY"):
        return BrevoMailer(
            config["BREVO_API_KEY"],
            config.get("MAIL_SENDER_EMAIL") or "noreply@yourapp.com",
            config.get("MAIL_SENDER_NAME") or config.get("APP_NAME") or "",
            timeout=timeout,
        )
    if config.get("MAIL_SERVER"):
        return SmtpMailer()
    return None


def verification_email(app_name, name, link, ttl_hours=24):
    """Subject, plain body and HTML body for the verification link email."""
    subject = f"Welcome to {app_name} - please verify your email"
    text = f"""
Hi {name or 'there'},

Welcome to {app_name}! Please confirm your email address by opening the link below:
{link}

This link will expire in {ttl_hours} hours.

If you did not create an account, you can ignore this email.
"""
    return subject, text, _verification_email_html(app_name, name, link, ttl_hours)


def _verification_email_html(app_name, name, link, ttl_hours) -> str:
    """Clean HTML template for the verification link email."""
    return f"""
    <!DOCTYPE html>
    <html>
    <head><meta charset="utf-8"><title>Verify Your Email</title></head>
    <body style="font-family: system-ui, sans-serif; max-width: 480px; margin: 0 auto; padding: 24px;">
        <h2 style="color: #1a1a2e;">Hi {escape(name or 'there')},</h2>
        <p>Welcome to <b>{escape(app_name)}</b>! Please confirm your email address.</p>
        <p style="margin: 24px 0;">
            <a href="{escape(link)}"
               style="display: inline-block; padding: 12px 24px; background-color: #16213e; color: white; text-decoration: none; border-radius: 6px; font-weight: bold;">
                Verify Email
            </a>
        </p>
        <p style="color: #666;">Or copy and paste this link into your browser:</p>
        <p style="color: #999; font-size: 12px; word-break: break-all;">{escape(link)}</p>
        <p style="color: #666;">This link will expire in {ttl_hours} hours.</p>
        <hr style="border: none; border-top: 1px solid #eee; margin: 24px 0;">
        <p style="font-size: 12px; color: #999;">If you did not create an account, you can ignore this email.</p>
    </body>
    </html>
    """


def welcome_email(app_name, name):
    """Subject, plain body and HTML body for the plain welcome message."""
    subject = f"Welcome to {app_name}"
    text = f"""
Hi {name or 'there'},

Welcome to {app_name}! You can now log in to your account and select your exam to start practicing.

Good luck!
"""
    html = f"""
    <!DOCTYPE html>
    <html>
    <head><meta charset="utf-8"><title>Welcome</title></head>
    <body style="font-family: system-ui, sans-serif; max-width: 480px; margin: 0 auto; padding: 24px;">
        <h2 style="color: #1a1a2e;">Hi {escape(name or 'there')},</h2>
        <p>Welcome to <b>{escape(app_name)}</b>!</p>
        <p>You can now log in to your account and select your exam to start practicing.</p>
        <br/>
        <p>Good luck!</p>
    </body>
    </html>
    """
    return subject, text, html
