"""
Main Flask application entry point for the account verification service
"""
import logging
import os

from flask import Flask, jsonify

from config import Config, ServiceSettings
from services import RegistrationService, VerificationService, WelcomeService
from utils.identity_provider import AppwriteAdminClient
from utils.mail import build_mailer, mail
from utils.settings_helper import EXTENSION_KEY, ServiceRegistry


def _configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(level)


def create_app(config_class=Config, identity=None, mailer=None, spawn=None, clock=None):
    """
    Application factory pattern.

    Settings are frozen once here and handed to every service; identity, mailer,
    spawn and clock can be swapped out (tests, alternative deployments).
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    mail.init_app(app)

    settings = ServiceSettings.from_mapping(app.config)
    if identity is None:
        identity = AppwriteAdminClient.from_settings(settings)
    if mailer is None:
        mailer = build_mailer(app.config, timeout=settings.provider_timeout)

    registration_kwargs = {"spawn": spawn} if spawn is not None else {}
    clock_kwargs = {"clock": clock} if clock is not None else {}
    app.extensions[EXTENSION_KEY] = ServiceRegistry(
        settings=settings,
        registration=RegistrationService(settings, identity, **registration_kwargs),
        verification=VerificationService(settings, identity, **clock_kwargs),
        welcome=WelcomeService(settings, mailer, **clock_kwargs),
    )

    if not settings.token_secret:
        app.logger.warning("TOKEN_SECRET is not set; /verify and /send-welcome will report server_config")
    if not settings.provider_configured:
        app.logger.warning("Appwrite admin config missing (APPWRITE_ENDPOINT / APPWRITE_PROJECT / APPWRITE_API_KEY)")

    @app.errorhandler(404)
    def handle_404_error(e):
        return jsonify({"ok": False, "message": "Not found"}), 404

    @app.errorhandler(405)
    def handle_405_error(e):
        return jsonify({"ok": False, "message": "Method not allowed"}), 405

    @app.errorhandler(500)
    def handle_500_error(e):
        return jsonify({"ok": False, "message": "Internal server error. Please try again later."}), 500

    from routes import auth_bp, welcome_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(welcome_bp)

    return app


# WSGI entry point (Railway/Render/cPanel): gunicorn app:app
app = create_app()
application = app

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "false").lower() in ("true", "1"))
