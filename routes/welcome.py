"""
Welcome email routes: verification-link email and plain greeting.
"""
from flask import Blueprint, current_app, jsonify, request

from routes.auth import GENERIC_ERROR, NOT_CONFIGURED_MSG, _json_body, provider_error_response
from utils.errors import ProviderCallFailed, ServerMisconfigured, ValidationFailed
from utils.settings_helper import get_services

welcome_bp = Blueprint('welcome', __name__)

MAIL_NOT_CONFIGURED_MSG = "Email service is not configured. Please contact support."


@welcome_bp.route('/send-welcome', methods=['POST'])
def send_welcome():
    """
    Mint a verification token and email the link.
    Input (JSON): email, name (optional), accountId.
    """
    data = _json_body()
    try:
        result = get_services().welcome.send_verification(
            data.get("email", ""), data.get("name", ""), data.get("accountId", ""),
            base_url=request.url_root,
        )
    except ValidationFailed as e:
        return jsonify({"ok": False, "message": e.message}), e.status_code
    except ServerMisconfigured as e:
        current_app.logger.error(f"send-welcome: {e.message}")
        return jsonify({"ok": False, "message": NOT_CONFIGURED_MSG}), 500
    except ProviderCallFailed as e:
        return provider_error_response(e)
    except Exception as e:
        current_app.logger.error(f"send-welcome error: {str(e)}", exc_info=True)
        return jsonify({"ok": False, "message": GENERIC_ERROR}), 500

    if not result.sent:
        return jsonify({"ok": True, "sent": False, "link": result.link})
    return jsonify({"ok": True, "sent": True})


@welcome_bp.route('/welcome', methods=['POST'])
def welcome():
    """Send the plain welcome message. Input (JSON): email, name (optional)."""
    data = _json_body()
    try:
        get_services().welcome.send_greeting(data.get("email", ""), data.get("name", ""))
    except ValidationFailed as e:
        return jsonify({"ok": False, "message": e.message}), e.status_code
    except ServerMisconfigured:
        return jsonify({"ok": False, "message": MAIL_NOT_CONFIGURED_MSG}), 500
    except ProviderCallFailed as e:
        return provider_error_response(e)
    except Exception as e:
        current_app.logger.error(f"welcome error: {str(e)}", exc_info=True)
        return jsonify({"ok": False, "message": GENERIC_ERROR}), 500
    return jsonify({"ok": True})
