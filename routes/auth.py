"""
Authentication routes: server-side registration with auto-login, the email verification
link, and the Appwrite-sent verification email.
"""
from flask import Blueprint, current_app, jsonify, redirect, request

from utils.errors import ProviderCallFailed, ServerMisconfigured, ValidationFailed
from utils.settings_helper import get_services

auth_bp = Blueprint('auth', __name__)

GENERIC_ERROR = "server error"
NOT_CONFIGURED_MSG = "Server not configured"


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def provider_error_response(e):
    """500 JSON for a failed provider call; raw status/body only in DEBUG."""
    current_app.logger.error(f"{e.message}: status={e.status} body={e.body}")
    body = {"ok": False, "message": e.message}
    if current_app.config.get('DEBUG'):
        body["details"] = e.diagnostics()
    return jsonify(body), e.status_code


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Create an account and return a short-lived login secret.
    Input (JSON): name (optional), email, password.
    """
    data = _json_body()
    try:
        result = get_services().registration.register(
            data.get("name", ""), data.get("email", ""), data.get("password", "")
        )
    except ValidationFailed as e:
        return jsonify({"ok": False, "message": e.message}), e.status_code
    except ServerMisconfigured:
        current_app.logger.error("register: Appwrite admin config missing")
        return jsonify({"ok": False, "message": NOT_CONFIGURED_MSG}), 500
    except ProviderCallFailed as e:
        return provider_error_response(e)
    except Exception as e:
        current_app.logger.error(f"api/register error: {str(e)}", exc_info=True)
        return jsonify({"ok": False, "message": GENERIC_ERROR}), 500

    return jsonify({
        "ok": True,
        "accountId": result.account_id,
        "credentialSecret": result.credential_secret,
        "credentialExpirySeconds": result.credential_expiry_seconds,
    })


@auth_bp.route('/verify', methods=['GET'])
def verify():
    """Consume a verification token. Always answers with a redirect."""
    token = request.args.get("token", "")
    user_agent = request.headers.get("User-Agent", "")
    outcome = get_services().verification.complete(token, user_agent)
    return redirect(outcome.location, code=302)


@auth_bp.route('/send-verification', methods=['POST'])
def send_verification():
    """
    Have Appwrite send its built-in verification email.
    Input (JSON): email, redirectUrl (optional).
    """
    data = _json_body()
    try:
        result = get_services().verification.request_provider_email(
            data.get("email", ""), data.get("redirectUrl", "")
        )
    except ValidationFailed as e:
        return jsonify({"ok": False, "message": e.message}), e.status_code
    except ServerMisconfigured:
        current_app.logger.error("send-verification: Appwrite admin config missing")
        return jsonify({"ok": False, "message": NOT_CONFIGURED_MSG}), 500
    except ProviderCallFailed as e:
        return provider_error_response(e)
    except Exception as e:
        current_app.logger.error(f"send-verification error: {str(e)}", exc_info=True)
        return jsonify({"ok": False, "message": GENERIC_ERROR}), 500
    return jsonify({"ok": True, "result": result})
