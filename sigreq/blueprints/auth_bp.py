"""
Auth Blueprint — organization sign-in flow.

Endpoints:
  GET  /login           — Redirect to the Azure AD authorize endpoint
  GET  /auth/callback   — Code exchange; tokens go to the token store
  GET  /logout          — Clear the session and sign out at the IdP
  GET  /api/v1/auth/me  — Signed-in user, or 401 with the login URL
                          (session_bp, not rate limited)
"""

import logging

from flask import Blueprint, current_app, jsonify, redirect, request, session, url_for

from sigreq.services import token_service
from sigreq.services.token_service import SignInError
from sigreq.utils.errors import E, api_error

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)

_STATE_KEY = "auth_state"
_NONCE_KEY = "auth_nonce"
_NEXT_KEY = "auth_next"


@auth_bp.errorhandler(SignInError)
def handle_sign_in_error(e):
    code = E.REMOTE if e.status_code >= 500 else E.AUTH_REQUIRED
    return api_error(code, e.message, status=e.status_code, login_url=url_for("auth.login"))


def _redirect_uri() -> str:
    return current_app.config.get("AZURE_AD_REDIRECT_URI") or url_for("auth.callback", _external=True)


def _safe_next(target: str | None) -> str | None:
    # Only same-site paths; "//host" would be an open redirect
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return None


@auth_bp.route("/login", methods=["GET"])
def login():
    """Start the authorization code flow."""
    authorize_url, state, nonce = token_service.build_authorize_url(_redirect_uri())
    session[_STATE_KEY] = state
    session[_NONCE_KEY] = nonce
    next_url = _safe_next(request.args.get("next"))
    if next_url:
        session[_NEXT_KEY] = next_url
    else:
        session.pop(_NEXT_KEY, None)
    return redirect(authorize_url)


@auth_bp.route("/auth/callback", methods=["GET"])
def callback():
    error = request.args.get("error")
    if error:
        description = request.args.get("error_description", "Erro desconhecido")
        logger.warning("IdP returned error=%s: %s", error, description)
        return api_error(E.AUTH_REQUIRED, f"Erro no provedor de identidade: {error}",
                         status=400, details=description, login_url=url_for("auth.login"))

    code = request.args.get("code")
    if not code:
        return api_error(E.VALIDATION_REQUIRED, "Nenhum código de autorização recebido")

    expected_state = session.pop(_STATE_KEY, None)
    nonce = session.pop(_NONCE_KEY, None)
    if not expected_state or request.args.get("state") != expected_state:
        return api_error(E.VALIDATION_INVALID, "Parâmetro state inválido")

    token_service.handle_callback(code, _redirect_uri(), expected_nonce=nonce)
    return redirect(session.pop(_NEXT_KEY, None) or url_for("auth_session.me"))


@auth_bp.route("/logout", methods=["GET"])
def logout():
    user = token_service.current_user()
    token_service.sign_out()
    if user:
        logger.info("User signed out: %s", user.get("email"))
    logout_url = token_service.build_logout_url(url_for("auth.login", _external=True))
    return redirect(logout_url or url_for("auth.login"))


# Polled by the front end; kept apart from the sign-in routes so it is not
# throttled with them
session_bp = Blueprint("auth_session", __name__, url_prefix="/api/v1/auth")


@session_bp.route("/me", methods=["GET"])
def me():
    if not token_service.is_authenticated():
        return api_error(E.AUTH_REQUIRED, "Autenticação necessária", login_url=url_for("auth.login"))
    return jsonify({"user": token_service.current_user()})
