"""
Token Service — organization sign-in (Azure AD / Entra ID) and Graph tokens.

  - OIDC Authorization Code flow against the tenant's v2.0 endpoints
  - Tokens held server-side in token_store; the session cookie only keeps
    the entry key and the user claims
  - Silent renewal with the refresh token; AuthenticationRequired when
    neither the cached token nor a renewal works

Flow
────
1. /login → build_authorize_url() → redirect to login.microsoftonline.com
2. IdP redirects back to /auth/callback?code=...&state=...
3. handle_callback() exchanges the code, stores tokens, returns the user
4. Every Graph call asks get_access_token() for a bearer token
"""

import logging
import secrets
import time
from urllib.parse import urlencode

import httpx
import jwt as pyjwt
from flask import current_app, session

from sigreq.core.exceptions import AuthenticationRequired
from sigreq.services import token_store

logger = logging.getLogger(__name__)

_SESSION_TOKEN_KEY = "graph_token_key"
_SESSION_USER_KEY = "user"

# Treat tokens as expired this many seconds early to avoid mid-request expiry
_EXPIRY_SKEW_SECONDS = 60

# Discovery documents are static per tenant; cache them for the process
_metadata_cache: dict[str, dict] = {}


# ═══════════════════════════════════════════════════════════════
# Exceptions
# ═══════════════════════════════════════════════════════════════
class SignInError(Exception):
    """Interactive sign-in could not be completed."""
    def __init__(self, message, status_code=400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class SignInProviderError(SignInError):
    def __init__(self, msg="O provedor de identidade retornou um erro"):
        super().__init__(msg, 502)


# ═══════════════════════════════════════════════════════════════
# OIDC metadata
# ═══════════════════════════════════════════════════════════════
def _discovery_url() -> str:
    cfg = current_app.config
    authority = cfg["AZURE_AD_AUTHORITY"].rstrip("/")
    return f"{authority}/{cfg['AZURE_AD_TENANT_ID']}/v2.0/.well-known/openid-configuration"


def _get_oidc_metadata() -> dict:
    """Fetch (and cache) the tenant's OIDC discovery document."""
    url = _discovery_url()
    cached = _metadata_cache.get(url)
    if cached:
        return cached
    try:
        resp = httpx.get(url, timeout=10)
        resp.raise_for_status()
        metadata = resp.json()
    except Exception as e:
        logger.error("OIDC discovery failed for %s: %s", url, e)
        raise SignInProviderError(f"Falha ao obter metadados OIDC: {e}")
    _metadata_cache[url] = metadata
    return metadata


def clear_metadata_cache() -> None:
    _metadata_cache.clear()


# ═══════════════════════════════════════════════════════════════
# Interactive sign-in
# ═══════════════════════════════════════════════════════════════
def build_authorize_url(redirect_uri: str) -> tuple[str, str, str]:
    """
    Build the authorization URL for the organization sign-in.
    Returns (authorize_url, state, nonce); state and nonce must be kept in
    the session for callback validation.
    """
    metadata = _get_oidc_metadata()
    authorize_endpoint = metadata.get("authorization_endpoint")
    if not authorize_endpoint:
        raise SignInProviderError("Metadados OIDC sem authorization_endpoint")

    state = secrets.token_urlsafe(32)
    nonce = secrets.token_urlsafe(16)

    params = {
        "client_id": current_app.config["AZURE_AD_CLIENT_ID"],
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "scope": current_app.config["GRAPH_SCOPES"],
        "state": state,
        "nonce": nonce,
        "response_mode": "query",
    }
    return f"{authorize_endpoint}?{urlencode(params)}", state, nonce


def handle_callback(code: str, redirect_uri: str, expected_nonce: str | None = None) -> dict:
    """
    Exchange the authorization code for tokens, keep them in the token store
    and return the signed-in user ({"name", "email", "oid"}).
    """
    metadata = _get_oidc_metadata()
    token_endpoint = metadata.get("token_endpoint")
    if not token_endpoint:
        raise SignInProviderError("Metadados OIDC sem token_endpoint")

    cfg = current_app.config
    try:
        resp = httpx.post(
            token_endpoint,
            data={
                "grant_type": "authorization_code",
                "client_id": cfg["AZURE_AD_CLIENT_ID"],
                "client_secret": cfg["AZURE_AD_CLIENT_SECRET"],
                "code": code,
                "redirect_uri": redirect_uri,
                "scope": cfg["GRAPH_SCOPES"],
            },
            timeout=15,
        )
        resp.raise_for_status()
        token_data = resp.json()
    except Exception as e:
        logger.error("OIDC token exchange failed: %s", e)
        raise SignInProviderError(f"Falha na troca do código de autorização: {e}")

    if not token_data.get("access_token"):
        raise SignInProviderError("Resposta do provedor sem access_token")

    user = _extract_user(token_data.get("id_token"), expected_nonce)
    _store_tokens(token_data, new_sign_in=True)
    session[_SESSION_USER_KEY] = user
    logger.info("User signed in: %s", user.get("email"))
    return user


def _extract_user(id_token: str | None, expected_nonce: str | None) -> dict:
    """Read the user claims out of the id_token.

    The token arrives straight from the token endpoint over TLS, so the
    signature is not re-validated here.
    """
    if not id_token:
        raise SignInError("Resposta do provedor sem id_token")
    try:
        claims = pyjwt.decode(id_token, options={"verify_signature": False})
    except pyjwt.PyJWTError as e:
        raise SignInError(f"id_token inválido: {e}")

    if expected_nonce and claims.get("nonce") != expected_nonce:
        raise SignInError("nonce do id_token não confere")

    email = claims.get("email") or claims.get("preferred_username") or claims.get("upn")
    if not email:
        raise SignInError("Não foi possível obter o e-mail do usuário")
    return {
        "name": claims.get("name") or email,
        "email": email,
        "oid": claims.get("oid") or claims.get("sub"),
    }


def _store_tokens(token_data: dict, new_sign_in: bool = False) -> None:
    """Write the token entry to the store; the session keeps only its key.

    A fresh sign-in drops whatever entry the session pointed at and gets a
    new key, so a key seen before sign-in never reaches a token.
    """
    key = session.get(_SESSION_TOKEN_KEY)
    previous = {}
    if new_sign_in:
        token_store.delete(key)
        key = None
    else:
        previous = token_store.load(key) or {}
    key = key or token_store.new_key()

    expires_in = int(token_data.get("expires_in", 3600))
    token_store.save(key, {
        "access_token": token_data["access_token"],
        # Azure AD may omit the refresh token on renewal; keep the old one
        "refresh_token": token_data.get("refresh_token") or previous.get("refresh_token"),
        "expires_at": time.time() + expires_in,
    })
    session[_SESSION_TOKEN_KEY] = key


def _current_entry() -> dict | None:
    return token_store.load(session.get(_SESSION_TOKEN_KEY))


# ═══════════════════════════════════════════════════════════════
# Bearer tokens for Graph
# ═══════════════════════════════════════════════════════════════
def get_access_token(force_refresh: bool = False) -> str:
    """Return a currently-valid Graph access token for the signed-in user.

    Renews silently with the refresh token when the cached token is about to
    expire (or when ``force_refresh`` is set after Graph rejected it).

    Raises:
        AuthenticationRequired: no session token, or renewal failed.
    """
    entry = _current_entry()
    if not entry:
        raise AuthenticationRequired("Nenhuma conta autenticada encontrada")

    if not force_refresh and time.time() < entry.get("expires_at", 0) - _EXPIRY_SKEW_SECONDS:
        return entry["access_token"]

    return _refresh(entry)


def _refresh(entry: dict) -> str:
    refresh_token = entry.get("refresh_token")
    if not refresh_token:
        sign_out()
        raise AuthenticationRequired("Sessão expirada")

    cfg = current_app.config
    try:
        token_endpoint = _get_oidc_metadata().get("token_endpoint")
        if not token_endpoint:
            raise SignInProviderError("Metadados OIDC sem token_endpoint")
        resp = httpx.post(
            token_endpoint,
            data={
                "grant_type": "refresh_token",
                "client_id": cfg["AZURE_AD_CLIENT_ID"],
                "client_secret": cfg["AZURE_AD_CLIENT_SECRET"],
                "refresh_token": refresh_token,
                "scope": cfg["GRAPH_SCOPES"],
            },
            timeout=15,
        )
        resp.raise_for_status()
        token_data = resp.json()
    except (httpx.HTTPError, SignInError, ValueError) as e:
        logger.warning("Silent token renewal failed: %s", e)
        sign_out()
        raise AuthenticationRequired("Sessão expirada, entre novamente")

    if not token_data.get("access_token"):
        sign_out()
        raise AuthenticationRequired("Sessão expirada, entre novamente")

    _store_tokens(token_data)
    logger.debug("Graph token renewed silently")
    return token_data["access_token"]


# ═══════════════════════════════════════════════════════════════
# Session helpers
# ═══════════════════════════════════════════════════════════════
def current_user() -> dict | None:
    return session.get(_SESSION_USER_KEY)


def is_authenticated() -> bool:
    return _current_entry() is not None and bool(session.get(_SESSION_USER_KEY))


def sign_out() -> None:
    token_store.delete(session.pop(_SESSION_TOKEN_KEY, None))
    session.pop(_SESSION_USER_KEY, None)


def build_logout_url(post_logout_redirect_uri: str) -> str | None:
    """Return the IdP end-session URL, or None when the tenant has none."""
    try:
        endpoint = _get_oidc_metadata().get("end_session_endpoint")
    except SignInError:
        return None
    if not endpoint:
        return None
    return f"{endpoint}?{urlencode({'post_logout_redirect_uri': post_logout_redirect_uri})}"
