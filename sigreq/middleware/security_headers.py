"""Hardening headers for an API that only answers JSON, xlsx and redirects."""

from urllib.parse import urlsplit

_STATIC_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=(), payment=()",
}


def _content_security_policy(authority: str) -> str:
    # Nothing is rendered; the only outbound navigation is the Azure AD sign-in
    parts = urlsplit(authority)
    login_origin = f"{parts.scheme}://{parts.netloc}" if parts.netloc else authority
    return (
        "default-src 'none'; "
        "frame-ancestors 'none'; "
        "base-uri 'none'; "
        f"form-action 'self' {login_origin}"
    )


def init_security_headers(app):
    csp = _content_security_policy(app.config.get("AZURE_AD_AUTHORITY", ""))

    @app.after_request
    def _add_security_headers(response):
        response.headers.setdefault("Content-Security-Policy", csp)
        for name, value in _STATIC_HEADERS.items():
            response.headers.setdefault(name, value)
        response.headers.pop("Server", None)
        return response
