"""JSON error bodies shared by every blueprint and app-level handler.

Every error leaves the API as ``{"error": <pt-BR message>, "code": <ERR_*>}``
plus optional ``details`` and handler-specific keys (``login_url``,
``operation``, ``resource``...).
"""

from __future__ import annotations

from flask import jsonify


class E:
    """Error codes; the HTTP status each one implies lives in _STATUS."""

    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"
    VALIDATION_RULE = "ERR_VALIDATION_RULE"
    NOT_FOUND = "ERR_NOT_FOUND"
    AUTH_REQUIRED = "ERR_AUTH_REQUIRED"
    RATE_LIMITED = "ERR_RATE_LIMITED"
    REMOTE = "ERR_REMOTE"          # SharePoint / Graph or identity provider
    INTERNAL = "ERR_INTERNAL"


_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.VALIDATION_RULE: 422,
    E.NOT_FOUND: 404,
    E.AUTH_REQUIRED: 401,
    E.RATE_LIMITED: 429,
    E.REMOTE: 502,
    E.INTERNAL: 500,
}


def api_error(code: str, message: str, *, status: int | None = None,
              details: dict | str | None = None, **extra):
    """``(response, status)`` for a view to return.

    ``status`` overrides the code's usual status (405/413/415 reuse
    VALIDATION_INVALID). Empty ``details`` are left out of the body.
    """
    body: dict = {"error": message, "code": code}
    if details:
        body["details"] = details
    body.update(extra)
    return jsonify(body), status or _STATUS.get(code, 400)


def not_found(label: str, *, feminine: bool = False):
    """404 for a missing list item, e.g. ``not_found("Movimentação", feminine=True)``."""
    suffix = "encontrada" if feminine else "encontrado"
    return api_error(E.NOT_FOUND, f"{label} não {suffix}")
