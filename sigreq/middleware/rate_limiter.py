"""
Per-blueprint limits, applied on top of the module-level Limiter created in
``sigreq/__init__.py`` (which has no default limit). Keys are the remote IP.

Every call below fans out to one or more Graph requests, so the limits are
mostly there to keep a single browser tab from exhausting Graph throttling.
"""

import logging

logger = logging.getLogger(__name__)

SIGN_IN_LIMIT = "10/minute"
WRITE_LIMIT = "60/minute"
READ_LIMIT = "200/minute"

READ_METHODS = ["GET", "HEAD"]
WRITE_METHODS = ["POST", "PUT", "PATCH", "DELETE"]

_CRUD = [(READ_LIMIT, READ_METHODS), (WRITE_LIMIT, WRITE_METHODS)]

# blueprint name -> [(limit, methods or None for all)]; None means exempt
BLUEPRINT_LIMITS = {
    "auth": [(SIGN_IN_LIMIT, None)],
    "requisito": _CRUD,
    "funcionario": _CRUD,
    "setor": _CRUD,
    "movimentacao": _CRUD,
    "dashboard": [(READ_LIMIT, None)],
    "export": [(READ_LIMIT, None)],
    "debug": [(READ_LIMIT, None)],
    "auth_session": None,
    "health": None,
}


def init_rate_limits(app, limiter):
    """Attach BLUEPRINT_LIMITS to the registered blueprints (no-op when TESTING)."""
    if app.config.get("TESTING"):
        logger.debug("Rate limits off in testing")
        return

    for name, limits in BLUEPRINT_LIMITS.items():
        bp = app.blueprints.get(name)
        if bp is None:
            continue
        if limits is None:
            limiter.exempt(bp)
            continue
        for limit, methods in limits:
            limiter.limit(limit, methods=methods)(bp)

    logger.info("Rate limits: sign-in=%s read=%s write=%s", SIGN_IN_LIMIT, READ_LIMIT, WRITE_LIMIT)
