"""
Health endpoints for the load balancer and the orchestrator.

``/api/v1/health`` and ``/live`` only say the process answers. ``/ready``
also checks the Azure AD / Graph settings and answers 503 while any is
missing, so traffic is held back without the process being restarted.
None of them calls Graph: without a signed-in user there is no token.
"""

import logging

from flask import Blueprint, current_app, jsonify

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/v1/health")

_REQUIRED_SETTINGS = (
    "AZURE_AD_CLIENT_ID",
    "AZURE_AD_CLIENT_SECRET",
    "GRAPH_BASE_URL",
    "SHAREPOINT_SITE",
)


@health_bp.route("", methods=["GET"])
def health():
    return jsonify({"status": "ok", "app": "SIGREQ"})


@health_bp.route("/live", methods=["GET"])
def live():
    """The process answers; restarting it would not fix anything else."""
    return jsonify({"status": "ok"})


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Ready only with the settings the console cannot work without."""
    cfg = current_app.config
    missing = [key for key in _REQUIRED_SETTINGS if not cfg.get(key)]
    checks = {
        "config": {"status": "error", "missing": missing} if missing else {"status": "ok"},
        "lists": {
            "requisitos": cfg.get("LIST_REQUISITOS"),
            "funcionarios": cfg.get("LIST_FUNCIONARIOS"),
            "setores": cfg.get("LIST_SETORES"),
            "movimentacoes": cfg.get("LIST_MOVIMENTACOES"),
        },
        "app": {
            "name": "SIGREQ",
            "debug": current_app.debug,
            "testing": current_app.testing,
        },
    }
    if missing:
        logger.error("Readiness check: missing settings %s", ", ".join(missing))

    status_code = 503 if missing else 200
    return jsonify({
        "status": "degraded" if missing else "healthy",
        "checks": checks,
    }), status_code
