"""
SIGREQ: admin console for requisitos, funcionários, setores and their
movimentações, stored in SharePoint lists and reached through Microsoft
Graph on behalf of the signed-in Azure AD user.

    from sigreq import create_app
    app = create_app()           # APP_ENV, else "development"
    app = create_app("testing")
"""

import logging
import os

from flask import Flask, abort, redirect, request, url_for
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from sigreq.config import config
from sigreq.core.exceptions import AuthenticationRequired, GraphError, NotFoundError, ValidationError
from sigreq.middleware.logging_config import configure_logging
from sigreq.middleware.rate_limiter import init_rate_limits
from sigreq.middleware.security_headers import init_security_headers
from sigreq.middleware.timing import init_request_timing
from sigreq.utils.errors import E, api_error

logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # no global limit; applied per blueprint
    storage_uri=os.getenv("REDIS_URL", "memory://"),
)


def create_app(config_name=None):
    """Build the app for ``config_name`` (a key of ``sigreq.config.config``)."""
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__)
    # Instantiated so ProductionConfig can refuse to start with missing settings
    app.config.from_object(config[config_name]())

    # ── Logging first, so extension setup is logged ──────────────────────
    configure_logging(app)

    # ── Rate limiter + CORS ──────────────────────────────────────────────
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()],
             supports_credentials=True)
    else:
        CORS(app)

    init_security_headers(app)
    init_request_timing(app)

    # ── Mutating API calls: bounded JSON bodies only ─────────────────────
    app.config.setdefault("MAX_CONTENT_LENGTH", 1 * 1024 * 1024)  # 1 MB

    @app.before_request
    def _guard_request():
        limit = app.config.get("MAX_CONTENT_LENGTH")
        if limit and (request.content_length or 0) > limit:
            abort(413)
        if (request.method in ("POST", "PUT", "PATCH") and request.path.startswith("/api/")
                and request.data and "json" not in (request.content_type or "")):
            abort(415)

    # ── Blueprints ───────────────────────────────────────────────────────
    from sigreq.blueprints.auth_bp import auth_bp, session_bp
    from sigreq.blueprints.dashboard_bp import dashboard_bp
    from sigreq.blueprints.debug_bp import debug_bp
    from sigreq.blueprints.export_bp import export_bp
    from sigreq.blueprints.funcionario_bp import funcionario_bp
    from sigreq.blueprints.health_bp import health_bp
    from sigreq.blueprints.movimentacao_bp import movimentacao_bp
    from sigreq.blueprints.requisito_bp import requisito_bp
    from sigreq.blueprints.setor_bp import setor_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(session_bp)
    app.register_blueprint(requisito_bp)
    app.register_blueprint(movimentacao_bp)
    app.register_blueprint(funcionario_bp)
    app.register_blueprint(setor_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(export_bp)
    app.register_blueprint(debug_bp)
    app.register_blueprint(health_bp)

    _register_error_handlers(app)

    # Limits are attached per blueprint, so this runs after registration
    init_rate_limits(app, limiter)

    return app


def _register_error_handlers(app):
    @app.errorhandler(AuthenticationRequired)
    def auth_required(e):
        if request.path.startswith("/api/"):
            return api_error(E.AUTH_REQUIRED, e.message, login_url=url_for("auth.login"))
        return redirect(url_for("auth.login", next=request.path))

    @app.errorhandler(GraphError)
    def graph_error(e):
        logger.error("Graph call failed: %s (status=%s)", e.message, e.status_code,
                     extra={"graph_status": e.status_code})
        return api_error(
            E.REMOTE,
            "Erro ao comunicar com o SharePoint",
            details=e.payload,
            operation=e.message,
            remote_status=e.status_code,
        )

    @app.errorhandler(NotFoundError)
    def entity_not_found(e):
        return api_error(E.NOT_FOUND, f"{e.resource} não encontrado",
                         resource=e.resource, id=e.resource_id)

    @app.errorhandler(ValidationError)
    def validation_failed(e):
        return api_error(E.VALIDATION_RULE, str(e), details=e.details)

    @app.errorhandler(404)
    def not_found(e):
        return api_error(E.NOT_FOUND, "Recurso não encontrado", path=request.path)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_error(E.VALIDATION_INVALID, "Método não permitido", status=405)

    @app.errorhandler(413)
    def too_large(e):
        return api_error(E.VALIDATION_INVALID, "Corpo da requisição muito grande", status=413)

    @app.errorhandler(415)
    def unsupported_media(e):
        return api_error(E.VALIDATION_INVALID, "Content-Type deve ser application/json", status=415)

    @app.errorhandler(429)
    def rate_limited(e):
        return api_error(E.RATE_LIMITED, "Muitas requisições", status=429, retry_after=e.description)

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return api_error(E.INTERNAL, "Erro interno do servidor")
