"""
Settings per environment, chosen by APP_ENV (development | testing | production).

Everything that names a tenant, a Graph endpoint or a SharePoint list comes
from the environment so one build can point at any site.
"""

import os
import secrets

# Random per process outside production; sessions do not survive a restart
_DEV_SECRET = secrets.token_hex(32)


class Config:
    """Defaults; read once at import time."""

    SECRET_KEY = os.getenv("SECRET_KEY", _DEV_SECRET)
    DEBUG = False
    TESTING = False

    # The cookie carries the user and a key into the token store, never tokens
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # Azure AD / Entra ID (organization sign-in)
    AZURE_AD_TENANT_ID = os.getenv("AZURE_AD_TENANT_ID", "common")
    AZURE_AD_CLIENT_ID = os.getenv("AZURE_AD_CLIENT_ID", "")
    AZURE_AD_CLIENT_SECRET = os.getenv("AZURE_AD_CLIENT_SECRET", "")
    AZURE_AD_AUTHORITY = os.getenv("AZURE_AD_AUTHORITY", "https://login.microsoftonline.com")
    AZURE_AD_REDIRECT_URI = os.getenv("AZURE_AD_REDIRECT_URI", "")
    GRAPH_SCOPES = os.getenv(
        "GRAPH_SCOPES",
        "openid profile email offline_access User.Read Sites.ReadWrite.All",
    )

    # Microsoft Graph / SharePoint list store
    GRAPH_BASE_URL = os.getenv("GRAPH_BASE_URL", "https://graph.microsoft.com/v1.0")
    SHAREPOINT_SITE = os.getenv("SHAREPOINT_SITE", "luizotg.sharepoint.com:/sites/Selettra:")
    GRAPH_TIMEOUT = int(os.getenv("GRAPH_TIMEOUT", "30"))
    LIST_PAGE_SIZE = int(os.getenv("LIST_PAGE_SIZE", "1000"))
    LIST_MAX_ITEMS = int(os.getenv("LIST_MAX_ITEMS", "5000"))

    LIST_REQUISITOS = os.getenv("LIST_REQUISITOS", "Lista de Requisitos")
    LIST_FUNCIONARIOS = os.getenv("LIST_FUNCIONARIOS", "Lista de Funcionários")
    LIST_SETORES = os.getenv("LIST_SETORES", "Lista de Setores")
    LIST_MOVIMENTACOES = os.getenv("LIST_MOVIMENTACOES", "Lista de Movimentação")

    # Presentation
    DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "America/Sao_Paulo")

    # CORS
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Graph tokens, keyed by a random id kept in the session cookie
    TOKEN_STORE_URL = os.getenv("TOKEN_STORE_URL", os.getenv("REDIS_URL", "memory://"))
    TOKEN_STORE_TTL_SECONDS = int(os.getenv("TOKEN_STORE_TTL_SECONDS", str(12 * 3600)))

    # Rate limiter storage
    RATELIMIT_STORAGE_URI = os.getenv("REDIS_URL", "memory://")


class DevelopmentConfig(Config):
    """Local run against a real tenant with debug logging."""

    DEBUG = True


class TestingConfig(Config):
    """Fixed fake tenant and list names; Graph is faked in tests."""

    TESTING = True
    SECRET_KEY = "test-secret-key"
    AZURE_AD_TENANT_ID = "test-tenant"
    AZURE_AD_CLIENT_ID = "test-client-id"
    AZURE_AD_CLIENT_SECRET = "test-client-secret"
    AZURE_AD_REDIRECT_URI = "http://localhost/auth/callback"
    GRAPH_BASE_URL = "https://graph.test/v1.0"
    SHAREPOINT_SITE = "contoso.sharepoint.com:/sites/Teste:"
    LIST_PAGE_SIZE = 2
    LIST_MAX_ITEMS = 50
    RATELIMIT_ENABLED = False
    TOKEN_STORE_URL = "memory://"


class ProductionConfig(Config):
    """Refuses to start without a stable secret and real Azure AD credentials."""

    DEBUG = False
    SESSION_COOKIE_SECURE = True
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")  # Must be set explicitly in production

    def __init__(self):
        if not os.getenv("SECRET_KEY"):
            raise RuntimeError("SECRET_KEY environment variable must be set in production")
        if not self.AZURE_AD_CLIENT_ID or not self.AZURE_AD_CLIENT_SECRET:
            raise RuntimeError(
                "AZURE_AD_CLIENT_ID and AZURE_AD_CLIENT_SECRET must be set in production"
            )
        if self.AZURE_AD_TENANT_ID == "common":
            raise RuntimeError("AZURE_AD_TENANT_ID must name the organization tenant in production")


# APP_ENV -> settings class
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
