"""
Console-wide exception hierarchy.

Services raise these types; the app factory registers one handler per type
so every blueprint answers with the same HTTP status and error body.

Usage:
    from sigreq.core.exceptions import GraphError, NotFoundError

    raise NotFoundError(resource="Setor", resource_id=7)
    raise GraphError("Erro ao obter setores", status_code=500, payload="{...}")
"""


class NotFoundError(Exception):
    """Raised when a write targets a list item that no longer exists.

    Reads never raise this: ``get_*_by_id`` returns ``None`` for absent
    items so callers can tell "absent" from "failed".

    Args:
        resource: Entity name (e.g. "Requisito", "Setor").
        resource_id: The SharePoint item id that was targeted.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input is well-formed but violates a business rule.

    Maps to HTTP 422.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown, keyed by field name.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class GraphError(Exception):
    """Raised when Microsoft Graph answers a list call with a non-2xx status.

    Args:
        message: What the console was trying to do ("Erro ao obter setores").
        status_code: HTTP status from Graph, or None for network failures.
        payload: The remote error body, kept as a string.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        payload: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.payload = payload or ""
        full = message
        if payload:
            full += f": {payload}"
        super().__init__(full)


class AuthenticationRequired(Exception):
    """Raised when no Graph token can be produced for the current session.

    Neither the cached access token nor a silent refresh worked; the user
    has to go through the interactive sign-in again.
    """

    def __init__(self, message: str = "Autenticação necessária") -> None:
        self.message = message
        super().__init__(message)
