"""
Reference resolution for denormalized names (setorNome, funcionarioNome).

Names are looked up at read time and never written back. A failed lookup is
a data-quality issue, not an error: it is logged and the caller falls back
to its placeholder. Only GraphError is degraded; AuthenticationRequired
still propagates.
"""

import logging

from sigreq.core.exceptions import GraphError
from sigreq.integrations.graph_gateway import graph_gateway
from sigreq.services.fields import ListSchema

logger = logging.getLogger(__name__)


def fetch_items_or_none(schema: ListSchema, *, what: str) -> list[dict] | None:
    """Read a whole secondary list, or None when it cannot be read."""
    try:
        return graph_gateway.list_items(schema.list_name, error_message=f"Erro ao obter {what}")
    except GraphError as exc:
        logger.warning(
            "Reference list %r unavailable, names degrade to placeholder: %s",
            schema.list_name, exc, extra={"list_name": schema.list_name},
        )
        return None


def fetch_name_map(schema: ListSchema, *, what: str) -> dict[str, str]:
    """id → name for every item of the referenced list ({} on failure)."""
    items = fetch_items_or_none(schema, what=what)
    if items is None:
        return {}
    return {
        str(item["id"]): schema.get(item.get("fields") or {}, "nome", "")
        for item in items
    }


def fetch_name(schema: ListSchema, item_id: str | None, *, what: str) -> str | None:
    """Name of one referenced item, or None if absent, unnamed or unreadable."""
    if not item_id:
        return None
    try:
        item = graph_gateway.get_item(schema.list_name, item_id, error_message=f"Erro ao obter {what}")
    except GraphError as exc:
        logger.warning(
            "Could not resolve %s id=%s: %s", what, item_id, exc,
            extra={"list_name": schema.list_name},
        )
        return None
    if item is None:
        logger.info("Referenced %s id=%s no longer exists", what, item_id)
        return None
    return schema.get(item.get("fields") or {}, "nome") or None
