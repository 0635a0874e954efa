"""
Debug Service — raw SharePoint list payloads for troubleshooting mappings.

Returns Graph JSON untouched (besides paging) so an administrator can see
the internal column names a list actually uses.
"""

import logging

from sigreq.integrations.graph_gateway import graph_gateway
from sigreq.services.fields import decode_field_name

logger = logging.getLogger(__name__)


def get_list_raw(list_name: str) -> dict:
    logger.info("Fetching raw list %r", list_name, extra={"list_name": list_name})
    items = graph_gateway.list_items(list_name, error_message="Erro ao obter dados da lista")
    return {"value": items, "count": len(items)}


def get_item_raw(list_name: str, item_id) -> dict | None:
    return graph_gateway.get_item(list_name, item_id, error_message="Erro ao obter dados do item")


def get_all_lists() -> dict:
    return graph_gateway.get_lists()


def get_list_columns(list_name: str) -> dict | None:
    """List details with each column annotated with its decoded display name.

    ``decodedName`` is what the internal name spells, which differs from
    ``displayName`` for columns renamed after creation.
    """
    details = graph_gateway.get_list(list_name, expand="columns")
    if details is None:
        return None
    for column in details.get("columns", []):
        internal = column.get("name", "")
        column["decodedName"] = decode_field_name(internal)
        if "lookup" in column:
            column["lookupKey"] = f"{internal}LookupId"
    return details
