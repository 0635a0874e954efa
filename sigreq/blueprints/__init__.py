"""
SIGREQ — Sistema de Gestão de Requisitos
Blueprint registry and request helpers shared by the entity blueprints.
"""

from flask import jsonify, request

from sigreq.services.filters import apply_filters
from sigreq.utils.errors import E, api_error


def get_json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def require_fields(data: dict, *names, partial: bool = False):
    """Return a 400 response when a required field is missing or blank.

    With ``partial`` (PUT) only fields present in the body are checked, so
    an update may omit them but never blank them out.
    """
    for name in names:
        if partial and name not in data:
            continue
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            return api_error(E.VALIDATION_REQUIRED, f"{name} é obrigatório", details={name: "obrigatório"})
    return None


def list_response(
    records: list[dict],
    *,
    equals: dict | None = None,
    search_fields: tuple[str, ...] = (),
    sortable: tuple[str, ...] = (),
):
    """Filter/sort already-fetched records from the query string and wrap them.

    Query params:
        q     — accent-insensitive substring over ``search_fields``
        sort  — attribute name (one of ``sortable``)
        order — asc | desc (default asc)
    """
    items = apply_filters(
        records,
        equals=equals,
        search=request.args.get("q"),
        search_fields=search_fields,
        sort=request.args.get("sort") or None,
        order=(request.args.get("order") or "asc").lower(),
        sortable=sortable,
    )
    return jsonify({"items": items, "total": len(items)})
