"""
In-memory filtering and sorting of already-fetched records.

List pages filter on whatever the remote list returned; nothing here issues
Graph queries. Records are the ``to_dict()`` shapes (camelCase keys).
"""

from __future__ import annotations

import unicodedata
from datetime import datetime

from sigreq.core.exceptions import ValidationError

_DISPLAY_DATE_FORMAT = "%d/%m/%Y %H:%M"
_DATE_FIELDS = frozenset({"dataCriacao"})


def normalize_text(value) -> str:
    """Casefold and strip accents: "Funcionário" → "funcionario"."""
    decomposed = unicodedata.normalize("NFKD", str(value))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _sort_value(record: dict, field: str):
    value = record.get(field)
    if value is None or value == "":
        return (1, "")
    if field in _DATE_FIELDS:
        try:
            return (0, datetime.strptime(value, _DISPLAY_DATE_FORMAT))
        except ValueError:
            return (1, "")
    if isinstance(value, (int, float)):
        return (0, value)
    return (0, normalize_text(value))


def apply_filters(
    records: list[dict],
    *,
    equals: dict | None = None,
    search: str | None = None,
    search_fields: tuple[str, ...] = (),
    sort: str | None = None,
    order: str = "asc",
    sortable: tuple[str, ...] = (),
) -> list[dict]:
    """Filter by exact attribute values, accent-insensitive search, then sort.

    Args:
        equals: attribute → wanted value; None/"" values are ignored.
                Compared as strings so "3" matches a lookup id 3.
        search: substring matched against any of ``search_fields``.
        sort: attribute to sort by; must be in ``sortable``.
        order: "asc" or "desc". Empty values always sort last.
    """
    result = records

    for attribute, wanted in (equals or {}).items():
        if wanted is None or wanted == "":
            continue
        wanted = str(wanted)
        result = [r for r in result if r.get(attribute) is not None and str(r.get(attribute)) == wanted]

    if search:
        needle = normalize_text(search.strip())
        result = [
            r for r in result
            if any(needle in normalize_text(r.get(f) or "") for f in search_fields)
        ]

    if sort:
        if sort not in sortable:
            raise ValidationError(
                f"Campo de ordenação inválido: {sort}",
                details={"sort": f"use um de {', '.join(sortable)}"},
            )
        if order not in ("asc", "desc"):
            raise ValidationError(f"Ordem inválida: {order}", details={"order": "use asc ou desc"})
        filled = [r for r in result if _sort_value(r, sort)[0] == 0]
        empty = [r for r in result if _sort_value(r, sort)[0] == 1]
        filled.sort(key=lambda r: _sort_value(r, sort)[1], reverse=(order == "desc"))
        result = filled + empty

    return result
