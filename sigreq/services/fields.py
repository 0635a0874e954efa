"""
SharePoint list-item field helpers.

SharePoint stores every column under an *internal* name in which each
character outside ``[A-Za-z0-9_]`` is written as ``_xHHHH_`` (UTF-16 code
unit, lowercase hex). "Descrição" becomes ``Descri_x00e7__x00e3_o`` and
"Funcionário(s)" becomes ``Funcion_x00e1_rio_x0028_s_x0029_``. Lookup
columns are read and written through a ``<name>LookupId`` companion key.

Columns renamed after creation keep the internal name they were born with,
so the raw keys in each ``ListSchema`` are literal and must not be derived
from the display names at runtime. The codec below is used for diagnostics
and for building keys of new columns.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import current_app

logger = logging.getLogger(__name__)

_ESCAPE_RE = re.compile(r"_x([0-9a-fA-F]{4})_")
_DATE_FORMAT = "%d/%m/%Y %H:%M"


def encode_field_name(display_name: str) -> str:
    """Return the SharePoint internal name for a column display name."""
    out = []
    for ch in display_name:
        if ch.isascii() and (ch.isalnum() or ch == "_"):
            out.append(ch)
            continue
        # Characters outside the BMP are escaped as a surrogate pair
        encoded = ch.encode("utf-16-be")
        for i in range(0, len(encoded), 2):
            out.append(f"_x{encoded[i:i + 2].hex()}_")
    return "".join(out)


def decode_field_name(internal_name: str) -> str:
    """Reverse ``encode_field_name``: ``Situa_x00e7__x00e3_o`` → ``Situação``."""
    units = []
    pos = 0
    for match in _ESCAPE_RE.finditer(internal_name):
        units.append(internal_name[pos:match.start()].encode("utf-16-be"))
        units.append(bytes.fromhex(match.group(1)))
        pos = match.end()
    units.append(internal_name[pos:].encode("utf-16-be"))
    return b"".join(units).decode("utf-16-be", errors="replace")


def lookup_id(value) -> str | None:
    """Normalize a lookup id from Graph (str, int or empty) to ``str | None``."""
    if value is None or value == "" or value == 0:
        return None
    return str(value)


def parse_created(value: str | None) -> datetime | None:
    """Parse a Graph ISO-8601 timestamp ("2024-03-01T12:30:00Z")."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_data(value: str | None, tz_name: str | None = None) -> str:
    """Render a Graph timestamp as ``dd/mm/aaaa HH:MM`` in the display timezone.

    Empty input gives ""; an unparsable value is returned unchanged.
    """
    if not value:
        return ""
    parsed = parse_created(value)
    if parsed is None:
        logger.warning("Could not parse timestamp %r", value)
        return value
    if tz_name is None:
        tz_name = current_app.config.get("DISPLAY_TIMEZONE", "UTC")
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown DISPLAY_TIMEZONE %r, using UTC", tz_name)
        tz = timezone.utc
    return parsed.astimezone(tz).strftime(_DATE_FORMAT)


@dataclass(frozen=True)
class ListSchema:
    """Binds an entity to its SharePoint list and raw column keys.

    Attributes:
        list_config_key: Flask config key holding the list display name.
        fields: Logical attribute (API name) → raw SharePoint key. Only
                attributes listed here are ever written to the list.
    """

    list_config_key: str
    fields: dict[str, str] = field(default_factory=dict)

    @property
    def list_name(self) -> str:
        return current_app.config[self.list_config_key]

    def raw_key(self, attribute: str) -> str:
        return self.fields[attribute]

    def get(self, raw_fields: dict, attribute: str, default=None):
        """Read one logical attribute out of a raw field dictionary."""
        value = raw_fields.get(self.fields[attribute])
        if value is None or value == "":
            return default
        return value

    def to_fields(self, data: dict) -> dict:
        """Translate logical attributes into the raw ``fields`` payload.

        Keys not declared in the schema are dropped. ``None`` lookup values
        are sent as-is so Graph clears the column.
        """
        payload = {}
        for attribute, raw in self.fields.items():
            if attribute in data:
                payload[raw] = data[attribute]
        return payload
