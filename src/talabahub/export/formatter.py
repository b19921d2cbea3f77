"""Record-to-CSV conversion.

Escaping: a value is quoted, with inner quotes doubled, if and only if it
contains a comma, a double quote or a newline. Rows are joined with ``\\n``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime, timezone
from typing import Any

_NEEDS_QUOTING = (",", '"', "\n")

_ISO_DATE_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?$"
)

EXPORT_DATETIME_FORMAT = "%d/%m/%Y, %H:%M:%S"
EXPORT_DATE_FORMAT = "%d/%m/%Y"

YES = "Ha"
NO = "Yo'q"


def iso_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_datetime(value: Any) -> datetime | None:  # noqa: ANN401
    """Datetime from a ``datetime``/``date`` or an ISO-8601 string; otherwise None."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and _ISO_DATE_RE.match(value.strip()):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def _to_text(value: Any) -> str:  # noqa: ANN401
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return iso_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    if isinstance(value, (list, tuple)):
        return ", ".join(_to_text(item) for item in value)
    return str(value)


def escape_csv_value(value: Any) -> str:  # noqa: ANN401
    text = _to_text(value)
    if any(ch in text for ch in _NEEDS_QUOTING):
        return '"' + text.replace('"', '""') + '"'
    return text


def convert_to_csv(records: Sequence[Mapping[str, Any]], headers: Sequence[str] | None = None) -> str:
    """Render ``records`` as CSV text.

    Without ``headers`` the columns are the keys of the first record, so keys
    that only appear in later records are dropped. Pass ``headers`` whenever
    the records are not uniform.
    """
    if not records:
        return ""
    columns = list(headers) if headers is not None else list(records[0].keys())
    lines = [",".join(escape_csv_value(h) for h in columns)]
    lines.extend(",".join(escape_csv_value(record.get(h)) for h in columns) for record in records)
    return "\n".join(lines)


def format_data_for_export(
    records: Iterable[Mapping[str, Any]],
    field_map: Mapping[str, str] | None = None,
) -> list[dict[str, Any]]:
    """Rename keys and turn values into display strings.

    Dates become ``dd/mm/YYYY, HH:MM:SS``, booleans ``Ha``/``Yo'q``, mappings
    JSON and lists comma-joined text. Everything else passes through.
    """
    field_map = field_map or {}
    formatted: list[dict[str, Any]] = []
    for record in records:
        row: dict[str, Any] = {}
        for key, value in record.items():
            export_key = field_map.get(key) or key
            if isinstance(value, bool):
                row[export_key] = YES if value else NO
            elif (parsed := parse_datetime(value)) is not None:
                row[export_key] = parsed.strftime(EXPORT_DATETIME_FORMAT)
            elif isinstance(value, Mapping):
                row[export_key] = json.dumps(value, ensure_ascii=False, default=str)
            elif isinstance(value, (list, tuple)):
                row[export_key] = ", ".join(str(item) for item in value)
            else:
                row[export_key] = value
        formatted.append(row)
    return formatted
