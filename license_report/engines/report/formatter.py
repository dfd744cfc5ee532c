"""Field-mapped formatting shared by every report renderer."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from license_report.core.config import NOT_AVAILABLE, ReportConfig
from license_report.engines.enrichment.models import PackageRecord
from license_report.exceptions import UnsupportedOutputError

Formatter = Callable[[Sequence[PackageRecord], ReportConfig], str]


def is_unset(value: Any) -> bool:
    """Missing, empty and ``"n/a"`` all count as "no value"."""
    if value is None:
        return True
    if isinstance(value, str):
        return value in ("", NOT_AVAILABLE)
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return not value
    return False


def format_records(
    records: Iterable[PackageRecord | Mapping[str, Any]],
    config: ReportConfig,
) -> list[dict[str, Any]]:
    """Map records onto ``config.fields``, in order, keyed by display label.

    Unset values take the field's configured default; a default that is
    itself falsy becomes ``"n/a"``. Fields outside ``config.fields`` are
    never emitted.
    """
    rows: list[dict[str, Any]] = []
    for record in records:
        values = record.as_fields() if isinstance(record, PackageRecord) else dict(record)
        row: dict[str, Any] = {}
        for field_name in config.fields:
            settings = config.field_settings(field_name)
            value = values.get(field_name)
            if is_unset(value):
                value = settings.value
            row[settings.label or field_name] = value if value else NOT_AVAILABLE
        rows.append(row)
    return rows


def render_json(rows: list[dict[str, Any]]) -> str:
    return json.dumps(rows, indent=2, ensure_ascii=False)


def format_as_json(records: Sequence[PackageRecord], config: ReportConfig) -> str:
    return render_json(format_records(records, config))


_FORMATTERS: dict[str, Formatter] = {
    "json": format_as_json,
    "tree": format_as_json,
}


def get_formatter(style: str) -> Formatter:
    """Formatter for *style*; table, csv and html are rendered elsewhere."""
    try:
        return _FORMATTERS[style]
    except KeyError:
        supported = ", ".join(sorted(_FORMATTERS))
        raise UnsupportedOutputError(
            f"unsupported output style {style!r} (supported: {supported})"
        ) from None
