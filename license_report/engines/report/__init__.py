"""Report engine — map enriched records onto the configured output schema."""

from license_report.engines.report.formatter import (
    format_records,
    get_formatter,
    is_unset,
    render_json,
)

__all__ = ["format_records", "get_formatter", "is_unset", "render_json"]
