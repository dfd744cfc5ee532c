"""Split flat license expressions such as ``(MIT OR Apache-2.0)``."""

from __future__ import annotations

import re

from license_report.core.config import NOT_AVAILABLE

_SEPARATOR_RE = re.compile(r"\s+(?:OR|AND|\||&|\+)\s+", re.IGNORECASE)


def parse_license_expression(value: str | None) -> list[str]:
    """Return the license identifiers of *value* in order of appearance.

    ``None``, ``""`` and ``"n/a"`` give an empty list. Parentheses are dropped
    and the rest is split on whitespace-delimited ``OR``, ``AND``, ``|``,
    ``&`` and ``+``. Input that yields no fragment comes back as a single
    element.
    """
    if not value or value.strip() in ("", NOT_AVAILABLE):
        return []
    cleaned = value.replace("(", "").replace(")", "").strip()
    parts = [part.strip() for part in _SEPARATOR_RE.split(cleaned) if part.strip()]
    return parts or [value.strip()]
