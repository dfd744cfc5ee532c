"""Data models for the enrichment engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# report field name -> PackageRecord attribute
FIELD_ATTRIBUTES: dict[str, str] = {
    "name": "name",
    "alias": "alias",
    "definedVersion": "defined_version",
    "installedVersion": "installed_version",
    "remoteVersion": "remote_version",
    "latestRemoteVersion": "latest_remote_version",
    "latestRemoteModified": "latest_remote_modified",
    "installedFrom": "installed_from",
    "link": "link",
    "licenseType": "license_type",
    "possibleLicenses": "possible_licenses",
    "licenseText": "license_text",
    "comment": "comment",
    "author": "author",
}

# Walker bookkeeping keys that never reach a final record.
_INTERNAL_KEYS = frozenset({"fullName", "scope", "version"})


@dataclass(frozen=True)
class PackageRecord:
    """One dependency under report.

    Records are immutable; each enrichment step returns a new one.
    Unrecognised input keys are kept in ``extra`` so that custom report
    columns filled by the dependency walker survive enrichment.
    """

    name: str
    alias: str = ""
    defined_version: str = ""
    installed_version: str | None = None
    remote_version: str | None = None
    latest_remote_version: str | None = None
    latest_remote_modified: str | None = None
    installed_from: str | None = None
    link: str | None = None
    license_type: str | None = None
    possible_licenses: tuple[str, ...] = ()
    license_text: str | None = None
    comment: str | None = None
    author: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PackageRecord:
        """Build a record from the walker's camelCase mapping.

        ``fullName`` (registry name) wins over ``name`` and ``version`` is
        accepted for ``definedVersion``.
        """
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in FIELD_ATTRIBUTES:
                values[FIELD_ATTRIBUTES[key]] = value
            elif key not in _INTERNAL_KEYS:
                extra[key] = value

        if data.get("fullName"):
            values["name"] = data["fullName"]
        if not values.get("defined_version") and data.get("version"):
            values["defined_version"] = data["version"]
        values["name"] = values.get("name") or ""
        values["alias"] = values.get("alias") or ""
        values["defined_version"] = values.get("defined_version") or ""
        values["possible_licenses"] = tuple(values.get("possible_licenses") or ())
        return cls(**values, extra=extra)

    def as_fields(self) -> dict[str, Any]:
        """Report-field view of the record (camelCase keys)."""
        fields = dict(self.extra)
        for key, attribute in FIELD_ATTRIBUTES.items():
            fields[key] = getattr(self, attribute)
        fields["possibleLicenses"] = list(self.possible_licenses)
        return fields
