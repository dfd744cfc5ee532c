"""Report configuration — defaults, config-file merge and validation.

The on-disk format is the camelCase JSON used by license-report config files::

    {
      "fields": ["name", "licenseType", "installedVersion"],
      "licenseType": {"value": "n/a", "label": "license type"},
      "registry": "https://registry.npmjs.org/",
      "httpRetryOptions": {"limit": 5},
      "httpTimeoutOptions": {"request": 30000},
      "exclude": ["left-pad"]
    }

Every top-level key naming a field (known or listed in ``fields``) whose value
is an object is read as that field's ``{value, label}`` settings.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from license_report.core.npmrc import load_npmrc
from license_report.exceptions import ConfigError

NOT_AVAILABLE = "n/a"

DEFAULT_REGISTRY = "https://registry.npmjs.org/"

DEFAULT_FIELDS = [
    "department",
    "relatedTo",
    "name",
    "alias",
    "licensePeriod",
    "material",
    "licenseType",
    "link",
    "definedVersion",
    "installedVersion",
    "remoteVersion",
    "author",
]

DEFAULT_FIELD_CONFIG: dict[str, dict[str, Any]] = {
    "department": {"value": "kessler", "label": "department"},
    "relatedTo": {"value": "stuff", "label": "related to"},
    "licensePeriod": {"value": "perpetual", "label": "license period"},
    "material": {"value": "material", "label": "material / not material"},
    "name": {"value": "", "label": "name"},
    "alias": {"value": "", "label": "alias"},
    "licenseType": {"value": NOT_AVAILABLE, "label": "license type"},
    "link": {"value": NOT_AVAILABLE, "label": "link"},
    "installedFrom": {"value": NOT_AVAILABLE, "label": "installed from"},
    "remoteVersion": {"value": "", "label": "remote version"},
    "installedVersion": {"value": NOT_AVAILABLE, "label": "installed version"},
    "definedVersion": {"value": NOT_AVAILABLE, "label": "defined version"},
    "latestRemoteVersion": {"value": NOT_AVAILABLE, "label": "latest remote version"},
    "latestRemoteModified": {"value": NOT_AVAILABLE, "label": "latest remote modified"},
    "author": {"value": NOT_AVAILABLE, "label": "author"},
    "comment": {"value": "", "label": "comment"},
    "requires": {"value": "", "label": "requires"},
    "dependencyLoop": {"value": "", "label": "dependencyLoop"},
    "licenseText": {"value": NOT_AVAILABLE, "label": "license text"},
    "possibleLicenses": {"value": [], "label": "possible licenses"},
}

DEFAULT_CONFIG: dict[str, Any] = {
    "output": "json",
    "registry": DEFAULT_REGISTRY,
    "useNpmrc": False,
    "npmrc": None,
    "npmTokenEnvVar": "NPM_TOKEN",
    "scopeRegistries": {},
    "registryTokenEnvVars": {},
    "exclude": [],
    "fields": DEFAULT_FIELDS,
    "httpRetryOptions": {"limit": 5},
    "httpTimeoutOptions": {"request": 30000},
    "concurrency": 5,
    **DEFAULT_FIELD_CONFIG,
}


class FieldConfig(BaseModel):
    """Default value and display label of one output field."""

    model_config = ConfigDict(frozen=True)

    value: Any = ""
    label: str = ""


class HttpRetryOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    limit: int = Field(5, ge=0)


class HttpTimeoutOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    request: int = Field(30000, gt=0)  # milliseconds


class RegistrySettings(BaseModel):
    """Which registry serves which package, and where its token lives."""

    model_config = ConfigDict(frozen=True)

    registry: str = DEFAULT_REGISTRY
    scope_registries: dict[str, str] = Field(default_factory=dict)
    registry_token_env_vars: dict[str, str] = Field(default_factory=dict)
    npm_token_env_var: str = "NPM_TOKEN"


class ReportConfig(BaseModel):
    """Fully resolved configuration handed to every enrichment component."""

    model_config = ConfigDict(frozen=True)

    fields: list[str] = Field(default_factory=lambda: list(DEFAULT_FIELDS))
    field_config: dict[str, FieldConfig] = Field(default_factory=dict)
    output: str = "json"
    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    exclude: frozenset[str] = frozenset()
    http_retry: HttpRetryOptions = Field(default_factory=HttpRetryOptions)
    http_timeout: HttpTimeoutOptions = Field(default_factory=HttpTimeoutOptions)
    concurrency: int = Field(5, ge=1)

    @property
    def request_timeout(self) -> float:
        """Per-request timeout in seconds."""
        return self.http_timeout.request / 1000

    def wants(self, field_name: str) -> bool:
        return field_name in self.fields

    def field_settings(self, field_name: str) -> FieldConfig:
        return self.field_config.get(field_name) or FieldConfig()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ReportConfig:
        """Build a config from the camelCase config-file layout."""
        fields = data.get("fields", DEFAULT_FIELDS)
        if not isinstance(fields, list):
            raise ConfigError(f"'fields' must be a list, got {type(fields).__name__}")
        known = set(DEFAULT_FIELD_CONFIG) | {f for f in fields if isinstance(f, str)}
        field_config = {
            key: value for key, value in data.items() if key in known and isinstance(value, Mapping)
        }
        try:
            return cls.model_validate(
                {
                    "fields": fields,
                    "field_config": field_config,
                    "output": data.get("output", "json"),
                    "registry": {
                        "registry": data.get("registry") or DEFAULT_REGISTRY,
                        "scope_registries": data.get("scopeRegistries") or {},
                        "registry_token_env_vars": data.get("registryTokenEnvVars") or {},
                        "npm_token_env_var": data.get("npmTokenEnvVar") or "NPM_TOKEN",
                    },
                    "exclude": data.get("exclude") or [],
                    "http_retry": data.get("httpRetryOptions") or {},
                    "http_timeout": data.get("httpTimeoutOptions") or {},
                    "concurrency": data.get("concurrency", 5),
                }
            )
        except ValidationError as exc:
            raise ConfigError(f"invalid report configuration: {exc}") from exc


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        loaded = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")
    return loaded


def _apply_npmrc(data: dict[str, Any]) -> None:
    """Fill registry settings from an ``.npmrc``; explicit config entries win."""
    npmrc_path = Path(data["npmrc"]) if data.get("npmrc") else Path.home() / ".npmrc"
    npmrc = load_npmrc(npmrc_path)
    if npmrc.registry and data.get("registry") in (None, DEFAULT_REGISTRY):
        data["registry"] = npmrc.registry
    data["scopeRegistries"] = {**npmrc.scope_registries, **(data.get("scopeRegistries") or {})}
    data["registryTokenEnvVars"] = {
        **npmrc.registry_token_env_vars,
        **(data.get("registryTokenEnvVars") or {}),
    }


def load_config(
    path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ReportConfig:
    """Merge defaults, an optional JSON config file and *overrides*.

    Top-level keys replace the defaults wholesale. Raises :class:`ConfigError`
    for unreadable files or invalid values.
    """
    data = copy.deepcopy(DEFAULT_CONFIG)
    if path is not None:
        data.update(_read_config_file(Path(path)))
    if overrides:
        data.update(overrides)
    if data.get("useNpmrc"):
        _apply_npmrc(data)
    return ReportConfig.from_mapping(data)
