"""Minimal ``.npmrc`` reader — registry and auth-token settings only."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from license_report.exceptions import ConfigError

log = structlog.get_logger("license_report.config")

_ENV_REF_RE = re.compile(r"^\$\{([A-Za-z_][A-Za-z0-9_]*)\}$")
_SCOPE_REGISTRY_SUFFIX = ":registry"
_AUTH_TOKEN_SUFFIX = ":_authToken"


@dataclass
class NpmrcSettings:
    registry: str | None = None
    scope_registries: dict[str, str] = field(default_factory=dict)
    # "//host/path/" -> environment variable holding the token
    registry_token_env_vars: dict[str, str] = field(default_factory=dict)


def parse_npmrc(content: str) -> NpmrcSettings:
    """Parse ``registry``, ``@scope:registry`` and ``//host/:_authToken`` lines.

    Only tokens given as ``${ENV_VAR}`` references are kept; literal tokens are
    ignored so secrets never end up in the configuration object.
    """
    settings = NpmrcSettings()
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(("#", ";")):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        value = value.strip().strip("\"'")

        if key == "registry":
            settings.registry = value
        elif key.startswith("@") and key.endswith(_SCOPE_REGISTRY_SUFFIX):
            settings.scope_registries[key[: -len(_SCOPE_REGISTRY_SUFFIX)]] = value
        elif key.startswith("//") and key.endswith(_AUTH_TOKEN_SUFFIX):
            m = _ENV_REF_RE.match(value)
            if m is None:
                log.debug("npmrc.literal_token_ignored", registry=key[: -len(_AUTH_TOKEN_SUFFIX)])
                continue
            settings.registry_token_env_vars[key[: -len(_AUTH_TOKEN_SUFFIX)]] = m.group(1)
    return settings


def load_npmrc(path: Path) -> NpmrcSettings:
    """Read *path*; a missing file yields empty settings, an unreadable one
    raises :class:`ConfigError`.
    """
    if not path.is_file():
        log.debug("npmrc.not_found", path=str(path))
        return NpmrcSettings()
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"cannot read npmrc file {path}: {exc}") from exc
    return parse_npmrc(content)
