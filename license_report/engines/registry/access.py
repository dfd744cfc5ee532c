"""Pick the registry and auth token that serve a given package."""

from __future__ import annotations

import os
from collections.abc import Mapping

from license_report.core.config import RegistrySettings
from license_report.engines.registry.models import RegistryAccessData
from license_report.exceptions import InvalidRecordError


def package_scope(package_name: str) -> str | None:
    """Return ``@scope`` for ``@scope/name``, else None."""
    if package_name.startswith("@") and "/" in package_name:
        return package_name.split("/", 1)[0]
    return None


def normalize_registry_uri(uri: str) -> str:
    uri = uri.strip()
    return uri if uri.endswith("/") else uri + "/"


def registry_key(uri: str) -> str:
    """Scheme-less form used to match token settings (``//host/path/``)."""
    uri = normalize_registry_uri(uri)
    _, sep, rest = uri.partition("//")
    return "//" + rest if sep else "//" + uri


def resolve_registry_access(
    package_name: str,
    settings: RegistrySettings,
    environ: Mapping[str, str] | None = None,
) -> RegistryAccessData:
    """Resolve registry URI and bearer token for *package_name*.

    A scope-specific registry wins over the default one; an unknown scope
    falls back to the default. The token is read from the environment
    variable configured for the chosen registry, or the default token
    variable. No token is returned when that variable is unset or empty.
    """
    if not package_name:
        raise InvalidRecordError("a package name is required to resolve registry access")
    env = os.environ if environ is None else environ

    uri = settings.registry
    scope = package_scope(package_name)
    if scope is not None:
        scopes = {
            (key if key.startswith("@") else f"@{key}"): value
            for key, value in settings.scope_registries.items()
        }
        uri = scopes.get(scope) or uri
    uri = normalize_registry_uri(uri)

    token_vars = {registry_key(k): v for k, v in settings.registry_token_env_vars.items()}
    env_var = token_vars.get(registry_key(uri), settings.npm_token_env_var)
    token = env.get(env_var) if env_var else None
    return RegistryAccessData(uri=uri, auth_token=token or None)
