"""certsmith configuration loader.

Reads a YAML or JSON file, resolves ``${VAR}`` / ``${VAR:-default}``
environment references, validates the result against the bundled JSON
schema, runs cross-field checks and builds the typed settings tree::

    from certsmith.config import load_settings

    settings = load_settings("/etc/certsmith/certsmith.yaml")
    settings.codec.csr_pem_policy
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from certsmith.config.settings import CertsmithSettings, build_settings

_SCHEMA_PATH = Path(__file__).parent / "schema.json"

_ENV_RE = re.compile(
    r"^\$\{([^}:]+?)(?::-(.*))?\}$",
    re.DOTALL,
)

# Resolved values that read as integers are passed on as int
_INT_RE = re.compile(r"-?[0-9]+")

_MAX_BACKDATE_SECONDS = 86400
_LEGACY_HASHES = frozenset({"md5", "sha", "sha1"})

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Validation error collector
# ---------------------------------------------------------------------------


class ConfigValidationError(Exception):
    """Raised when schema or cross-field validation finds problems."""

    def __init__(self, errors: list[str]) -> None:
        """Store *errors* and build a human-readable message."""
        self.errors = errors
        body = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"Configuration validation failed:\n{body}")


# ---------------------------------------------------------------------------
# Environment variable resolution
# ---------------------------------------------------------------------------


def _resolve_env_vars(
    data: Any,  # noqa: ANN401
    errors: list[str],
    path: str = "",
) -> Any:  # noqa: ANN401
    """Return a copy of *data* with ``${VAR}`` / ``${VAR:-default}`` strings resolved.

    Resolved values that read as integers become ``int`` so numeric
    settings such as ``backdate_seconds`` can come from the environment.
    Unset variables without a default are reported in *errors* and left
    unresolved.
    """
    if isinstance(data, dict):
        return {
            key: _resolve_env_vars(value, errors, f"{path}.{key}" if path else str(key))
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [_resolve_env_vars(item, errors, f"{path}[{idx}]") for idx, item in enumerate(data)]
    if not isinstance(data, str):
        return data

    match = _ENV_RE.match(data)
    if match is None:
        return data
    var_name, fallback = match.group(1), match.group(2)
    resolved = os.environ.get(var_name, fallback)
    if resolved is None:
        errors.append(f"{path}: environment variable '{var_name}' is not set and has no default")
        return data
    if _INT_RE.fullmatch(resolved):
        return int(resolved)
    return resolved


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _load_schema() -> dict:
    with _SCHEMA_PATH.open(encoding="utf-8") as f:
        return json.load(f)


def _schema_errors(data: dict) -> list[str]:
    validator = jsonschema.Draft202012Validator(_load_schema())
    errors = []
    for error in sorted(validator.iter_errors(data), key=lambda e: list(e.path)):
        location = ".".join(str(p) for p in error.path) or "<root>"
        errors.append(f"{location}: {error.message}")
    return errors


def _cross_field_checks(settings: CertsmithSettings) -> None:
    errors: list[str] = []
    warnings: list[str] = []

    if settings.issuance.backdate_seconds > _MAX_BACKDATE_SECONDS:
        errors.append(
            f"issuance.backdate_seconds ({settings.issuance.backdate_seconds}) "
            f"exceeds one day ({_MAX_BACKDATE_SECONDS})",
        )

    if settings.issuance.hash_algorithm == "md5":
        warnings.append(
            "issuance.hash_algorithm 'md5' can only sign with RSA issuer keys; "
            "EC issuers will fail with UnsupportedAlgorithm",
        )
    elif settings.issuance.hash_algorithm in _LEGACY_HASHES:
        warnings.append(
            f"issuance.hash_algorithm '{settings.issuance.hash_algorithm}' "
            "is supported for legacy compatibility only",
        )

    if settings.csr.hash_algorithm in _LEGACY_HASHES:
        warnings.append(
            f"csr.hash_algorithm '{settings.csr.hash_algorithm}' "
            "is supported for legacy compatibility only",
        )

    for w in warnings:
        log.warning("Config warning: %s", w)

    if errors:
        raise ConfigValidationError(errors)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def settings_from_dict(data: dict | None) -> CertsmithSettings:
    """Resolve environment references in *data*, validate it and build the settings tree.

    *data* itself is not modified.
    """
    data = data if data is not None else {}
    if not isinstance(data, dict):
        raise ConfigValidationError([f"<root>: expected a mapping, got {type(data).__name__}"])

    env_errors: list[str] = []
    data = _resolve_env_vars(data, env_errors)
    if env_errors:
        raise ConfigValidationError(env_errors)

    errors = _schema_errors(data)
    if errors:
        raise ConfigValidationError(errors)

    settings = build_settings(data)
    _cross_field_checks(settings)
    return settings


def load_settings(config_file: str | Path) -> CertsmithSettings:
    """Read, validate and build settings from a YAML or JSON file."""
    path = Path(config_file)
    with path.open(encoding="utf-8") as f:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    settings = settings_from_dict(data)
    log.debug("Loaded configuration from %s", path)
    return settings
