"""Typed, frozen dataclasses for every configuration section.

This module is the **single source of truth** for default values.
JSON Schema defaults exist only for documentation; these builders
are what the library actually reads.

Access pattern::

    from certsmith.config import load_settings

    settings = load_settings("certsmith.yaml")
    print(settings.issuance.default_template)
"""

from __future__ import annotations

from dataclasses import dataclass

from certsmith.ca.validity import DEFAULT_BACKDATE_SECONDS

# ---------------------------------------------------------------------------
# Issuance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IssuanceSettings:
    """Certificate issuance defaults.

    ``hash_algorithm`` overrides the template hash for every issued
    certificate when set; ``None`` keeps each template's own hash.
    """

    default_template: str
    hash_algorithm: str | None
    backdate_seconds: int


def _build_issuance(data: dict | None) -> IssuanceSettings:
    d = data or {}
    return IssuanceSettings(
        default_template=d.get("default_template", "server"),
        hash_algorithm=d.get("hash_algorithm"),
        backdate_seconds=d.get("backdate_seconds", DEFAULT_BACKDATE_SECONDS),
    )


# ---------------------------------------------------------------------------
# CSR
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CsrSettings:
    """CSR signing defaults."""

    hash_algorithm: str


def _build_csr(data: dict | None) -> CsrSettings:
    d = data or {}
    return CsrSettings(
        hash_algorithm=d.get("hash_algorithm", "sha256"),
    )


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CodecSettings:
    """PEM leniency per entity type and the default certificate view."""

    certificate_pem_policy: str
    csr_pem_policy: str
    certificate_view: str


def _build_codec(data: dict | None) -> CodecSettings:
    d = data or {}
    return CodecSettings(
        certificate_pem_policy=d.get("certificate_pem_policy", "first_match"),
        csr_pem_policy=d.get("csr_pem_policy", "single"),
        certificate_view=d.get("certificate_view", "decoded"),
    )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingSettings:
    """Library logging configuration (level, format)."""

    level: str
    format: str


def _build_logging(data: dict | None) -> LoggingSettings:
    d = data or {}
    return LoggingSettings(
        level=d.get("level", "INFO"),
        format=d.get("format", "text"),
    )


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CertsmithSettings:
    """Root of the typed settings tree."""

    issuance: IssuanceSettings
    csr: CsrSettings
    codec: CodecSettings
    logging: LoggingSettings


def build_settings(data: dict | None) -> CertsmithSettings:
    """Build the full settings tree from a (validated) config dict."""
    d = data or {}
    return CertsmithSettings(
        issuance=_build_issuance(d.get("issuance")),
        csr=_build_csr(d.get("csr")),
        codec=_build_codec(d.get("codec")),
        logging=_build_logging(d.get("logging")),
    )
