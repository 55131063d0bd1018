"""Configuration subsystem for certsmith.

Public API::

    from certsmith.config import load_settings, build_settings

    settings = load_settings("certsmith.yaml")   # validated file
    defaults = build_settings(None)               # built-in defaults
"""

from certsmith.config.loader import (
    ConfigValidationError,
    load_settings,
    settings_from_dict,
)
from certsmith.config.settings import (
    CertsmithSettings,
    CodecSettings,
    CsrSettings,
    IssuanceSettings,
    LoggingSettings,
    build_settings,
)

__all__ = [
    "CertsmithSettings",
    "CodecSettings",
    "ConfigValidationError",
    "CsrSettings",
    "IssuanceSettings",
    "LoggingSettings",
    "build_settings",
    "load_settings",
    "settings_from_dict",
]
