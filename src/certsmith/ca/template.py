"""Certificate templates.

A :class:`Template` bundles everything about a certificate that is not
tied to a particular subject, issuer or key: the serial number policy,
the validity period, the signing hash and an ordered list of named
extensions.

Three named templates are built in:

``root_ca``
    Self-signed root CA.  Path length 1 (may issue intermediate CAs
    which in turn may only issue end certificates); valid 25 years.
``ca``
    Intermediate CA.  Path length 0; Extended Key Usage set to TLS
    server and client, which many TLS stacks read as a constraint on
    what the CA may issue (disable ``ext_key_usage`` to lift it); valid
    10 years.
``server``
    End certificate.  Extended Key Usage set to TLS server and client;
    valid 1 year plus a 30 day grace period.

All of them request an 8-byte random serial and enable the
``subject_key_identifier`` and ``authority_key_identifier`` extensions.
Enabled identifier entries are the placeholder ``True`` until the
builder fills them in from the actual keys (see
:mod:`certsmith.ca.key_identifiers`).

Extension overrides are merged by name.  An overridden entry is dropped
from its old position and the override entries are appended in the
order given, so the last write for a name wins.  Setting an entry to
``False`` (:data:`DISABLED`) removes the extension from the issued
certificate whatever the template's default.  Disabled entries are kept
in the template and only filtered when the certificate is assembled.

Example::

    template = resolve(
        "root_ca",
        hash="sha512",
        serial=1,
        extensions={"authority_key_identifier": DISABLED},
    )
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace

from cryptography import x509

from certsmith.ca import extensions as ext
from certsmith.ca.base import TemplateError
from certsmith.ca.validity import Validity
from certsmith.core.types import HashAlgorithm, NamedTemplate

log = logging.getLogger(__name__)

ENABLED = True
DISABLED = False

ExtensionEntry = x509.Extension | bool
ExtensionOverrides = Mapping[str, ExtensionEntry] | Iterable[tuple[str, ExtensionEntry]]

_DAYS_PER_YEAR = 365.2425


@dataclass(frozen=True)
class RandomSerial:
    """Request for a serial number of *size* random bytes."""

    size: int = 8

    def __post_init__(self) -> None:
        if not isinstance(self.size, int) or self.size <= 0:
            msg = f"Random serial size must be a positive integer, got {self.size!r}"
            raise TemplateError(msg)


def _check_serial(serial: object) -> int | RandomSerial:
    if isinstance(serial, RandomSerial):
        return serial
    if isinstance(serial, bool) or not isinstance(serial, int) or serial <= 0:
        msg = f"Serial must be a positive integer or RandomSerial, got {serial!r}"
        raise TemplateError(msg)
    return serial


def _check_validity(validity: object) -> int | Validity:
    if isinstance(validity, Validity):
        return validity
    if isinstance(validity, bool) or not isinstance(validity, int) or validity <= 0:
        msg = f"Validity must be a positive number of days or a Validity, got {validity!r}"
        raise TemplateError(msg)
    return validity


def _check_entry(name: str, entry: object) -> ExtensionEntry:
    if isinstance(entry, (bool, x509.Extension)):
        return entry
    msg = f"Extension '{name}' must be an x509.Extension, True or False, got {type(entry).__name__}"
    raise TemplateError(msg)


def _entries(overrides: ExtensionOverrides) -> list[tuple[str, ExtensionEntry]]:
    items = overrides.items() if isinstance(overrides, Mapping) else overrides
    return [(name, _check_entry(name, entry)) for name, entry in items]


@dataclass(frozen=True)
class Template:
    """Issuance parameters shared by every certificate built from it."""

    serial: int | RandomSerial = field(default_factory=RandomSerial)
    validity: int | Validity = 365
    hash: HashAlgorithm = HashAlgorithm.SHA256
    extensions: tuple[tuple[str, ExtensionEntry], ...] = ()

    def __post_init__(self) -> None:
        _check_serial(self.serial)
        _check_validity(self.validity)
        try:
            object.__setattr__(self, "hash", HashAlgorithm(self.hash))
        except ValueError:
            msg = f"Unknown hash algorithm '{self.hash}'"
            raise TemplateError(msg) from None
        object.__setattr__(self, "extensions", tuple(_entries(self.extensions)))

    def extension_entry(self, name: str) -> ExtensionEntry | None:
        for entry_name, entry in self.extensions:
            if entry_name == name:
                return entry
        return None

    def with_extension(self, name: str, entry: ExtensionEntry) -> Template:
        """Return a copy with *name* set to *entry*, keeping its position.

        A name not yet present is appended.
        """
        entry = _check_entry(name, entry)
        updated = []
        found = False
        for entry_name, current in self.extensions:
            if entry_name == name:
                updated.append((name, entry))
                found = True
            else:
                updated.append((entry_name, current))
        if not found:
            updated.append((name, entry))
        return replace(self, extensions=tuple(updated))

    def merge_extensions(self, overrides: ExtensionOverrides) -> Template:
        """Return a copy with *overrides* merged in (last write wins)."""
        merged: list[tuple[str, ExtensionEntry]] = list(self.extensions)
        for name, entry in _entries(overrides):
            merged = [(n, e) for n, e in merged if n != name]
            merged.append((name, entry))
        return replace(self, extensions=tuple(merged))


# ---------------------------------------------------------------------------
# Named templates
# ---------------------------------------------------------------------------


def _root_ca() -> Template:
    return Template(
        validity=round(25 * _DAYS_PER_YEAR),
        hash=HashAlgorithm.SHA256,
        extensions=(
            ("basic_constraints", ext.basic_constraints(True, 1)),
            ("key_usage", ext.key_usage(["digitalSignature", "keyCertSign", "cRLSign"])),
            ("subject_key_identifier", ENABLED),
            ("authority_key_identifier", ENABLED),
        ),
    )


def _ca() -> Template:
    return Template(
        validity=round(10 * _DAYS_PER_YEAR),
        hash=HashAlgorithm.SHA256,
        extensions=(
            ("basic_constraints", ext.basic_constraints(True, 0)),
            ("key_usage", ext.key_usage(["digitalSignature", "keyCertSign", "cRLSign"])),
            ("ext_key_usage", ext.ext_key_usage(["serverAuth", "clientAuth"])),
            ("subject_key_identifier", ENABLED),
            ("authority_key_identifier", ENABLED),
        ),
    )


def _server() -> Template:
    return Template(
        validity=365 + 30,
        hash=HashAlgorithm.SHA256,
        extensions=(
            ("basic_constraints", ext.basic_constraints(False)),
            ("key_usage", ext.key_usage(["digitalSignature", "keyEncipherment"])),
            ("ext_key_usage", ext.ext_key_usage(["serverAuth", "clientAuth"])),
            ("subject_key_identifier", ENABLED),
            ("authority_key_identifier", ENABLED),
        ),
    )


_NAMED_TEMPLATES = {
    NamedTemplate.ROOT_CA: _root_ca,
    NamedTemplate.CA: _ca,
    NamedTemplate.SERVER: _server,
}


def named(name: NamedTemplate | str) -> Template:
    """Return the built-in template called *name*."""
    try:
        return _NAMED_TEMPLATES[NamedTemplate(name)]()
    except ValueError:
        msg = f"Unknown template '{name}'; supported: {[t.value for t in NamedTemplate]}"
        raise TemplateError(msg) from None


def resolve(
    base: Template | NamedTemplate | str = NamedTemplate.SERVER,
    *,
    hash: HashAlgorithm | str | None = None,  # noqa: A002
    serial: int | RandomSerial | None = None,
    validity: int | Validity | None = None,
    extensions: ExtensionOverrides | None = None,
) -> Template:
    """Return *base* (a template or preset name) with overrides applied.

    ``hash``, ``serial`` and ``validity`` replace the base values
    wholesale; ``None`` leaves them unchanged.  ``extensions`` are
    merged by name as described in the module documentation.

    Raises
    ------
    TemplateError
        If the preset is unknown or an override value is invalid.

    """
    template = base if isinstance(base, Template) else named(base)

    changes: dict[str, object] = {}
    if hash is not None:
        changes["hash"] = hash
    if serial is not None:
        changes["serial"] = serial
    if validity is not None:
        changes["validity"] = validity
    if changes:
        template = replace(template, **changes)
    if extensions is not None:
        template = template.merge_extensions(extensions)

    log.debug(
        "Resolved template (base=%s, hash=%s, serial=%s, validity=%s, extensions=%s)",
        base if not isinstance(base, Template) else "custom",
        template.hash.value,
        template.serial,
        template.validity,
        [name for name, entry in template.extensions if entry is not DISABLED],
    )
    return template
