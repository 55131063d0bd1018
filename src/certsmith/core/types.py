"""Enumerated types shared by the certsmith issuance pipeline.

All enums inherit from ``StrEnum`` so their ``.value`` is a plain
string that round-trips through YAML/JSON configuration unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ---------------------------------------------------------------------------
# Hash algorithms
# ---------------------------------------------------------------------------


class HashAlgorithm(StrEnum):
    MD5 = "md5"
    SHA1 = "sha1"
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"

    @classmethod
    def _missing_(cls, value: object) -> HashAlgorithm | None:
        # "sha" is the historical name for SHA-1
        if isinstance(value, str):
            lowered = value.lower()
            if lowered == "sha":
                return cls.SHA1
            for member in cls:
                if member.value == lowered:
                    return member
        return None


# ---------------------------------------------------------------------------
# Key kinds
# ---------------------------------------------------------------------------


class KeyKind(StrEnum):
    RSA = "rsa"
    EC = "ec"


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


class View(StrEnum):
    """Presentation of a decoded certificate's extensions."""

    PLAIN = "plain"
    DECODED = "decoded"


class PemPolicy(StrEnum):
    """How a PEM decoder treats input holding several entries."""

    FIRST_MATCH = "first_match"
    SINGLE = "single"


class DecodeErrorKind(StrEnum):
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"
    MISMATCH = "mismatch"
    MULTIPLE = "multiple"


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


class NamedTemplate(StrEnum):
    ROOT_CA = "root_ca"
    CA = "ca"
    SERVER = "server"
