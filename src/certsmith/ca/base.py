"""Error types and the decode result container.

Every failure raised by certsmith derives from :class:`CertsmithError`.
Caller configuration mistakes (an unsupported hash/key pairing, a
malformed template, an unsupported key type) are raised immediately.
Decoding untrusted input never raises: the codec returns a
:class:`DecodeResult` carrying either the decoded value or a
:class:`~certsmith.core.types.DecodeErrorKind`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from certsmith.core.types import DecodeErrorKind

T = TypeVar("T")


class CertsmithError(Exception):
    """Base class for certsmith errors.

    Parameters
    ----------
    detail:
        Human-readable description of the failure.

    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class UnsupportedAlgorithm(CertsmithError, ValueError):
    """No signature algorithm is defined for a hash/key-kind pairing."""

    def __init__(self, detail: str, *, hash_name: str | None = None, key_kind: str | None = None) -> None:
        self.hash_name = hash_name
        self.key_kind = key_kind
        super().__init__(detail)


class UnsupportedKeyType(CertsmithError, TypeError):
    """The key is neither an RSA nor an EC key."""


class TemplateError(CertsmithError, ValueError):
    """A template or template override holds an invalid value."""


class DecodeError(CertsmithError):
    """Raised by :meth:`DecodeResult.unwrap` on a failed decode."""

    def __init__(self, kind: DecodeErrorKind, detail: str | None = None) -> None:
        self.kind = kind
        super().__init__(detail or f"decode failed: {kind.value}")


@dataclass(frozen=True)
class DecodeResult(Generic[T]):
    """Outcome of a decode operation.

    Exactly one of ``value`` and ``error`` is set.
    """

    value: T | None = None
    error: DecodeErrorKind | None = None

    @classmethod
    def success(cls, value: T) -> DecodeResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: DecodeErrorKind) -> DecodeResult[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the decoded value or raise :class:`DecodeError`."""
        if self.error is not None:
            raise DecodeError(self.error)
        return self.value  # type: ignore[return-value]
