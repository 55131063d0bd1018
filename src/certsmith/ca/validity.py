"""Certificate validity periods."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from asn1crypto import x509 as asn1_x509

from certsmith.ca.base import TemplateError

# RFC 5280 4.1.2.5: UTCTime covers 1950 through 2049, GeneralizedTime the rest
_UTC_TIME_YEARS = range(1950, 2050)

DEFAULT_BACKDATE_SECONDS = 5 * 60


def _encode_time(value: datetime) -> asn1_x509.Time:
    value = value.astimezone(UTC)
    if value.year in _UTC_TIME_YEARS:
        return asn1_x509.Time({"utc_time": value})
    return asn1_x509.Time({"general_time": value})


@dataclass(frozen=True)
class Validity:
    """Absolute validity window of a certificate.

    Both timestamps are timezone-aware and carry whole seconds only,
    since DER time encodings have no fractional part here.
    """

    not_before: datetime
    not_after: datetime

    def __post_init__(self) -> None:
        if self.not_before.tzinfo is None or self.not_after.tzinfo is None:
            msg = "Validity timestamps must be timezone-aware"
            raise TemplateError(msg)
        if self.not_after < self.not_before:
            msg = (
                f"Validity not_after ({self.not_after.isoformat()}) precedes "
                f"not_before ({self.not_before.isoformat()})"
            )
            raise TemplateError(msg)
        object.__setattr__(self, "not_before", self.not_before.replace(microsecond=0))
        object.__setattr__(self, "not_after", self.not_after.replace(microsecond=0))

    @classmethod
    def days_from_now(
        cls,
        days: int,
        backdate_seconds: int = DEFAULT_BACKDATE_SECONDS,
        now: datetime | None = None,
    ) -> Validity:
        """Return a window of *days* starting now.

        ``not_before`` is moved *backdate_seconds* into the past to
        tolerate clock skew between issuer and relying parties.
        """
        if days <= 0:
            msg = f"Validity must be a positive number of days, got {days}"
            raise TemplateError(msg)
        anchor = (now or datetime.now(UTC)).replace(microsecond=0)
        return cls(
            not_before=anchor - timedelta(seconds=backdate_seconds),
            not_after=anchor + timedelta(days=days),
        )

    def to_asn1(self) -> asn1_x509.Validity:
        return asn1_x509.Validity(
            {
                "not_before": _encode_time(self.not_before),
                "not_after": _encode_time(self.not_after),
            }
        )

    @classmethod
    def from_asn1(cls, value: asn1_x509.Validity) -> Validity:
        # Decoded certificates are reported as-is, even when inverted
        validity = object.__new__(cls)
        object.__setattr__(validity, "not_before", value["not_before"].native)
        object.__setattr__(validity, "not_after", value["not_after"].native)
        return validity
