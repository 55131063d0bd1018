"""PEM framing on top of :mod:`asn1crypto.pem`."""

from __future__ import annotations

from typing import NamedTuple

from asn1crypto import pem

CERTIFICATE_LABEL = "CERTIFICATE"
CSR_LABEL = "CERTIFICATE REQUEST"


class PemEntry(NamedTuple):
    label: str
    der: bytes
    encrypted: bool


def _as_bytes(text: str | bytes) -> bytes:
    if isinstance(text, str):
        return text.encode("ascii", errors="replace")
    return text


def decode_entries(text: str | bytes) -> list[PemEntry]:
    """Return every PEM entry found in *text*, in input order.

    Text outside BEGIN/END markers is ignored.  Input without any entry
    yields an empty list.

    Raises
    ------
    ValueError
        If an entry is not properly framed or its body is not base64.

    """
    data = _as_bytes(text)
    if not pem.detect(data):
        return []
    entries = []
    for label, headers, der in pem.unarmor(data, multiple=True):
        encrypted = "ENCRYPTED" in headers.get("Proc-Type", "") or label.startswith("ENCRYPTED ")
        entries.append(PemEntry(label, der, encrypted))
    return entries


def encode_entry(label: str, der: bytes) -> str:
    return pem.armor(label, der).decode("ascii")
