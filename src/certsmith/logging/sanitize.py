"""Redaction of encoded certificate, CSR and key material for log output.

Decoders log the input they could not use.  That input may hold a
private key next to the certificate, so PEM bodies are always replaced
before the text reaches a log record.
"""

from __future__ import annotations

import re

_ARMOR_RE = re.compile(
    r"(?P<begin>-----BEGIN (?P<label>[A-Z0-9 ]+)-----)"
    r"(?P<body>[\s\S]*?)"
    r"(?P<end>-----END (?P=label)-----)",
)

# BEGIN marker with no matching END marker after it
_DANGLING_RE = re.compile(
    r"(?P<begin>-----BEGIN (?P<label>[A-Z0-9 ]+)-----)"
    r"(?![\s\S]*-----END (?P=label)-----)[\s\S]*",
)

# Longest stretch of non-PEM text kept in a log line
MAX_TEXT_LENGTH = 200


def _summarize(match: re.Match[str]) -> str:
    body_size = len("".join(match.group("body").split()))
    return f"{match.group('begin')}\n[REDACTED {body_size} chars]\n{match.group('end')}"


def sanitize_pem(pem: str | bytes, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Return *pem* with every armored body replaced by its size.

    BEGIN/END markers are preserved so the entry labels stay visible.
    Input containing no armored block is cut to *max_length*
    characters.
    """
    if isinstance(pem, bytes):
        pem = pem.decode("ascii", errors="replace")

    redacted, count = _ARMOR_RE.subn(_summarize, pem)
    redacted, dangling = _DANGLING_RE.subn(r"\g<begin>\n[REDACTED]", redacted)
    count += dangling
    if count == 0 and len(redacted) > max_length:
        return redacted[:max_length] + "..."
    return redacted
