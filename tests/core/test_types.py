"""Tests for certsmith.core.types enums."""

from __future__ import annotations

import pytest

from certsmith.core.types import (
    DecodeErrorKind,
    HashAlgorithm,
    KeyKind,
    NamedTemplate,
    PemPolicy,
    View,
)


class TestHashAlgorithm:
    def test_values(self):
        assert [h.value for h in HashAlgorithm] == [
            "md5",
            "sha1",
            "sha224",
            "sha256",
            "sha384",
            "sha512",
        ]

    def test_sha_is_sha1(self):
        assert HashAlgorithm("sha") is HashAlgorithm.SHA1

    def test_case_insensitive(self):
        assert HashAlgorithm("SHA256") is HashAlgorithm.SHA256

    def test_unknown_raises(self):
        with pytest.raises(ValueError):
            HashAlgorithm("sha3_256")

    def test_str_compare(self):
        assert HashAlgorithm.SHA384 == "sha384"


class TestOtherEnums:
    def test_key_kind(self):
        assert KeyKind("rsa") is KeyKind.RSA
        assert KeyKind("ec") is KeyKind.EC

    def test_view(self):
        assert {v.value for v in View} == {"plain", "decoded"}

    def test_pem_policy(self):
        assert {p.value for p in PemPolicy} == {"first_match", "single"}

    def test_decode_error_kinds(self):
        assert {k.value for k in DecodeErrorKind} == {
            "malformed",
            "not_found",
            "mismatch",
            "multiple",
        }

    def test_named_templates(self):
        assert [t.value for t in NamedTemplate] == ["root_ca", "ca", "server"]
