"""Tests for certsmith.core.names."""

from __future__ import annotations

import pytest
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.x509.oid import NameOID

from certsmith.core.names import parse_name, to_asn1_name


class TestParseName:
    def test_slash_form_keeps_order(self):
        name = parse_name("/C=US/O=Example/CN=host.example.com")
        oids = [attr.oid for attr in name]
        assert oids == [
            NameOID.COUNTRY_NAME,
            NameOID.ORGANIZATION_NAME,
            NameOID.COMMON_NAME,
        ]

    def test_rfc4514_form(self):
        name = parse_name("CN=host.example.com,O=Example,C=US")
        assert name.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "host.example.com"
        # RFC 4514 lists the most specific attribute first
        assert [attr.oid for attr in name][0] == NameOID.COUNTRY_NAME

    def test_slash_form_escaped_slash(self):
        name = parse_name("/CN=a\\/b")
        assert name.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "a/b"

    def test_slash_form_case_insensitive_keys(self):
        name = parse_name("/cn=lower")
        assert name.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "lower"

    def test_slash_form_unknown_attribute(self):
        with pytest.raises(ValueError, match="Unknown name attribute"):
            parse_name("/XX=nope")

    def test_slash_form_missing_equals(self):
        with pytest.raises(ValueError, match="expected KEY=VALUE"):
            parse_name("/CN")


class TestToAsn1Name:
    def test_from_string(self):
        name = to_asn1_name("/CN=example")
        assert isinstance(name, asn1_x509.Name)
        assert name.native["common_name"] == "example"

    def test_from_cryptography_name(self):
        crypto_name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "example")])
        name = to_asn1_name(crypto_name)
        assert name.dump() == crypto_name.public_bytes()

    def test_asn1_name_passthrough(self):
        name = to_asn1_name("/CN=example")
        assert to_asn1_name(name) is name

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            to_asn1_name(42)
