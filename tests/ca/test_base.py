"""Tests for certsmith.ca.base errors and DecodeResult."""

from __future__ import annotations

import pytest

from certsmith.ca.base import (
    CertsmithError,
    DecodeError,
    DecodeResult,
    TemplateError,
    UnsupportedAlgorithm,
    UnsupportedKeyType,
)
from certsmith.core.types import DecodeErrorKind


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(UnsupportedAlgorithm, CertsmithError)
        assert issubclass(UnsupportedAlgorithm, ValueError)
        assert issubclass(UnsupportedKeyType, TypeError)
        assert issubclass(TemplateError, ValueError)
        assert issubclass(DecodeError, CertsmithError)

    def test_detail(self):
        err = UnsupportedAlgorithm("no md5 for ec", hash_name="md5", key_kind="ec")
        assert err.detail == "no md5 for ec"
        assert str(err) == "no md5 for ec"
        assert (err.hash_name, err.key_kind) == ("md5", "ec")

    def test_decode_error_message(self):
        err = DecodeError(DecodeErrorKind.MISMATCH)
        assert err.kind is DecodeErrorKind.MISMATCH
        assert "mismatch" in str(err)


class TestDecodeResult:
    def test_success(self):
        result = DecodeResult.success(42)
        assert result.ok
        assert result.unwrap() == 42
        assert result.error is None

    def test_failure(self):
        result = DecodeResult.failure(DecodeErrorKind.NOT_FOUND)
        assert not result.ok
        assert result.value is None
        with pytest.raises(DecodeError) as exc_info:
            result.unwrap()
        assert exc_info.value.kind is DecodeErrorKind.NOT_FOUND

    def test_frozen(self):
        result = DecodeResult.success(1)
        with pytest.raises(AttributeError):
            result.value = 2
