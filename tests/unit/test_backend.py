"""
Unit tests for crypto backend initialization.
"""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import patch

import pytest
from railway import ErrorCode, ResultAssertions

from cert_builder.adapters import backend
from cert_builder.adapters.backend import BackendInfo, initialize_backend, reset_backend


@pytest.fixture(autouse=True)
def fresh_backend() -> Iterator[None]:
    reset_backend()
    yield
    reset_backend()


class TestInitializeBackend:
    def test_reports_versions(self) -> None:
        info = ResultAssertions.assert_success(initialize_backend())
        assert isinstance(info, BackendInfo)
        assert info.library_version
        assert info.openssl_version

    def test_idempotent(self) -> None:
        """
        GIVEN an initialized backend
        WHEN initialize_backend is called again
        THEN the cached Result is returned and the backend is not probed twice.
        """
        with patch.object(backend, "_probe", wraps=backend._probe) as probe:
            first = initialize_backend()
            second = initialize_backend()
        assert first is second
        assert probe.call_count == 1

    def test_probe_failure_is_configuration_error(self) -> None:
        with patch.object(backend, "default_backend", side_effect=RuntimeError("no openssl")):
            result = initialize_backend()
        ResultAssertions.assert_failure(result, ErrorCode.CONFIGURATION_ERROR)
        ResultAssertions.assert_failure_stage(result, "backend")

    def test_missing_digest_is_configuration_error(self) -> None:
        with patch.object(backend, "default_backend") as fake:
            fake.return_value.openssl_version_text.return_value = "OpenSSL 0.0"
            fake.return_value.hash_supported.return_value = False
            result = initialize_backend()
        ResultAssertions.assert_failure(result, ErrorCode.CONFIGURATION_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "sha256")

    def test_reset_allows_reprobe(self) -> None:
        with patch.object(backend, "default_backend", side_effect=RuntimeError("no openssl")):
            assert initialize_backend().is_failure()
        reset_backend()
        assert initialize_backend().is_success()
