"""
Convenience factory methods for common Result failures.

One factory per error kind of the certificate pipeline, so call sites
read as the failure they describe:

    from railway.result_failures import ResultFailures

    # Instead of:
    Result.failure(ErrorCode.INVALID_INPUT, "must not be empty", field="common_name")

    # Write:
    ResultFailures.invalid_input("common_name", "must not be empty")
"""

from __future__ import annotations

from typing import TypeVar

from railway.failure import ErrorCode
from railway.result import Result

T = TypeVar("T")


class ResultFailures:
    """Factory methods for the certificate pipeline failure kinds."""

    @staticmethod
    def invalid_input(field: str, message: str) -> Result:
        """Malformed/missing identity field or non-positive validity period."""
        return Result.failure(ErrorCode.INVALID_INPUT, message, field=field)

    @staticmethod
    def unsupported_algorithm(message: str, exception: BaseException | None = None) -> Result:
        """Key algorithm or size the provider cannot satisfy."""
        return Result.failure(ErrorCode.UNSUPPORTED_ALGORITHM, message, exception)

    @staticmethod
    def extension_encoding_error(
        field: str | None,
        message: str,
        exception: BaseException | None = None,
    ) -> Result:
        """A general name or identifier cannot be serialized."""
        return Result.failure(
            ErrorCode.EXTENSION_ENCODING_ERROR, message, exception, field=field
        )

    @staticmethod
    def signing_error(message: str, exception: BaseException | None = None) -> Result:
        """Key/scheme mismatch or signing provider failure."""
        return Result.failure(ErrorCode.SIGNING_ERROR, message, exception)

    @staticmethod
    def encoding_error(message: str, exception: BaseException | None = None) -> Result:
        """Final DER assembly failure."""
        return Result.failure(ErrorCode.ENCODING_ERROR, message, exception)

    @staticmethod
    def configuration_error(message: str, exception: BaseException | None = None) -> Result:
        """Crypto backend unusable or settings invalid."""
        return Result.failure(ErrorCode.CONFIGURATION_ERROR, message, exception)
