"""
Railway-Oriented Programming (ROP) support for the certificate pipeline.

Explicit, composable, functional error handling — no exceptions in business logic.

    from railway import Result, ErrorCode

    def require_country(code: str) -> Result[str]:
        if len(code) != 2:
            return Result.failure(
                ErrorCode.INVALID_INPUT, "must be a 2-letter code", field="country_code"
            )
        return Result.success(code)

    result = (
        Result.success("DE")
        .flat_map(require_country)
        .map(str.upper)
    )
"""

from railway.result import Result, Success, Failure
from railway.failure import ErrorCode, FailureDescription
from railway.result_failures import ResultFailures
from railway.assertions import ResultAssertions

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ResultFailures",
    "ResultAssertions",
]

__version__ = "1.1.0"
