"""
Failure description — structured error information for the failure track.

ErrorCode enumerates the ways a certificate generation call can fail.
FailureDescription carries the code, a human message, the optional
underlying exception, and two pieces of location data:

  - stage: which pipeline stage produced the failure ("request", "signing", ...)
  - field: which caller-supplied field was at fault, when there is one

Enum + frozen dataclass gives __eq__, __hash__ and __repr__ for free,
and Enum members are singleton-comparable with `is`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """
    Structured error codes for the failure track.

    Caller errors: INVALID_INPUT, UNSUPPORTED_ALGORITHM
    Encoding/signing errors: EXTENSION_ENCODING_ERROR, SIGNING_ERROR, ENCODING_ERROR
    Environment errors: CONFIGURATION_ERROR
    """

    INVALID_INPUT = "INVALID_INPUT"
    """Malformed or missing identity fields, non-positive validity period."""

    UNSUPPORTED_ALGORITHM = "UNSUPPORTED_ALGORITHM"
    """Key algorithm / size combination the crypto provider cannot satisfy."""

    EXTENSION_ENCODING_ERROR = "EXTENSION_ENCODING_ERROR"
    """A general name or key identifier cannot be serialized."""

    SIGNING_ERROR = "SIGNING_ERROR"
    """Key / signature scheme mismatch or signing provider failure."""

    ENCODING_ERROR = "ENCODING_ERROR"
    """Final DER assembly or structural verification failed."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Crypto backend unusable or settings invalid."""



@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, location and timestamp.

    >>> desc = FailureDescription(ErrorCode.INVALID_INPUT, "must not be empty", field="common_name")
    >>> desc.code
    <ErrorCode.INVALID_INPUT: 'INVALID_INPUT'>
    >>> desc.describe()
    'common_name: must not be empty'
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = dataclasses.field(default=None, repr=False)
    stage: Optional[str] = None
    field: Optional[str] = None
    timestamp: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))

    def with_stage(self, stage: str) -> FailureDescription:
        """
        Tag the failure with a pipeline stage.

        An existing stage is kept: the innermost stage that failed wins.
        """
        if self.stage is not None:
            return self
        return replace(self, stage=stage)

    def describe(self) -> str:
        """Render as "[stage] field: message", omitting the parts that are unset."""
        text = self.message
        if self.field:
            text = f"{self.field}: {text}"
        if self.stage:
            text = f"[{self.stage}] {text}"
        return text
