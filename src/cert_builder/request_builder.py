"""
Request builder — validate and normalize caller input into a CertificateRequest.

Domain layer — pure checks, no I/O. Every check returns a Result; the
first failing check short-circuits and names the offending field:

  key_pair         → RSA or EC, halves matched
  distinguished    → six non-empty strings, 2-letter country, CN ≤ 64 chars
  application_uri  → non-empty string
  dns/ip lists     → sequences of strings (de-duplicated, order kept)
  validity_period  → resolves to not_after > not_before

General-name syntax (IP literals, ASCII-only DNS names) is the extension
assembler's concern and is not checked here.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date, tzinfo

from railway.result import Result
from railway.result_failures import ResultFailures

from cert_builder.domain.models import (
    CertificateRequest,
    DistinguishedName,
    KeyPair,
    SubjectAltNames,
    ValidityPeriod,
    ValidityWindow,
)

COMMON_NAME_MAX_LENGTH = 64


def _require_text(field: str, value: object) -> Result[str]:
    if not isinstance(value, str):
        return ResultFailures.invalid_input(field, f"must be a string, got {type(value).__name__}")
    if not value.strip():
        return ResultFailures.invalid_input(field, "must not be empty")
    return Result.success(value)


def _check_key_pair(key_pair: object) -> Result[KeyPair]:
    if not isinstance(key_pair, KeyPair):
        return ResultFailures.invalid_input(
            "key_pair", f"must be a KeyPair, got {type(key_pair).__name__}"
        )
    if key_pair.algorithm is None:
        return ResultFailures.invalid_input(
            "key_pair", f"unsupported key type {type(key_pair.private_key).__name__}"
        )
    try:
        matched = key_pair.halves_match()
    except (AttributeError, TypeError, ValueError) as e:
        return ResultFailures.invalid_input("key_pair", f"public key is unusable: {e}")
    if not matched:
        return ResultFailures.invalid_input(
            "key_pair", "public key does not belong to the private key"
        )
    return Result.success(key_pair)


def _check_distinguished_name(name: object) -> Result[DistinguishedName]:
    if not isinstance(name, DistinguishedName):
        return ResultFailures.invalid_input(
            "distinguished_name", f"must be a DistinguishedName, got {type(name).__name__}"
        )
    checks = [_require_text(field, value) for field, value in name.items()]
    return Result.all_of(checks).flat_map(lambda _: _check_lengths(name))


def _check_lengths(name: DistinguishedName) -> Result[DistinguishedName]:
    if len(name.country_code) != 2:
        return ResultFailures.invalid_input(
            "country_code", f"must be a 2-letter country code, got {name.country_code!r}"
        )
    if len(name.common_name) > COMMON_NAME_MAX_LENGTH:
        return ResultFailures.invalid_input(
            "common_name", f"must be at most {COMMON_NAME_MAX_LENGTH} characters"
        )
    return Result.success(name)


def _check_string_list(field: str, values: object) -> Result[tuple[str, ...]]:
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        return ResultFailures.invalid_input(
            field, f"must be a sequence of strings, got {type(values).__name__}"
        )
    for index, value in enumerate(values):
        if not isinstance(value, str):
            return ResultFailures.invalid_input(
                f"{field}[{index}]", f"must be a string, got {type(value).__name__}"
            )
    return Result.success(tuple(values))


def _check_validity(period: object, today: date, tz: tzinfo | None) -> Result[ValidityWindow]:
    if not isinstance(period, ValidityPeriod):
        return ResultFailures.invalid_input(
            "validity_period", f"must be a ValidityPeriod, got {type(period).__name__}"
        )
    try:
        window = period.resolve(today, tz)
    except (OverflowError, TypeError, ValueError) as e:
        return ResultFailures.invalid_input("validity_period", f"cannot be resolved: {e}")
    if not window.is_positive:
        return ResultFailures.invalid_input(
            "validity_period",
            f"must end after it starts, {period} resolves to "
            f"{window.not_before.isoformat()} .. {window.not_after.isoformat()}",
        )
    return Result.success(window)


class CertificateRequestBuilder:
    """
    Build canonical CertificateRequests.

    `today` and `tz` anchor the validity window; they default to the local
    calendar day and the system timezone.
    """

    def __init__(
        self,
        today: Callable[[], date] = date.today,
        tz: tzinfo | None = None,
    ) -> None:
        self._today = today
        self._tz = tz

    def build(
        self,
        key_pair: KeyPair,
        validity_period: ValidityPeriod,
        distinguished_name: DistinguishedName,
        application_uri: str,
        dns_names: Sequence[str] = (),
        ip_addresses: Sequence[str] = (),
    ) -> Result[CertificateRequest]:
        """
        Validate every input and return the canonical request.

        Returns Result.failure(INVALID_INPUT, ...) with `field` set to the first
        offending input.
        """
        alt_names = Result.combine3(
            _require_text("application_uri", application_uri),
            _check_string_list("dns_names", dns_names),
            _check_string_list("ip_addresses", ip_addresses),
            lambda uri, dns, ips: SubjectAltNames(
                application_uri=uri, dns_names=dns, ip_addresses=ips
            ),
        )
        identity = Result.combine3(
            _check_key_pair(key_pair),
            _check_distinguished_name(distinguished_name),
            _check_validity(validity_period, self._today(), self._tz),
            lambda pair, name, window: (pair, name, window),
        )
        return Result.combine(
            identity,
            alt_names,
            lambda parts, sans: CertificateRequest(*parts, alt_names=sans),
        ).with_stage("request")
