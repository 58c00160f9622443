"""
Domain models — immutable value objects for self-signed certificate generation.

These represent the data flowing through the generation pipeline:

  caller input → CertificateRequest → (extensions, signature) → SelfSignedCertificate

All models are frozen dataclasses (immutable). Key objects are the
`cryptography` key types; everything else is plain Python data.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum, unique

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.types import (
    CertificatePublicKeyTypes,
    PrivateKeyTypes,
)


@unique
class KeyAlgorithm(Enum):
    """Asymmetric key families this generator can produce and sign with."""

    RSA = "RSA"
    EC = "EC"


@unique
class SignatureScheme(Enum):
    """
    Signature algorithm applied to the to-be-signed certificate.

    Values are the JCA-style names used in logs and configuration.
    """

    SHA256_WITH_RSA = "SHA256withRSA"
    SHA384_WITH_RSA = "SHA384withRSA"
    SHA512_WITH_RSA = "SHA512withRSA"
    SHA256_WITH_ECDSA = "SHA256withECDSA"
    SHA384_WITH_ECDSA = "SHA384withECDSA"
    SHA512_WITH_ECDSA = "SHA512withECDSA"

    @property
    def key_algorithm(self) -> KeyAlgorithm:
        """The key family this scheme signs with."""
        if self.value.endswith("withRSA"):
            return KeyAlgorithm.RSA
        return KeyAlgorithm.EC

    @staticmethod
    def default_for(algorithm: KeyAlgorithm) -> SignatureScheme:
        """SHA-256 scheme matching the given key family."""
        if algorithm is KeyAlgorithm.RSA:
            return SignatureScheme.SHA256_WITH_RSA
        return SignatureScheme.SHA256_WITH_ECDSA


# ─────────────────────── Keys ───────────────────────


def key_algorithm_of(key: object) -> KeyAlgorithm | None:
    """Classify a private or public key object, or None if it is neither RSA nor EC."""
    if isinstance(key, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
        return KeyAlgorithm.RSA
    if isinstance(key, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
        return KeyAlgorithm.EC
    return None


@dataclass(frozen=True, slots=True)
class KeyPair:
    """
    Public/private key handle owned by the caller.

    The generator only reads it. Use `from_private_key` to get a pair whose
    halves are guaranteed to match; pairs assembled by hand are checked by
    the request builder.
    """

    private_key: PrivateKeyTypes = field(repr=False)
    public_key: CertificatePublicKeyTypes

    @staticmethod
    def from_private_key(private_key: PrivateKeyTypes) -> KeyPair:
        return KeyPair(private_key=private_key, public_key=private_key.public_key())  # type: ignore[arg-type]

    @property
    def algorithm(self) -> KeyAlgorithm | None:
        return key_algorithm_of(self.private_key)

    @property
    def bit_length(self) -> int:
        return self.private_key.key_size  # type: ignore[union-attr]

    def public_key_der(self) -> bytes:
        """SubjectPublicKeyInfo DER of the public half."""
        return self.public_key.public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def halves_match(self) -> bool:
        """True when the public key is the one derived from the private key."""
        derived = self.private_key.public_key().public_bytes(  # type: ignore[union-attr]
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return derived == self.public_key_der()


# ─────────────────────── Identity ───────────────────────


@dataclass(frozen=True, slots=True)
class DistinguishedName:
    """
    Subject (and, self-signed, issuer) name.

    Attributes are encoded in declaration order: CN, O, OU, L, ST, C.
    """

    common_name: str
    organization: str
    organizational_unit: str
    locality: str
    state: str
    country_code: str

    def items(self) -> tuple[tuple[str, str], ...]:
        """(field name, value) pairs in encoding order."""
        return (
            ("common_name", self.common_name),
            ("organization", self.organization),
            ("organizational_unit", self.organizational_unit),
            ("locality", self.locality),
            ("state", self.state),
            ("country_code", self.country_code),
        )


def _distinct(values: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


@dataclass(frozen=True, slots=True)
class SubjectAltNames:
    """
    Subject Alternative Name inputs.

    The application URI always comes first in the encoded extension. DNS names
    and IP address strings are de-duplicated on construction; the first
    occurrence keeps its position.
    """

    application_uri: str
    dns_names: tuple[str, ...] = ()
    ip_addresses: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "dns_names", _distinct(tuple(self.dns_names)))
        object.__setattr__(self, "ip_addresses", _distinct(tuple(self.ip_addresses)))


# ─────────────────────── Validity ───────────────────────


def _plus_months(start: date, months: int) -> date:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    month_index = start.year * 12 + (start.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _start_of_day(day: date, tz: tzinfo | None) -> datetime:
    if tz is None:
        # naive → system local time, DST-aware
        return datetime.combine(day, time.min).astimezone()
    return datetime.combine(day, time.min, tzinfo=tz)


@dataclass(frozen=True, slots=True)
class ValidityWindow:
    """Resolved [not_before, not_after) interval, timezone-aware."""

    not_before: datetime
    not_after: datetime

    @property
    def duration(self) -> timedelta:
        return self.not_after - self.not_before

    @property
    def is_positive(self) -> bool:
        return self.not_after > self.not_before


@dataclass(frozen=True, slots=True)
class ValidityPeriod:
    """
    Relative certificate lifetime in years, months and days.

    Resolved against a calendar day: years and months are added together
    first (clamping the day of month), then days.
    """

    years: int = 0
    months: int = 0
    days: int = 0

    @staticmethod
    def of_years(years: int) -> ValidityPeriod:
        return ValidityPeriod(years=years)

    @staticmethod
    def of_months(months: int) -> ValidityPeriod:
        return ValidityPeriod(months=months)

    @staticmethod
    def of_days(days: int) -> ValidityPeriod:
        return ValidityPeriod(days=days)

    def expiration_date(self, start: date) -> date:
        return _plus_months(start, self.years * 12 + self.months) + timedelta(days=self.days)

    def resolve(self, today: date, tz: tzinfo | None = None) -> ValidityWindow:
        """
        Anchor the period at the start of `today`.

        With tz=None both instants are local midnight in the system timezone.
        """
        return ValidityWindow(
            not_before=_start_of_day(today, tz),
            not_after=_start_of_day(self.expiration_date(today), tz),
        )


# ─────────────────────── Request / Output ───────────────────────


@dataclass(frozen=True, slots=True)
class CertificateRequest:
    """Canonical, validated input for one generation call."""

    key_pair: KeyPair
    subject: DistinguishedName
    validity: ValidityWindow
    alt_names: SubjectAltNames

    @property
    def issuer(self) -> DistinguishedName:
        """Self-signed: the issuer is the subject."""
        return self.subject


@dataclass(frozen=True, slots=True)
class SelfSignedCertificate:
    """
    The generated certificate.

    `der` holds the encoded X.509v3 structure; `certificate` is the same
    structure parsed by `cryptography` for callers that want typed access.
    """

    der: bytes = field(repr=False)
    certificate: x509.Certificate = field(repr=False)
    serial_number: int
    validity: ValidityWindow
    signature_scheme: SignatureScheme

    def pem(self) -> bytes:
        return self.certificate.public_bytes(serialization.Encoding.PEM)

    def fingerprint_sha256(self) -> str:
        return self.certificate.fingerprint(hashes.SHA256()).hex()
