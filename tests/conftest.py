"""
Shared test fixtures and helpers for the cert-builder test suite.

Key generation is slow, so the RSA and EC key pairs are session-scoped.
Dates are pinned through FIXED_TODAY and UTC so validity assertions do
not depend on the machine's clock or timezone.
"""

from __future__ import annotations

from datetime import UTC, date

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from cert_builder.assembler import CertificateAssembler
from cert_builder.domain.models import DistinguishedName, KeyPair, ValidityPeriod
from cert_builder.policy import GenerationPolicy

FIXED_TODAY = date(2024, 1, 15)


@pytest.fixture(scope="session")
def rsa_key_pair() -> KeyPair:
    """RSA-2048 key pair shared by the whole session."""
    return KeyPair.from_private_key(rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def other_rsa_key_pair() -> KeyPair:
    """A second, unrelated RSA-2048 key pair."""
    return KeyPair.from_private_key(rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def ec_key_pair() -> KeyPair:
    """P-256 key pair shared by the whole session."""
    return KeyPair.from_private_key(ec.generate_private_key(ec.SECP256R1()))


@pytest.fixture()
def distinguished_name() -> DistinguishedName:
    return DistinguishedName(
        common_name="test",
        organization="Example Org",
        organizational_unit="Devices",
        locality="Springfield",
        state="Oregon",
        country_code="US",
    )


@pytest.fixture()
def one_year() -> ValidityPeriod:
    return ValidityPeriod.of_years(1)


def make_assembler(policy: GenerationPolicy | None = None, **kwargs: object) -> CertificateAssembler:
    """CertificateAssembler pinned to FIXED_TODAY in UTC."""
    kwargs.setdefault("today", lambda: FIXED_TODAY)
    kwargs.setdefault("tz", UTC)
    return CertificateAssembler(policy, **kwargs)  # type: ignore[arg-type]
