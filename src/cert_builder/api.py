"""
Public entry points.

    from cert_builder.api import generate_key_pair, generate_self_signed
    from cert_builder.domain.models import DistinguishedName, KeyAlgorithm, ValidityPeriod

    keys = generate_key_pair(KeyAlgorithm.RSA, 2048).value()
    result = generate_self_signed(
        keys,
        ValidityPeriod.of_years(1),
        DistinguishedName("device-17", "Acme", "Field", "Berlin", "Berlin", "DE"),
        "urn:acme:device-17",
        dns_names=["device-17.local"],
        ip_addresses=["192.168.0.17"],
    )

Both return a railway Result; inspect it with .is_success() / .error()
or destructure it with match/case.
"""

from __future__ import annotations

from collections.abc import Sequence

from railway.result import Result

from cert_builder.adapters.key_generator import (
    CryptographyKeyPairGenerator,
    generate_ec_key_pair,
    generate_rsa_key_pair,
)
from cert_builder.assembler import CertificateAssembler
from cert_builder.domain.models import (
    DistinguishedName,
    KeyAlgorithm,
    KeyPair,
    SelfSignedCertificate,
    ValidityPeriod,
)
from cert_builder.policy import GenerationPolicy

__all__ = [
    "generate_key_pair",
    "generate_rsa_key_pair",
    "generate_ec_key_pair",
    "generate_self_signed",
]


def generate_key_pair(algorithm: KeyAlgorithm | str, bit_length: int) -> Result[KeyPair]:
    """Generate an RSA or EC key pair; fails with UNSUPPORTED_ALGORITHM."""
    return CryptographyKeyPairGenerator().generate(algorithm, bit_length)


def generate_self_signed(
    key_pair: KeyPair,
    validity_period: ValidityPeriod,
    distinguished_name: DistinguishedName,
    application_uri: str,
    dns_names: Sequence[str] = (),
    ip_addresses: Sequence[str] = (),
    policy: GenerationPolicy | None = None,
) -> Result[SelfSignedCertificate]:
    """
    Generate a self-signed certificate for `key_pair`.

    Fails with INVALID_INPUT, EXTENSION_ENCODING_ERROR, SIGNING_ERROR or
    ENCODING_ERROR. The default policy signs with SHA256withRSA; pass
    GenerationPolicy.for_key_algorithm(KeyAlgorithm.EC) for EC keys.
    """
    return CertificateAssembler(policy).generate(
        key_pair,
        validity_period,
        distinguished_name,
        application_uri,
        dns_names,
        ip_addresses,
    )
