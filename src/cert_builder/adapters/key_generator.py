"""
Key pair generation adapter — RSA and EC keys via `cryptography`.

Implements the KeyPairGenerator port. Randomness comes from the OS CSPRNG
inside OpenSSL, which is safe to use from concurrent threads, so each call
is independent.

EC bit lengths map to NIST named curves:
  256 → P-256 (secp256r1), 384 → P-384 (secp384r1), 521 → P-521 (secp521r1)
"""

from __future__ import annotations

import structlog
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from railway import ErrorCode
from railway.result import Result
from railway.result_failures import ResultFailures

from cert_builder.domain.models import KeyAlgorithm, KeyPair

log = structlog.get_logger()

RSA_PUBLIC_EXPONENT = 65537
# smallest modulus cryptography will generate
RSA_MIN_BIT_LENGTH = 1024

EC_CURVES: dict[int, type[ec.EllipticCurve]] = {
    256: ec.SECP256R1,
    384: ec.SECP384R1,
    521: ec.SECP521R1,
}


def _coerce_algorithm(algorithm: KeyAlgorithm | str) -> KeyAlgorithm | None:
    if isinstance(algorithm, KeyAlgorithm):
        return algorithm
    try:
        return KeyAlgorithm(str(algorithm).upper())
    except ValueError:
        return None


class CryptographyKeyPairGenerator:
    """
    Generate key pairs with the `cryptography` OpenSSL backend.

    Implements the KeyPairGenerator port.
    Provider exceptions are caught at this boundary via Result.from_computation().
    """

    def generate(self, algorithm: KeyAlgorithm | str, bit_length: int) -> Result[KeyPair]:
        """
        Generate an RSA or EC key pair of the requested size.

        Returns Result.failure(UNSUPPORTED_ALGORITHM, ...) when the algorithm is
        unknown, the EC size has no named curve, or the provider rejects the
        RSA modulus size.
        """
        resolved = _coerce_algorithm(algorithm)
        if resolved is None:
            return ResultFailures.unsupported_algorithm(
                f"No provider supports key algorithm {algorithm!r}"
            ).with_stage("key_generation")

        if resolved is KeyAlgorithm.RSA:
            result = self._generate_rsa(bit_length)
        else:
            result = self._generate_ec(bit_length)

        return (
            result.with_stage("key_generation")
            .peek(
                lambda pair: log.info(
                    "keys.generated", algorithm=resolved.value, bit_length=pair.bit_length
                )
            )
            .peek_failure(
                lambda err: log.warning(
                    "keys.generation_failed",
                    algorithm=resolved.value,
                    bit_length=bit_length,
                    error=err.describe(),
                )
            )
        )

    def _generate_rsa(self, bit_length: int) -> Result[KeyPair]:
        return Result.from_computation(
            lambda: KeyPair.from_private_key(
                rsa.generate_private_key(public_exponent=RSA_PUBLIC_EXPONENT, key_size=bit_length)
            ),
            ErrorCode.UNSUPPORTED_ALGORITHM,
            f"RSA key generation failed for {bit_length} bits",
        )

    def _generate_ec(self, bit_length: int) -> Result[KeyPair]:
        curve = EC_CURVES.get(bit_length)
        if curve is None:
            supported = ", ".join(str(size) for size in EC_CURVES)
            return ResultFailures.unsupported_algorithm(
                f"No named EC curve for {bit_length} bits (supported: {supported})"
            )
        return Result.from_computation(
            lambda: KeyPair.from_private_key(ec.generate_private_key(curve())),
            ErrorCode.UNSUPPORTED_ALGORITHM,
            f"EC key generation failed for {curve.name}",
        )


def generate_rsa_key_pair(bit_length: int = 2048) -> Result[KeyPair]:
    """Generate an RSA key pair of `bit_length` bits."""
    return CryptographyKeyPairGenerator().generate(KeyAlgorithm.RSA, bit_length)


def generate_ec_key_pair(bit_length: int = 256) -> Result[KeyPair]:
    """Generate an EC key pair on the named curve matching `bit_length`."""
    return CryptographyKeyPairGenerator().generate(KeyAlgorithm.EC, bit_length)
