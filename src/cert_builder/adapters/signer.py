"""
Signing adapter — signs the to-be-signed certificate via `cryptography`.

Implements the CertificateSigner port. The scheme is a policy value
(SignatureScheme); the default is SHA256withRSA.

A key whose family does not match the scheme is rejected before the
provider is touched: an EC key with an RSA scheme fails with SIGNING_ERROR
instead of producing a certificate whose signature algorithm identifier
disagrees with the caller's configuration. Callers who want the scheme to
follow the key use SignatureScheme.default_for(key_pair.algorithm).
"""

from __future__ import annotations

import structlog
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from railway import ErrorCode
from railway.result import Result
from railway.result_failures import ResultFailures

from cert_builder.adapters.backend import initialize_backend
from cert_builder.domain.models import KeyPair, SignatureScheme

log = structlog.get_logger()

_DIGESTS: dict[SignatureScheme, type[hashes.HashAlgorithm]] = {
    SignatureScheme.SHA256_WITH_RSA: hashes.SHA256,
    SignatureScheme.SHA384_WITH_RSA: hashes.SHA384,
    SignatureScheme.SHA512_WITH_RSA: hashes.SHA512,
    SignatureScheme.SHA256_WITH_ECDSA: hashes.SHA256,
    SignatureScheme.SHA384_WITH_ECDSA: hashes.SHA384,
    SignatureScheme.SHA512_WITH_ECDSA: hashes.SHA512,
}


def digest_for(scheme: SignatureScheme) -> hashes.HashAlgorithm:
    """Hash algorithm instance used by the given scheme."""
    return _DIGESTS[scheme]()


class CryptographySigner:
    """
    Sign certificates with a fixed SignatureScheme.

    Implements the CertificateSigner port.
    """

    def __init__(self, scheme: SignatureScheme = SignatureScheme.SHA256_WITH_RSA) -> None:
        self._scheme = scheme

    @property
    def scheme(self) -> SignatureScheme:
        return self._scheme

    def sign(self, tbs: x509.CertificateBuilder, key_pair: KeyPair) -> Result[x509.Certificate]:
        """
        Sign `tbs` with the pair's private key.

        Steps:
          1. Make sure the crypto backend is initialized (idempotent)
          2. Check the key family against the scheme
          3. Delegate to CertificateBuilder.sign()
        """
        return (
            initialize_backend()
            .flat_map(lambda _: self._check_key(key_pair))
            .flat_map(
                lambda pair: Result.from_computation(
                    lambda: tbs.sign(pair.private_key, digest_for(self._scheme)),  # type: ignore[arg-type]
                    ErrorCode.SIGNING_ERROR,
                    f"Signing provider failed for {self._scheme.value}",
                )
            )
            .with_stage("signing")
        )

    def _check_key(self, key_pair: KeyPair) -> Result[KeyPair]:
        algorithm = key_pair.algorithm
        if algorithm is not self._scheme.key_algorithm:
            found = algorithm.value if algorithm is not None else type(key_pair.private_key).__name__
            log.warning("signer.key_mismatch", scheme=self._scheme.value, key=found)
            return ResultFailures.signing_error(
                f"{self._scheme.value} requires an {self._scheme.key_algorithm.value} "
                f"private key, got {found}"
            )
        return Result.success(key_pair)
