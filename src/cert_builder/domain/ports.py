"""
Ports — Protocol-based interfaces for the pipeline's collaborators.

These define WHAT the certificate pipeline needs without specifying HOW
it's done. Following hexagonal architecture:

  Domain ← Ports (protocols) ← Adapters (implementations)

Each port is a Protocol (structural typing) so adapters, and test doubles,
satisfy the contract simply by implementing the methods.

Generation flow:
  1. ExtensionAssembler  → ordered X.509v3 extensions for a request
  2. CertificateSigner   → signature over the to-be-signed structure
  3. SerialNumberSource  → unique serial per call
Key generation is a separate entry point (KeyPairGenerator).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cryptography import x509
from railway.result import Result

from cert_builder.domain.models import (
    CertificateRequest,
    KeyAlgorithm,
    KeyPair,
    SignatureScheme,
)


@runtime_checkable
class KeyPairGenerator(Protocol):
    """
    Port: produce a fresh key pair.

    Fails with UNSUPPORTED_ALGORITHM when the provider cannot satisfy the
    algorithm / bit length combination.
    """

    def generate(self, algorithm: KeyAlgorithm, bit_length: int) -> Result[KeyPair]: ...


@runtime_checkable
class ExtensionAssembler(Protocol):
    """
    Port: build the ordered, non-critical extension set for a request.

    Order: AKI, Basic Constraints, Key Usage, Extended Key Usage, SAN, SKI.
    Fails with EXTENSION_ENCODING_ERROR without returning a partial set.
    """

    def assemble(self, request: CertificateRequest) -> Result[tuple[x509.Extension, ...]]: ...


@runtime_checkable
class CertificateSigner(Protocol):
    """
    Port: sign a to-be-signed certificate structure with the request's private key.

    Fails with SIGNING_ERROR on key / scheme mismatch or provider failure.
    """

    @property
    def scheme(self) -> SignatureScheme: ...

    def sign(
        self,
        tbs: x509.CertificateBuilder,
        key_pair: KeyPair,
    ) -> Result[x509.Certificate]: ...


@runtime_checkable
class SerialNumberSource(Protocol):
    """Port: hand out a positive serial number, never the same one twice."""

    def next_serial(self) -> int: ...
