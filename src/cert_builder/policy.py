"""
Generation policy — the pluggable points of the pipeline.

The orchestration (request → extensions → sign → encode) is fixed. What a
caller may change is:

  - the signature scheme (GenerationPolicy.signature_scheme)
  - the builder behind any extension slot (GenerationPolicy.extension_overrides)

A slot builder takes the canonical request and returns the extensions for
that slot. The SAN slot yields two extensions (SAN, then SKI); every other
default slot yields one. An override replaces exactly one slot and keeps
its position in the fixed order.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum, unique
from types import MappingProxyType

from cryptography import x509
from railway.result import Result

from cert_builder.domain.models import CertificateRequest, KeyAlgorithm, SignatureScheme


@unique
class ExtensionSlot(Enum):
    """Extension slots in the order they are added to the certificate."""

    AUTHORITY_KEY_IDENTIFIER = "authority_key_identifier"
    BASIC_CONSTRAINTS = "basic_constraints"
    KEY_USAGE = "key_usage"
    EXTENDED_KEY_USAGE = "extended_key_usage"
    SUBJECT_ALTERNATIVE_NAME = "subject_alternative_name"


type ExtensionBuilder = Callable[[CertificateRequest], Result[list[x509.Extension]]]


@dataclass(frozen=True, slots=True)
class GenerationPolicy:
    """Signature scheme plus per-slot extension overrides."""

    signature_scheme: SignatureScheme = SignatureScheme.SHA256_WITH_RSA
    extension_overrides: Mapping[ExtensionSlot, ExtensionBuilder] = field(
        default_factory=dict
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "extension_overrides", MappingProxyType(dict(self.extension_overrides))
        )

    @staticmethod
    def for_key_algorithm(algorithm: KeyAlgorithm) -> GenerationPolicy:
        """Default policy with the SHA-256 scheme matching the key family."""
        return GenerationPolicy(signature_scheme=SignatureScheme.default_for(algorithm))

    def with_override(self, slot: ExtensionSlot, builder: ExtensionBuilder) -> GenerationPolicy:
        overrides = dict(self.extension_overrides)
        overrides[slot] = builder
        return GenerationPolicy(
            signature_scheme=self.signature_scheme, extension_overrides=overrides
        )
