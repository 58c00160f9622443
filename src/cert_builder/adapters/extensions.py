"""
Extension assembler adapter — the X.509v3 extension set via `cryptography`.

Implements the ExtensionAssembler port. Five slots, each non-critical,
always added in this order:

  1. Authority Key Identifier  — key identifier of the (self) issuer's key
  2. Basic Constraints         — CA:TRUE, no path length
  3. Key Usage                 — digitalSignature, nonRepudiation, keyEncipherment,
                                 dataEncipherment, keyAgreement, keyCertSign
  4. Extended Key Usage        — clientAuth, serverAuth
  5. Subject Alternative Name  — URI, DNS names, IP addresses; followed by the
                                 Subject Key Identifier

Key identifiers are the SHA-1 of the subjectPublicKey bit string (RFC 5280
§4.2.1.2 method 1), so AKI and SKI of a self-signed certificate are equal.

Basic Constraints is CA:TRUE even though the certificate serves as an
end-entity identity.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Mapping

import structlog
from cryptography import x509
from cryptography.x509.oid import ExtendedKeyUsageOID
from railway import ErrorCode
from railway.result import Result
from railway.result_failures import ResultFailures

from cert_builder.domain.models import CertificateRequest
from cert_builder.policy import ExtensionBuilder, ExtensionSlot

log = structlog.get_logger()

EXTENDED_KEY_USAGES = (ExtendedKeyUsageOID.CLIENT_AUTH, ExtendedKeyUsageOID.SERVER_AUTH)


def _non_critical(value: x509.ExtensionType) -> x509.Extension:
    return x509.Extension(value.oid, False, value)


# ─────────────────────── Default slot builders ───────────────────────


def build_authority_key_identifier(request: CertificateRequest) -> Result[list[x509.Extension]]:
    """AKI carrying only the key identifier of the issuer (= subject) public key."""
    return Result.from_computation(
        lambda: [
            _non_critical(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(
                    request.key_pair.public_key  # type: ignore[arg-type]
                )
            )
        ],
        ErrorCode.EXTENSION_ENCODING_ERROR,
        "Cannot derive authority key identifier",
        field="key_pair",
    )


def build_basic_constraints(request: CertificateRequest) -> Result[list[x509.Extension]]:
    return Result.success([_non_critical(x509.BasicConstraints(ca=True, path_length=None))])


def build_key_usage(request: CertificateRequest) -> Result[list[x509.Extension]]:
    return Result.success(
        [
            _non_critical(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=True,
                    key_encipherment=True,
                    data_encipherment=True,
                    key_agreement=True,
                    key_cert_sign=True,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                )
            )
        ]
    )


def build_extended_key_usage(request: CertificateRequest) -> Result[list[x509.Extension]]:
    return Result.success([_non_critical(x509.ExtendedKeyUsage(list(EXTENDED_KEY_USAGES)))])


def _uri_name(value: str) -> Result[x509.GeneralName]:
    return Result.from_computation(
        lambda: x509.UniformResourceIdentifier(value),
        ErrorCode.EXTENSION_ENCODING_ERROR,
        f"Cannot encode URI {value!r}",
        field="application_uri",
    )


def _dns_name(index: int, value: str) -> Result[x509.GeneralName]:
    return Result.from_computation(
        lambda: x509.DNSName(value),
        ErrorCode.EXTENSION_ENCODING_ERROR,
        f"Cannot encode DNS name {value!r}",
        field=f"dns_names[{index}]",
    )


def _ip_name(index: int, value: str) -> Result[x509.GeneralName]:
    try:
        if "/" in value:
            address = ipaddress.ip_network(value, strict=False)
        else:
            address = ipaddress.ip_address(value)
    except ValueError as e:
        return ResultFailures.extension_encoding_error(
            f"ip_addresses[{index}]", f"{value!r} is not a valid IP address or network literal", e
        )
    return Result.success(x509.IPAddress(address))


def build_subject_alternative_name(request: CertificateRequest) -> Result[list[x509.Extension]]:
    """
    SAN (URI first, then DNS names, then IP addresses) followed by the SKI.

    The request has already de-duplicated the DNS and IP lists. A single bad
    entry fails the whole slot and the failure names its list position.
    """
    alt_names = request.alt_names
    general_names = Result.all_of(
        [_uri_name(alt_names.application_uri)]
        + [_dns_name(i, name) for i, name in enumerate(alt_names.dns_names)]
        + [_ip_name(i, address) for i, address in enumerate(alt_names.ip_addresses)]
    )
    subject_key_identifier = Result.from_computation(
        lambda: x509.SubjectKeyIdentifier.from_public_key(
            request.key_pair.public_key  # type: ignore[arg-type]
        ),
        ErrorCode.EXTENSION_ENCODING_ERROR,
        "Cannot derive subject key identifier",
        field="key_pair",
    )
    return Result.combine(
        general_names,
        subject_key_identifier,
        lambda names, ski: [
            _non_critical(x509.SubjectAlternativeName(names)),
            _non_critical(ski),
        ],
    )


DEFAULT_BUILDERS: Mapping[ExtensionSlot, ExtensionBuilder] = {
    ExtensionSlot.AUTHORITY_KEY_IDENTIFIER: build_authority_key_identifier,
    ExtensionSlot.BASIC_CONSTRAINTS: build_basic_constraints,
    ExtensionSlot.KEY_USAGE: build_key_usage,
    ExtensionSlot.EXTENDED_KEY_USAGE: build_extended_key_usage,
    ExtensionSlot.SUBJECT_ALTERNATIVE_NAME: build_subject_alternative_name,
}


# ─────────────────────── Assembler ───────────────────────


def _ensure_unique(extensions: list[x509.Extension]) -> Result[tuple[x509.Extension, ...]]:
    seen: set[x509.ObjectIdentifier] = set()
    for extension in extensions:
        if extension.oid in seen:
            return ResultFailures.extension_encoding_error(
                None, f"Duplicate extension {extension.oid.dotted_string}"
            )
        seen.add(extension.oid)
    return Result.success(tuple(extensions))


def _check_slot_result(slot: ExtensionSlot, result: object) -> Result[list[x509.Extension]]:
    """A slot builder must return a Result holding a list or tuple of x509.Extension."""
    if not isinstance(result, Result):
        return ResultFailures.extension_encoding_error(
            slot.value, f"Extension builder returned {type(result).__name__}, not a Result"
        )

    def check(extensions: object) -> Result[list[x509.Extension]]:
        if isinstance(extensions, (list, tuple)) and all(
            isinstance(extension, x509.Extension) for extension in extensions
        ):
            return Result.success(list(extensions))
        return ResultFailures.extension_encoding_error(
            slot.value,
            f"Extension builder must yield a list of x509.Extension, got {type(extensions).__name__}",
        )

    return result.flat_map(check)


class X509ExtensionAssembler:
    """
    Assemble the ordered extension set for a CertificateRequest.

    Implements the ExtensionAssembler port. Slot builders default to the
    module-level build_* functions; `overrides` swaps individual slots.
    """

    def __init__(self, overrides: Mapping[ExtensionSlot, ExtensionBuilder] | None = None) -> None:
        self._builders = {**DEFAULT_BUILDERS, **(overrides or {})}

    def assemble(self, request: CertificateRequest) -> Result[tuple[x509.Extension, ...]]:
        """
        Run every slot in ExtensionSlot order and flatten the results.

        Returns the first slot failure (no partial set), or
        Result.failure(EXTENSION_ENCODING_ERROR, ...) if two slots emit the same OID.
        """
        slot_results = [self._run_slot(slot, request) for slot in ExtensionSlot]
        return (
            Result.all_of(slot_results)
            .map(lambda groups: [extension for group in groups for extension in group])
            .flat_map(_ensure_unique)
            .with_stage("extensions")
            .peek(
                lambda extensions: log.debug(
                    "extensions.assembled",
                    oids=[extension.oid.dotted_string for extension in extensions],
                )
            )
        )

    def _run_slot(self, slot: ExtensionSlot, request: CertificateRequest) -> Result[list[x509.Extension]]:
        builder = self._builders[slot]
        # overrides are caller code; an exception there is still an encoding failure
        return Result.from_computation(
            lambda: builder(request),
            ErrorCode.EXTENSION_ENCODING_ERROR,
            f"Extension builder for {slot.value} raised",
        ).flat_map(lambda result: _check_slot_result(slot, result))
