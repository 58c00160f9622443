"""
Certificate assembler — the ROP pipeline that produces a self-signed certificate.

Stages are connected via flat_map, forming a railway:

  build request (validate, resolve validity)
    → to-be-signed structure (issuer = subject, serial, validity, public key)
      → extensions (AKI, BC, KU, EKU, SAN + SKI, in that order)
        → sign
          → encode DER + structural check
            → SelfSignedCertificate

Each stage returns Result[T]. The first failure short-circuits the rest and
is returned tagged with its stage; no partial certificate ever escapes.
Collaborators are injected via ports so tests can replace any of them.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date, tzinfo

import structlog
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import NameOID
from railway import ErrorCode
from railway.result import Result
from railway.result_failures import ResultFailures

from cert_builder.adapters.extensions import X509ExtensionAssembler
from cert_builder.adapters.serial import default_serial_source
from cert_builder.adapters.signer import CryptographySigner
from cert_builder.domain.models import (
    CertificateRequest,
    DistinguishedName,
    KeyPair,
    SelfSignedCertificate,
    ValidityPeriod,
)
from cert_builder.domain.ports import CertificateSigner, ExtensionAssembler, SerialNumberSource
from cert_builder.policy import GenerationPolicy
from cert_builder.request_builder import CertificateRequestBuilder

log = structlog.get_logger()

_NAME_OIDS = {
    "common_name": NameOID.COMMON_NAME,
    "organization": NameOID.ORGANIZATION_NAME,
    "organizational_unit": NameOID.ORGANIZATIONAL_UNIT_NAME,
    "locality": NameOID.LOCALITY_NAME,
    "state": NameOID.STATE_OR_PROVINCE_NAME,
    "country_code": NameOID.COUNTRY_NAME,
}


def to_x509_name(name: DistinguishedName) -> x509.Name:
    """One RDN per attribute, in CN, O, OU, L, ST, C order."""
    return x509.Name(
        [
            x509.RelativeDistinguishedName([x509.NameAttribute(_NAME_OIDS[field], value)])
            for field, value in name.items()
        ]
    )


def _to_be_signed(request: CertificateRequest, serial_number: int) -> Result[x509.CertificateBuilder]:
    """Issuer, subject, serial, validity and public key; no extensions yet."""
    return Result.from_computation(
        lambda: (
            x509.CertificateBuilder()
            .subject_name(to_x509_name(request.subject))
            .issuer_name(to_x509_name(request.issuer))
            .serial_number(serial_number)
            .not_valid_before(request.validity.not_before)
            .not_valid_after(request.validity.not_after)
            .public_key(request.key_pair.public_key)  # type: ignore[arg-type]
        ),
        ErrorCode.ENCODING_ERROR,
        "Cannot build the to-be-signed certificate",
    ).with_stage("tbs")


def _attach_extensions(
    tbs: x509.CertificateBuilder,
    extensions: tuple[x509.Extension, ...],
) -> Result[x509.CertificateBuilder]:
    def add_all() -> x509.CertificateBuilder:
        builder = tbs
        for extension in extensions:
            builder = builder.add_extension(extension.value, critical=extension.critical)
        return builder

    return Result.from_computation(
        add_all, ErrorCode.EXTENSION_ENCODING_ERROR, "Cannot attach extension"
    ).with_stage("extensions")


def _verify_structure(
    der: bytes,
    extensions: tuple[x509.Extension, ...],
) -> Result[bytes]:
    """
    Re-parse the DER independently of the encoder that produced it.

    Checks that issuer and subject are byte-identical and that the extensions
    come out in the order they were assembled.
    """
    try:
        parsed = asn1_x509.Certificate.load(der, strict=True)
        tbs = parsed["tbs_certificate"]
        same_name = tbs["issuer"].dump() == tbs["subject"].dump()
        encoded_oids = [ext["extn_id"].dotted for ext in tbs["extensions"]]
    except Exception as e:
        return ResultFailures.encoding_error("Encoded certificate does not parse as X.509", e)

    if not same_name:
        return ResultFailures.encoding_error("Encoded issuer differs from subject")
    expected_oids = [extension.oid.dotted_string for extension in extensions]
    if encoded_oids != expected_oids:
        return ResultFailures.encoding_error(
            f"Encoded extension order {encoded_oids} differs from assembled {expected_oids}"
        )
    return Result.success(der)


class CertificateAssembler:
    """
    Generate self-signed certificates.

    Wiring defaults: CryptographySigner with the policy's scheme,
    X509ExtensionAssembler with the policy's overrides, the process-wide
    millisecond timestamp serial source, local calendar day and system timezone.
    """

    def __init__(
        self,
        policy: GenerationPolicy | None = None,
        *,
        signer: CertificateSigner | None = None,
        extension_assembler: ExtensionAssembler | None = None,
        serial_numbers: SerialNumberSource | None = None,
        today: Callable[[], date] = date.today,
        tz: tzinfo | None = None,
    ) -> None:
        self._policy = policy or GenerationPolicy()
        self._signer = signer or CryptographySigner(self._policy.signature_scheme)
        self._extensions = extension_assembler or X509ExtensionAssembler(
            self._policy.extension_overrides
        )
        self._serial_numbers = serial_numbers or default_serial_source
        self._request_builder = CertificateRequestBuilder(today=today, tz=tz)

    @property
    def policy(self) -> GenerationPolicy:
        return self._policy

    def generate(
        self,
        key_pair: KeyPair,
        validity_period: ValidityPeriod,
        distinguished_name: DistinguishedName,
        application_uri: str,
        dns_names: Sequence[str] = (),
        ip_addresses: Sequence[str] = (),
    ) -> Result[SelfSignedCertificate]:
        """
        Execute the full generation pipeline.

        Flow:
          1. Validate input, build DN, resolve validity (CertificateRequestBuilder)
          2. Draw a serial number
          3. Build the to-be-signed structure
          4. Assemble and attach the five extension slots
          5. Sign
          6. Encode to DER and verify the structure

        Returns Result[SelfSignedCertificate] on success, or the failure of
        the first failing stage.
        """
        return (
            self._request_builder.build(
                key_pair,
                validity_period,
                distinguished_name,
                application_uri,
                dns_names,
                ip_addresses,
            )
            .flat_map(self._issue)
            .peek(
                lambda cert: log.info(
                    "certificate.generated",
                    serial=cert.serial_number,
                    not_before=cert.validity.not_before.isoformat(),
                    not_after=cert.validity.not_after.isoformat(),
                    scheme=cert.signature_scheme.value,
                    fingerprint=cert.fingerprint_sha256(),
                )
            )
            .peek_failure(
                lambda err: log.warning(
                    "certificate.generation_failed",
                    code=err.code.value,
                    stage=err.stage,
                    field=err.field,
                    error=err.message,
                )
            )
        )

    def _issue(self, request: CertificateRequest) -> Result[SelfSignedCertificate]:
        serial_number = self._serial_numbers.next_serial()
        return Result.combine(
            _to_be_signed(request, serial_number),
            self._extensions.assemble(request),
            lambda tbs, extensions: (tbs, extensions),
        ).flat_map(
            lambda parts: _attach_extensions(*parts)
            .flat_map(lambda tbs: self._signer.sign(tbs, request.key_pair))
            .flat_map(lambda certificate: self._encode(certificate, parts[1]))
            .map(
                lambda encoded: SelfSignedCertificate(
                    der=encoded[0],
                    certificate=encoded[1],
                    serial_number=serial_number,
                    validity=request.validity,
                    signature_scheme=self._signer.scheme,
                )
            )
        )

    @staticmethod
    def _encode(
        certificate: x509.Certificate,
        extensions: tuple[x509.Extension, ...],
    ) -> Result[tuple[bytes, x509.Certificate]]:
        return (
            Result.from_computation(
                lambda: certificate.public_bytes(serialization.Encoding.DER),
                ErrorCode.ENCODING_ERROR,
                "Cannot encode the signed certificate",
            )
            .flat_map(lambda der: _verify_structure(der, extensions))
            .map(lambda der: (der, certificate))
            .with_stage("encoding")
        )
