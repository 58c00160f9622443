"""
Unit tests for CertificateAssembler — the generation pipeline.

Uses mock ports (fake adapters) to test the orchestration in isolation,
and the real adapters for the success track.

Test categories:
  - Success track: real adapters → parsed v3 certificate
  - Failure at each stage: request/extensions/signing fails
  - Short-circuit: early failure prevents later stages from being called
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.x509.oid import ExtensionOID, NameOID
from railway import ErrorCode, Result, ResultAssertions

from cert_builder.assembler import _verify_structure, to_x509_name
from cert_builder.domain.models import DistinguishedName, KeyPair, SignatureScheme, ValidityPeriod
from cert_builder.policy import ExtensionSlot, GenerationPolicy
from tests.conftest import make_assembler

# ─────────────────────── Mock Port Factories ───────────────────────


def _make_signer(result: Result[x509.Certificate]) -> MagicMock:
    """Create a mock CertificateSigner returning the given Result."""
    mock = MagicMock()
    mock.scheme = SignatureScheme.SHA256_WITH_RSA
    mock.sign.return_value = result
    return mock


def _make_extension_assembler(result: Result[tuple[x509.Extension, ...]]) -> MagicMock:
    """Create a mock ExtensionAssembler returning the given Result."""
    mock = MagicMock()
    mock.assemble.return_value = result
    return mock


def _make_serials(*values: int) -> MagicMock:
    mock = MagicMock()
    mock.next_serial.side_effect = list(values)
    return mock


# ─────────────────────── Success Track ───────────────────────


class TestGenerateSuccess:
    def test_returns_v3_self_signed_certificate(
        self,
        rsa_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
        one_year: ValidityPeriod,
    ) -> None:
        """
        GIVEN real adapters and valid input
        WHEN generate is called
        THEN a v3 certificate with issuer == subject is returned.
        """
        cert = ResultAssertions.assert_success(
            make_assembler().generate(
                rsa_key_pair, one_year, distinguished_name, "urn:test:app", ["localhost"]
            )
        )
        parsed = cert.certificate
        assert parsed.version is x509.Version.v3
        assert parsed.issuer == parsed.subject
        assert parsed.subject.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "test"
        assert cert.signature_scheme is SignatureScheme.SHA256_WITH_RSA

    def test_der_matches_parsed_certificate(
        self,
        rsa_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
        one_year: ValidityPeriod,
    ) -> None:
        cert = ResultAssertions.assert_success(
            make_assembler().generate(rsa_key_pair, one_year, distinguished_name, "urn:test:app")
        )
        assert x509.load_der_x509_certificate(cert.der) == cert.certificate
        assert cert.pem().startswith(b"-----BEGIN CERTIFICATE-----")

    def test_serial_from_source(
        self,
        rsa_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
        one_year: ValidityPeriod,
    ) -> None:
        assembler = make_assembler(serial_numbers=_make_serials(1_700_000_000_123))
        cert = ResultAssertions.assert_success(
            assembler.generate(rsa_key_pair, one_year, distinguished_name, "urn:test:app")
        )
        assert cert.serial_number == 1_700_000_000_123
        assert cert.certificate.serial_number == 1_700_000_000_123

    def test_consecutive_calls_get_distinct_serials(
        self,
        rsa_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
        one_year: ValidityPeriod,
    ) -> None:
        assembler = make_assembler()
        first = assembler.generate(rsa_key_pair, one_year, distinguished_name, "urn:test:app")
        second = assembler.generate(rsa_key_pair, one_year, distinguished_name, "urn:test:app")
        assert first.value().serial_number != second.value().serial_number

    def test_same_key_signs_twice(
        self,
        rsa_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
        one_year: ValidityPeriod,
    ) -> None:
        """The caller's key pair is only read, never consumed."""
        assembler = make_assembler()
        for _ in range(2):
            ResultAssertions.assert_success(
                assembler.generate(rsa_key_pair, one_year, distinguished_name, "urn:test:app")
            )
        assert rsa_key_pair.halves_match()

    def test_ec_key_with_ecdsa_policy(
        self,
        ec_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
        one_year: ValidityPeriod,
    ) -> None:
        policy = GenerationPolicy(signature_scheme=SignatureScheme.SHA256_WITH_ECDSA)
        cert = ResultAssertions.assert_success(
            make_assembler(policy).generate(ec_key_pair, one_year, distinguished_name, "urn:test:app")
        )
        assert cert.signature_scheme is SignatureScheme.SHA256_WITH_ECDSA

    def test_policy_exposed(self) -> None:
        policy = GenerationPolicy(signature_scheme=SignatureScheme.SHA512_WITH_RSA)
        assert make_assembler(policy).policy is policy


# ─────────────────────── Failure Track ───────────────────────


class TestRequestFailure:
    def test_zero_validity_fails_before_signing(
        self,
        rsa_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
    ) -> None:
        """
        GIVEN a validity period of zero days
        WHEN generate is called
        THEN it fails with INVALID_INPUT and nothing downstream runs.
        """
        signer = _make_signer(Result.failure(ErrorCode.SIGNING_ERROR, "unreachable"))
        extensions = _make_extension_assembler(Result.success(()))
        serials = _make_serials(1)
        assembler = make_assembler(
            signer=signer, extension_assembler=extensions, serial_numbers=serials
        )

        result = assembler.generate(
            rsa_key_pair, ValidityPeriod.of_days(0), distinguished_name, "urn:test:app"
        )

        ResultAssertions.assert_failure(result, ErrorCode.INVALID_INPUT)
        ResultAssertions.assert_failure_stage(result, "request")
        serials.next_serial.assert_not_called()
        extensions.assemble.assert_not_called()
        signer.sign.assert_not_called()


class TestExtensionFailure:
    def test_extension_failure_skips_signing(
        self,
        rsa_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
        one_year: ValidityPeriod,
    ) -> None:
        signer = _make_signer(Result.failure(ErrorCode.SIGNING_ERROR, "unreachable"))
        extensions = _make_extension_assembler(
            Result.failure(ErrorCode.EXTENSION_ENCODING_ERROR, "bad SAN", field="ip_addresses[0]")
        )
        assembler = make_assembler(signer=signer, extension_assembler=extensions)

        result = assembler.generate(rsa_key_pair, one_year, distinguished_name, "urn:test:app")

        ResultAssertions.assert_failure(result, ErrorCode.EXTENSION_ENCODING_ERROR)
        ResultAssertions.assert_failure_field(result, "ip_addresses[0]")
        signer.sign.assert_not_called()

    def test_bad_ip_with_real_adapters(
        self,
        rsa_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
        one_year: ValidityPeriod,
    ) -> None:
        result = make_assembler().generate(
            rsa_key_pair, one_year, distinguished_name, "urn:test:app", [], ["not-an-ip"]
        )
        ResultAssertions.assert_failure(result, ErrorCode.EXTENSION_ENCODING_ERROR)
        ResultAssertions.assert_failure_stage(result, "extensions")

    def test_malformed_override_is_classified(
        self,
        rsa_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
        one_year: ValidityPeriod,
    ) -> None:
        """
        GIVEN a policy whose Basic Constraints override yields a single Extension
        WHEN generate is called
        THEN it fails with EXTENSION_ENCODING_ERROR instead of raising.
        """
        constraints = x509.BasicConstraints(ca=False, path_length=None)
        policy = GenerationPolicy().with_override(
            ExtensionSlot.BASIC_CONSTRAINTS,
            lambda request: Result.success(x509.Extension(constraints.oid, False, constraints)),  # type: ignore[arg-type,return-value]
        )
        result = make_assembler(policy).generate(
            rsa_key_pair, one_year, distinguished_name, "urn:test:app"
        )
        ResultAssertions.assert_failure(result, ErrorCode.EXTENSION_ENCODING_ERROR)
        ResultAssertions.assert_failure_field(result, "basic_constraints")


class TestSigningFailure:
    def test_signer_failure_is_returned(
        self,
        rsa_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
        one_year: ValidityPeriod,
    ) -> None:
        signer = _make_signer(Result.failure(ErrorCode.SIGNING_ERROR, "provider down"))
        result = make_assembler(signer=signer).generate(
            rsa_key_pair, one_year, distinguished_name, "urn:test:app"
        )
        ResultAssertions.assert_failure(result, ErrorCode.SIGNING_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "provider down")
        signer.sign.assert_called_once()

    def test_ec_key_with_default_policy(
        self,
        ec_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
        one_year: ValidityPeriod,
    ) -> None:
        """
        GIVEN an EC key pair and the default (SHA256withRSA) policy
        WHEN generate is called
        THEN it fails with SIGNING_ERROR at the signing stage.
        """
        result = make_assembler().generate(ec_key_pair, one_year, distinguished_name, "urn:test:app")
        ResultAssertions.assert_failure(result, ErrorCode.SIGNING_ERROR)
        ResultAssertions.assert_failure_stage(result, "signing")


# ─────────────────────── Encoding helpers ───────────────────────


class TestToX509Name:
    def test_one_rdn_per_attribute_in_order(self, distinguished_name: DistinguishedName) -> None:
        name = to_x509_name(distinguished_name)
        assert len(name.rdns) == 6
        assert [attr.value for attr in name] == [
            "test",
            "Example Org",
            "Devices",
            "Springfield",
            "Oregon",
            "US",
        ]
        assert [attr.oid for attr in name] == [
            NameOID.COMMON_NAME,
            NameOID.ORGANIZATION_NAME,
            NameOID.ORGANIZATIONAL_UNIT_NAME,
            NameOID.LOCALITY_NAME,
            NameOID.STATE_OR_PROVINCE_NAME,
            NameOID.COUNTRY_NAME,
        ]


class TestVerifyStructure:
    def test_garbage_is_encoding_error(self) -> None:
        result = _verify_structure(b"\x30\x03\x02\x01\x01", ())
        ResultAssertions.assert_failure(result, ErrorCode.ENCODING_ERROR)

    @pytest.fixture()
    def generated(
        self,
        rsa_key_pair: KeyPair,
        distinguished_name: DistinguishedName,
        one_year: ValidityPeriod,
    ) -> x509.Certificate:
        return (
            make_assembler()
            .generate(rsa_key_pair, one_year, distinguished_name, "urn:test:app")
            .value()
            .certificate
        )

    def test_order_mismatch_is_encoding_error(self, generated: x509.Certificate) -> None:
        der = generated.public_bytes(serialization.Encoding.DER)
        reversed_extensions = tuple(reversed(list(generated.extensions)))
        result = _verify_structure(der, reversed_extensions)
        ResultAssertions.assert_failure(result, ErrorCode.ENCODING_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "order")

    def test_matching_order_passes(self, generated: x509.Certificate) -> None:
        der = generated.public_bytes(serialization.Encoding.DER)
        result = _verify_structure(der, tuple(generated.extensions))
        assert result.is_success()
        assert generated.extensions.get_extension_for_oid(ExtensionOID.SUBJECT_KEY_IDENTIFIER)
