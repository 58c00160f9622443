"""
Composition root — wires settings into concrete collaborators.

This is the ONLY place where settings are turned into adapters.
Everything else depends on Protocol interfaces or explicit arguments.

Responsibilities:
  1. Configure structlog for structured logging
  2. Initialize the crypto backend once, explicitly
  3. Build a CertificateAssembler from AppSettings
  4. Generate the configured default key pair
"""

from __future__ import annotations

import logging

import structlog
from railway.result import Result

from cert_builder.adapters.backend import BackendInfo, initialize_backend
from cert_builder.adapters.key_generator import CryptographyKeyPairGenerator
from cert_builder.assembler import CertificateAssembler
from cert_builder.config import AppSettings
from cert_builder.domain.models import KeyPair
from cert_builder.policy import GenerationPolicy


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for structured, human-readable console output.

    Unknown level names fall back to INFO.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bootstrap(settings: AppSettings) -> Result[BackendInfo]:
    """Set up logging and the crypto backend; call once at process start."""
    configure_structlog(settings.log_level)
    return initialize_backend()


def create_policy(settings: AppSettings) -> GenerationPolicy:
    return GenerationPolicy(signature_scheme=settings.signature_scheme)


def create_assembler(settings: AppSettings) -> CertificateAssembler:
    """CertificateAssembler signing with the configured scheme."""
    return CertificateAssembler(create_policy(settings))


def create_key_pair(settings: AppSettings) -> Result[KeyPair]:
    """Generate a key pair with the configured algorithm and size."""
    return CryptographyKeyPairGenerator().generate(
        settings.key.algorithm, settings.key.bit_length
    )
