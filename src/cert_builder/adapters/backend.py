"""
Crypto backend setup — explicit, idempotent, process-wide initialization.

Adapter layer — the `cryptography` OpenSSL backend is process-wide state.
Rather than relying on whatever happens at import time, the pipeline calls
`initialize_backend()` before signing. The first call probes the backend
(OpenSSL build, SHA-2 digests the signature schemes need) and caches the
outcome; every later call returns the cached Result.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

import cryptography
import structlog
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from railway.result import Result
from railway.result_failures import ResultFailures

log = structlog.get_logger()

_REQUIRED_DIGESTS = (hashes.SHA256(), hashes.SHA384(), hashes.SHA512())


@dataclass(frozen=True, slots=True)
class BackendInfo:
    """What the crypto provider reported at initialization."""

    library_version: str
    openssl_version: str


_lock = threading.Lock()
_initialized: Result[BackendInfo] | None = None


def _probe() -> Result[BackendInfo]:
    try:
        backend = default_backend()
        openssl_version = backend.openssl_version_text()
        missing = [d.name for d in _REQUIRED_DIGESTS if not backend.hash_supported(d)]
    except Exception as e:
        return ResultFailures.configuration_error("Crypto backend could not be loaded", e)

    if missing:
        return ResultFailures.configuration_error(
            f"Crypto backend lacks required digests: {', '.join(missing)}"
        )
    return Result.success(
        BackendInfo(
            library_version=cryptography.__version__,
            openssl_version=openssl_version,
        )
    )


def initialize_backend() -> Result[BackendInfo]:
    """
    Probe and register the crypto backend once per process.

    Safe to call from several threads and any number of times.
    """
    global _initialized
    if _initialized is not None:
        return _initialized
    with _lock:
        if _initialized is None:
            _initialized = (
                _probe()
                .with_stage("backend")
                .peek(
                    lambda info: log.info(
                        "backend.initialized",
                        cryptography=info.library_version,
                        openssl=info.openssl_version,
                    )
                )
                .peek_failure(lambda err: log.error("backend.unavailable", error=err.describe()))
            )
        return _initialized


def reset_backend() -> None:
    """Forget the cached initialization (tests only)."""
    global _initialized
    with _lock:
        _initialized = None
