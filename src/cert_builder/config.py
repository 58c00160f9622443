"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables (12-factor app)
  - Fall back to .env file
  - Validate types and constraints at startup

Only AppSettings is a BaseSettings instance. Sub-settings are plain BaseModel
classes populated by AppSettings via env_nested_delimiter="__", so the env var
CERT_BUILDER_KEY__ALGORITHM maps to key.algorithm, CERT_BUILDER_VALIDITY__YEARS
maps to validity.years, etc.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cert_builder.adapters.key_generator import EC_CURVES, RSA_MIN_BIT_LENGTH
from cert_builder.domain.models import KeyAlgorithm, SignatureScheme, ValidityPeriod

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class KeySettings(BaseModel):
    """Key pair generation defaults."""

    algorithm: KeyAlgorithm = Field(default=KeyAlgorithm.RSA, description="RSA or EC")
    bit_length: int = Field(default=2048, ge=256, description="RSA modulus or EC curve size")

    @model_validator(mode="after")
    def check_bit_length(self) -> KeySettings:
        """RSA sizes must reach the provider minimum; EC sizes must name a supported curve."""
        if self.algorithm is KeyAlgorithm.RSA and self.bit_length < RSA_MIN_BIT_LENGTH:
            raise ValueError(
                f"RSA bit_length must be at least {RSA_MIN_BIT_LENGTH}, got {self.bit_length}"
            )
        if self.algorithm is KeyAlgorithm.EC and self.bit_length not in EC_CURVES:
            supported = ", ".join(str(size) for size in EC_CURVES)
            raise ValueError(f"EC bit_length must be one of {supported}, got {self.bit_length}")
        return self


class SigningSettings(BaseModel):
    """
    Signature scheme applied to generated certificates.

    Left unset, the SHA-256 scheme matching the configured key algorithm is used.
    """

    scheme: SignatureScheme | None = Field(
        default=None,
        description="JCA-style scheme name, e.g. SHA256withRSA or SHA256withECDSA",
    )


class ValiditySettings(BaseModel):
    """
    Default certificate lifetime.

    Components may be mixed ("1 year minus 1 day" is years=1, days=-1) but
    at least one must be positive.
    """

    years: int = Field(default=1)
    months: int = Field(default=0)
    days: int = Field(default=0)

    @model_validator(mode="after")
    def check_positive(self) -> ValiditySettings:
        if max(self.years, self.months, self.days) <= 0:
            raise ValueError("Validity period must have at least one positive component")
        return self

    def to_period(self) -> ValidityPeriod:
        return ValidityPeriod(years=self.years, months=self.months, days=self.days)


class AppSettings(BaseSettings):
    """
    Root settings — aggregates all sub-settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="CERT_BUILDER_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    key: KeySettings = Field(default_factory=lambda: KeySettings())
    signing: SigningSettings = Field(default_factory=lambda: SigningSettings())
    validity: ValiditySettings = Field(default_factory=lambda: ValiditySettings())

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @model_validator(mode="after")
    def check_scheme_matches_key(self) -> AppSettings:
        """Reject a configured scheme that cannot sign the configured key family."""
        scheme = self.signing.scheme
        if scheme is not None and scheme.key_algorithm is not self.key.algorithm:
            raise ValueError(
                f"signing.scheme {scheme.value} cannot sign {self.key.algorithm.value} keys"
            )
        return self

    @property
    def signature_scheme(self) -> SignatureScheme:
        """The configured scheme, or the default for the configured key algorithm."""
        return self.signing.scheme or SignatureScheme.default_for(self.key.algorithm)
