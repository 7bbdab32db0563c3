# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: store
connection, embedding executor, chunking budget, artifact root and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is missing or internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Store ===
    store_backend: Literal["arangodb"] = "arangodb"
    arango_url: str = "http://localhost:8529"
    arango_database: str = "wsindex"
    arango_user: str = "root"
    arango_password: str = ""
    store_request_timeout: float = 60.0

    # === Embedding executor ===
    embed_kind: Literal["http", "openai"] = "http"
    embed_url: str = ""
    embed_model: str = ""
    embed_model_sha: str = ""
    embed_api_key: str = ""
    embed_request_timeout: float = 120.0
    embed_batch_size: int = 16

    # Provenance of any upstream dimensionality-reduction transform
    effective_dim: int = 0
    transform_id: str = ""

    # === Chunking ===
    tokenizer_id: str = "cl100k_base"
    max_tokens_per_chunk: int = 768

    # === Eligibility ===
    max_embed_file_bytes: int = 256 * 1024
    binary_probe_bytes: int = 1024

    # === Artifacts ===
    artifact_root: Path = Path("var/lib/wsindex/artifacts")

    # === Scanner ===
    skip_dirs: str = ".git,.hg,.svn,node_modules,.idea,.vscode"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "embed_batch_size",
        "max_tokens_per_chunk",
        "max_embed_file_bytes",
        "binary_probe_bytes",
    )
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @field_validator("effective_dim")
    @classmethod
    def validate_effective_dim(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("effective_dim must be >= 0")
        return v

    @field_validator("store_request_timeout", "embed_request_timeout")
    @classmethod
    def validate_timeout(cls, v: float, info) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    # --- Helpers ---

    @property
    def skip_dirs_list(self) -> list[str]:
        """Parse comma-separated skip directory names."""
        return [d.strip() for d in self.skip_dirs.split(",") if d.strip()]

    def missing_required_fields(self) -> list[str]:
        """List the settings a pipeline cannot be built without."""
        missing: list[str] = []
        if self.embed_kind == "http" and not self.embed_url.strip():
            missing.append("embed_url")
        if not self.embed_model.strip():
            missing.append("embed_model")
        if not self.embed_model_sha.strip():
            missing.append("embed_model_sha")
        if self.effective_dim <= 0:
            missing.append("effective_dim")
        if not self.transform_id.strip():
            missing.append("transform_id")
        return missing

    def ensure_complete(self) -> None:
        """Raise ConfigurationError naming every missing required field."""
        missing = self.missing_required_fields()
        if missing:
            raise ConfigurationError(
                f"config missing required fields: {', '.join(missing)}"
            )


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
