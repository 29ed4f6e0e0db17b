"""
Rulegate Configuration — pydantic-settings based.

All settings are read from environment variables or .env file.
Every value has a default so the engine can run without any environment.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application-wide settings sourced from environment variables."""

    # ── Rule sets ──
    default_profile: str = Field(
        default="default", description="Rule set profile used when a request names none"
    )

    # ── Decision ──
    fundamental_design_threshold: int = Field(
        default=3,
        ge=0,
        description=(
            "BLOCKING fundamental-design violations above this count turn "
            "REQUEST_CHANGES into REJECT (outside prototype code)"
        ),
    )

    # ── Analysis ──
    max_unit_size_bytes: int = Field(
        default=500_000, description="Max source unit size to accept (bytes)"
    )
    max_concurrent_units: int = Field(
        default=8, ge=1, description="Units analysed concurrently in a batch"
    )

    # ── Cache ──
    cache_enabled: bool = Field(default=True, description="Cache extracted facets")
    cache_ttl_seconds: int = Field(
        default=3600, description="Time-to-live for facet cache entries"
    )

    # ── Audit ──
    audit_enabled: bool = Field(default=True, description="Write the audit trail")
    audit_log_path: str = Field(
        default="audit.jsonl", description="Path to JSON-lines audit log file"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance imported by other modules
settings = Settings()
