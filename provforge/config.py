"""Runtime configuration, env-driven.

Reads from a ``.env`` file and ``PROVFORGE_*`` environment variables via
pydantic-settings.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ProvforgeConfig(BaseSettings):
    """Provforge configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export PROVFORGE_LOG_LEVEL=DEBUG
        export PROVFORGE_REGISTRY_PATH=/data/registry.db
        export PROVFORGE_DEFAULT_SENDER=0xpublisher
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PROVFORGE_",
        env_file_encoding="utf-8",
    )

    environment: str = "development"
    log_level: str = "INFO"

    # Storage paths
    registry_path: Path = Path(".provforge/registry.db")
    audit_log_path: Path = Path(".provforge/audit.jsonl")

    # Principal used by the CLI when --sender is not given
    default_sender: str = "0x0"

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton: `from provforge.config import config`
config = ProvforgeConfig()
