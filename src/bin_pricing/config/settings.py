"""
Centralized settings and path configuration for the bin pricing service.
"""
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def get_package_root() -> Path:
    return Path(__file__).resolve().parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Rate card CSV; built-in tables are used when it does not exist
    rate_card_csv: Optional[Path] = None

    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the environment and the project structure."""
        root = project_root or get_project_root()

        rate_card = os.environ.get('BIN_PRICING_RATE_CARD')
        rate_card_csv = Path(rate_card) if rate_card else get_package_root() / 'rates' / 'rate_card.csv'

        origins = os.environ.get('BIN_PRICING_CORS_ORIGINS', '*')

        return cls(
            project_root=root,
            rate_card_csv=rate_card_csv,
            log_level=os.environ.get('BIN_PRICING_LOG_LEVEL', 'INFO').upper(),
            cors_origins=[o.strip() for o in origins.split(',') if o.strip()],
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
