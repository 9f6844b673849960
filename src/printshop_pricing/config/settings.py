"""
Centralized settings and path configuration for the pricing service.
"""
import logging
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Stores
    pricing_settings_path: Path
    coupons_csv: Path

    # Order totals
    tax_rate: float = 0.18  # GST
    currency_symbol: str = "₹"
    home_state: str = "TN"

    # Runtime
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        data_dir = Path(os.environ.get('PRINTSHOP_DATA_DIR', root / 'data'))

        return cls(
            project_root=root,
            data_dir=data_dir,
            pricing_settings_path=data_dir / 'pricing_settings.json',
            coupons_csv=data_dir / 'coupons.csv',
            tax_rate=float(os.environ.get('PRINTSHOP_TAX_RATE', 0.18)),
            home_state=os.environ.get('PRINTSHOP_HOME_STATE', 'TN').strip().upper(),
            log_level=os.environ.get('PRINTSHOP_LOG_LEVEL', 'INFO').upper(),
            api_host=os.environ.get('PRINTSHOP_API_HOST', '0.0.0.0'),
            api_port=int(os.environ.get('PRINTSHOP_API_PORT', 8000)),
        )

    def ensure_data_dir(self) -> Path:
        """Create the data directory if it does not exist yet."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def configure_logging(settings: Optional[Settings] = None):
    """Set up root logging at the configured level."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
