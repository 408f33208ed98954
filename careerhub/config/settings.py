"""
Configuration settings management with environment variable support.
"""

import json
from pathlib import Path
from typing import Dict, Optional
from functools import lru_cache

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from careerhub.utils.file_utils import load_json


# Load environment variables
load_dotenv()

HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


class ExportSettings(BaseModel):
    """Defaults for resume and cover letter exports."""
    default_template: str = "classic"
    include_watermark: bool = False
    watermark_text: str = "Generated with Resume Builder"
    font_family: str = "Arial"
    font_size_pt: int = 11
    primary_color: str = Field(default="#2563eb", pattern=HEX_COLOR_PATTERN)
    cover_letter_style: str = "professional"


class MonitorSettings(BaseModel):
    """API monitor configuration."""
    enabled: bool = True
    max_metrics: int = 500
    slow_threshold_ms: int = 5000
    flush_delay_seconds: float = 2.0
    persist: bool = True


class CacheSettings(BaseModel):
    """Tiered cache configuration."""
    default_ttl_seconds: int = 300
    memory_max_size: int = 100
    use_disk: bool = True


class SecuritySettings(BaseModel):
    """Security self-check configuration."""
    rate_limit_probe_requests: int = 5
    probe_timeout: int = 10
    edge_functions_verify_jwt: bool = False


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Backend-as-a-service connection
    backend_url: str = Field(default="http://localhost:54321", validation_alias="BACKEND_URL")
    backend_anon_key: str = Field(default="", validation_alias="BACKEND_ANON_KEY")

    # Application settings from environment
    secret_key: str = Field(default="dev-secret-change-me", validation_alias="SECRET_KEY")
    debug: bool = Field(default=False, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, validation_alias="LOG_FILE")
    timeout: int = Field(default=30, validation_alias="TIMEOUT")
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=5001, validation_alias="PORT")

    # Directories
    exports_dir: Path = Field(default=Path("data/exports"), validation_alias="EXPORTS_DIR")
    reports_dir: Path = Field(default=Path("data/reports"), validation_alias="REPORTS_DIR")
    cache_dir: Path = Field(default=Path("data/cache"), validation_alias="CACHE_DIR")

    export: ExportSettings = Field(default_factory=ExportSettings)
    monitor: MonitorSettings = Field(default_factory=MonitorSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    @classmethod
    def from_json(cls, config_path: str = "config.json") -> "Settings":
        """
        Load settings from JSON configuration file.

        Values from the file override environment defaults.

        Args:
            config_path: Path to JSON configuration file

        Returns:
            Settings instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        try:
            config_data = load_json(config_path)

            settings = cls(**config_data)

            # Ensure directories exist
            settings.exports_dir.mkdir(parents=True, exist_ok=True)
            settings.reports_dir.mkdir(parents=True, exist_ok=True)

            return settings

        except FileNotFoundError:
            raise FileNotFoundError(
                f"❌ Config file not found: {config_path}\n"
                "   Create config.json or rely on environment variables"
            )
        except json.JSONDecodeError as e:
            raise ValueError(f"❌ Invalid JSON in config file: {e}")
        except ValidationError as e:
            raise ValueError(f"❌ Invalid configuration: {e}")

    @property
    def is_localhost(self) -> bool:
        """Whether the backend points at a local development stack."""
        return "localhost" in self.backend_url or "127.0.0.1" in self.backend_url

    def to_dict(self) -> Dict:
        """Convert settings to dictionary."""
        return self.model_dump(exclude_none=True, mode="json")


@lru_cache()
def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get cached settings instance.

    Args:
        config_path: Optional path to a JSON configuration file. When omitted
            (or missing on disk) settings come from the environment only.

    Returns:
        Settings instance (cached)
    """
    if config_path and Path(config_path).exists():
        return Settings.from_json(config_path)
    return Settings()
