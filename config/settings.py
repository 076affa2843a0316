# hospital_analytics_root/config/settings.py
#
# Centralized Application Configuration
# This file defines the analytics configuration using Pydantic for validation
# and type safety. Settings load from environment variables or a .env file, and
# are handed to the dispatcher explicitly; the engine functions never read them.

import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Define Project Root ---
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# --- Logger for Settings Module ---
settings_logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# 1. NESTED CONFIGURATION MODELS
# -----------------------------------------------------------------------------

class AppConfig(BaseModel):
    """Core application metadata and logging settings."""
    name: str = "Hospital Analytics Engine"
    version: str = "1.0.0"
    organization_name: str = "Hospital Analytics Platform"

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: str = "%(asctime)s - %(name)s.%(funcName)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    random_seed: int = 42

class EpidemiologyConfig(BaseModel):
    """Catchment population and observation window for rate calculations."""
    population: int = Field(default=10000, gt=0)
    time_period_days: int = Field(default=365, gt=0)

class TrendConfig(BaseModel):
    time_unit: Literal["daily", "weekly", "monthly", "yearly"] = "monthly"

class HypothesisConfig(BaseModel):
    """Defaults for the group comparison run by the dispatcher."""
    comparison_field: str = "age"
    test_type: Literal["t-test", "mann-whitney", "chi-square"] = "t-test"

class SurveillanceConfig(BaseModel):
    threshold_multiplier: float = Field(default=2.0, gt=0)

class ForecastConfig(BaseModel):
    periods: int = Field(default=6, ge=0)

class NarrativeConfig(BaseModel):
    """Controls the optional narrative collaborator."""
    enabled: bool = True
    sample_size: int = Field(default=100, ge=0)

# -----------------------------------------------------------------------------
# 2. MAIN SETTINGS CLASS
# -----------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Main settings class for the analytics engine.
    Aggregates all configuration models and loads from environment variables,
    e.g. HOSPITAL_ANALYTICS_EPIDEMIOLOGY__POPULATION=25000.
    """
    model_config = SettingsConfigDict(
        env_prefix='HOSPITAL_ANALYTICS_',
        case_sensitive=False,
        env_nested_delimiter='__',
        env_file=f"{PROJECT_ROOT}/.env",
        extra='ignore'
    )

    app: AppConfig = Field(default_factory=AppConfig)
    epidemiology: EpidemiologyConfig = Field(default_factory=EpidemiologyConfig)
    trends: TrendConfig = Field(default_factory=TrendConfig)
    hypothesis: HypothesisConfig = Field(default_factory=HypothesisConfig)
    surveillance: SurveillanceConfig = Field(default_factory=SurveillanceConfig)
    forecasting: ForecastConfig = Field(default_factory=ForecastConfig)
    narrative: NarrativeConfig = Field(default_factory=NarrativeConfig)

    @computed_field
    @property
    def app_banner(self) -> str:
        return f"{self.app.name} v{self.app.version} ({self.app.organization_name})"


def configure_logging(app_config: AppConfig) -> None:
    """Applies the configured level and format to the root logger."""
    logging.basicConfig(
        level=app_config.log_level,
        format=app_config.log_format,
        datefmt=app_config.log_date_format,
        force=True  # Override any existing handlers
    )

# -----------------------------------------------------------------------------
# 3. DEFAULT INSTANCE
# Loaded once at import; callers may build their own Settings and pass it in.
# -----------------------------------------------------------------------------

try:
    settings = Settings()
    settings_logger.info(
        f"Settings loaded for '{settings.app.name}' v{settings.app.version}. "
        f"LOG_LEVEL={settings.app.log_level}. PROJECT_ROOT='{PROJECT_ROOT}'"
    )
except Exception as e:
    settings_logger.critical(f"FATAL: Could not initialize application settings. Error: {e}", exc_info=True)
    raise
