"""Application settings loaded from .env file"""
from pathlib import Path
from typing import Literal, Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVEL = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
EXTERNAL_CLASSIFIER = Literal["none", "openai", "zero-shot", "static"]

CONFIG_DIR = Path(__file__).resolve().parent

class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables (.env)
    """
    # Logging configuration
    log_level: LOG_LEVEL = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)"
    )
    log_format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(module)s:%(funcName)s:%(lineno)d - %(message)s",
        description="Default log format (can be customized if needed)"
    )
    log_date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Date/time format for logs"
    )
    log_to_file: bool = Field(
        default=False,
        description="If true, enable logging to a file"
    )
    log_file_path: str = Field(
        default="logs/app.log",
        description="Path to log file"
    )
    log_file_rotation: str = Field(
        default="midnight",
        description="Log file rotation interval"
    )
    log_file_retention: int = Field(
        default=7,
        ge=1,
        description="Number of days to retain log files"
    )
    quiet_loggers: Tuple[str, ...] = Field(
        default=("httpx", "httpcore", "openai", "urllib3", "transformers"),
        description="Third-party loggers held at WARNING or above"
    )

    # Registry and catalog snapshots
    registry_path: str = Field(
        default=str(CONFIG_DIR / "personas.json"),
        description="JSON file holding persona configs, detection patterns and registry constants"
    )
    catalog_path: str = Field(
        default=str(CONFIG_DIR / "catalog.json"),
        description="JSON file holding the read-only product catalog snapshot"
    )

    # Registry constant overrides (None keeps the value from the registry file)
    calibration_constant: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Raw score that maps to confidence 1.0"
    )
    external_margin: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Confidence lead an external result needs to override the rule-based winner"
    )
    confidence_floor: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Rule-based confidence below this falls back to the default persona"
    )

    # External classifier
    external_classifier: EXTERNAL_CLASSIFIER = Field(
        default="none",
        description="Secondary classifier: none, openai, zero-shot or static"
    )
    external_timeout_seconds: float = Field(
        default=3.0,
        gt=0.0,
        description="Upper bound for one external classification call"
    )
    external_max_workers: int = Field(
        default=4,
        ge=1,
        description="Worker threads for concurrent external classification calls"
    )
    openai_api_key: Optional[str] = Field(
        default=None,
        description="API key for the OpenAI classifier"
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="Chat model used by the OpenAI classifier"
    )
    zero_shot_model_name: str = Field(
        default="facebook/bart-large-mnli",
        description="Hugging Face NLI model for the zero-shot classifier"
    )
    static_persona: str = Field(
        default="homeowner",
        description="Persona answered by the static fallback classifier"
    )
    static_confidence: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Confidence answered by the static fallback classifier"
    )

    # Accuracy tracking
    performance_log_path: Optional[str] = Field(
        default=None,
        description="If set, detection outcomes are appended to this JSONL file"
    )
    bulk_test_workers: int = Field(
        default=1,
        ge=1,
        description="Worker threads used by bulk detection tests"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
