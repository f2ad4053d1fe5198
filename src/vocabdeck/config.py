"""Configuration settings for the study tool."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
EXPORT_DIR = DATA_DIR / "exports"
VOCABULARY_FILE = Path(os.getenv("VOCABULARY_FILE", str(DATA_DIR / "list.json")))

# SRS settings
DEFAULT_SRS_INTERVALS = [1, 3, 7, 14, 30, 60, 120, 240]  # days, level = position
DEFAULT_INTERVAL_DAYS = 1  # used when a level is missing from the table


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        EXPORT_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


def parse_intervals(value: str) -> list[int]:
    """Parse a comma separated list of day counts."""
    return [int(item) for item in value.split(",") if item.strip()]


def get_srs_intervals() -> list[int]:
    """Get SRS intervals from environment variable."""
    value = os.getenv("SRS_INTERVALS")
    if not value:
        return list(DEFAULT_SRS_INTERVALS)
    return parse_intervals(value)


@dataclass
class PathSettings:
    """Path configuration settings."""
    data_dir: Path = DATA_DIR
    export_dir: Path = EXPORT_DIR
    vocabulary_file: Path = VOCABULARY_FILE


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///vocabdeck.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class StudySettings:
    """Study session settings."""
    session_key: str = os.getenv("SESSION_KEY", "default")
    srs_intervals: list[int] = field(default_factory=get_srs_intervals)
    difficult_words_limit: int = int(os.getenv("DIFFICULT_WORDS_LIMIT", "20"))

    @property
    def interval_table(self) -> Dict[int, int]:
        """Intervals keyed by level, starting at level 1."""
        return {level: days for level, days in enumerate(self.srs_intervals, start=1)}


@dataclass
class MonitoringSettings:
    """Metrics exporter settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_study_settings() -> StudySettings:
    """Get study settings."""
    return StudySettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    study: StudySettings = field(default_factory=get_study_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.study.session_key.strip():
            raise ValueError("SESSION_KEY must not be empty")

        if not self.study.srs_intervals:
            raise ValueError("SRS_INTERVALS must contain at least one interval")

        if any(days < 1 for days in self.study.srs_intervals):
            raise ValueError("SRS_INTERVALS must be positive day counts")

        if self.study.difficult_words_limit < 1:
            raise ValueError("DIFFICULT_WORDS_LIMIT must be positive")

        if not 0 < self.monitoring.port < 65536:
            raise ValueError("METRICS_PORT must be between 1 and 65535")


# Create global settings instance
settings = Settings()
settings.validate()
