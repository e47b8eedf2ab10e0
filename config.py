# config.py
import os
from dataclasses import dataclass, field
from datetime import date
from typing import List

from dotenv import load_dotenv

load_dotenv()


class ConfigError(Exception):
    """Raised when an environment setting is present but unusable."""


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


def _get_date(name: str, default: date) -> date:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an ISO date (YYYY-MM-DD), got {raw!r}")


def _get_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    ymag_api_url: str = "https://groupe-espi.ymag.cloud/index.php/r/v1/sql/requeteur"
    ymag_api_token: str = ""
    ymag_timeout: float = 30.0
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "bulletins_db"
    storage_dir: str = "storage"
    school_name: str = "ÉCOLE SUPÉRIEURE DE L'IMMOBILIER"
    academic_year_start: date = date(2024, 8, 26)
    academic_year_end: date = date(2025, 7, 31)
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build settings from the process environment (and .env, if present)."""
    defaults = Settings()
    settings = Settings(
        ymag_api_url=os.getenv("YMAG_API_URL", defaults.ymag_api_url),
        ymag_api_token=os.getenv("YMAG_API_TOKEN", defaults.ymag_api_token),
        ymag_timeout=_get_float("YMAG_TIMEOUT", defaults.ymag_timeout),
        mongodb_uri=os.getenv("MONGODB_URI", defaults.mongodb_uri),
        mongodb_db=os.getenv("MONGODB_DB", defaults.mongodb_db),
        storage_dir=os.getenv("STORAGE_DIR", defaults.storage_dir),
        school_name=os.getenv("SCHOOL_NAME", defaults.school_name),
        academic_year_start=_get_date("ACADEMIC_YEAR_START", defaults.academic_year_start),
        academic_year_end=_get_date("ACADEMIC_YEAR_END", defaults.academic_year_end),
        cors_origins=_get_list("CORS_ORIGINS", defaults.cors_origins),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )
    if settings.academic_year_end < settings.academic_year_start:
        raise ConfigError("ACADEMIC_YEAR_END is before ACADEMIC_YEAR_START")
    if settings.ymag_timeout <= 0:
        raise ConfigError("YMAG_TIMEOUT must be positive")
    return settings


_settings = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
