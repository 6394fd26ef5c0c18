from dataclasses import dataclass
from functools import lru_cache
import json
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from smarter_scheduler.core.exceptions import ConfigurationError


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

DEFAULT_SCHEDULING_DAYS = [
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
]


def _split_list_value(value: str) -> list[str]:
    stripped = value.strip()
    if stripped.startswith("["):
        try:
            parsed = json.loads(stripped)
            if isinstance(parsed, list):
                return [str(item).strip() for item in parsed if str(item).strip()]
        except json.JSONDecodeError:
            pass
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(env_file=str(BACKEND_ENV_FILE), env_file_encoding="utf-8")

    project_name: str = "Smarter Scheduler API"
    api_prefix: str = "/api"

    slot_minutes: int = 50
    scheduling_days: Annotated[list[str], NoDecode] = list(DEFAULT_SCHEDULING_DAYS)
    low_utilization_threshold: float = 50.0
    high_utilization_threshold: float = 90.0

    max_request_size_bytes: int = 2_500_000

    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5000",
        "http://127.0.0.1:5000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return _split_list_value(value)
        return value

    @field_validator("scheduling_days", mode="before")
    @classmethod
    def split_scheduling_days(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            value = _split_list_value(value)
        return [str(day).strip().upper() for day in value if str(day).strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


WEEKDAYS = (
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "SUNDAY",
)
ALL_DAYS = "ALL_DAYS"


@dataclass(frozen=True)
class EngineConfig:
    """Constants that shape a scheduling run and the metrics derived from it."""

    slot_minutes: int = 50
    days: tuple[str, ...] = tuple(DEFAULT_SCHEDULING_DAYS)
    low_utilization_threshold: float = 50.0
    high_utilization_threshold: float = 90.0

    def __post_init__(self) -> None:
        if self.slot_minutes <= 0:
            raise ConfigurationError("slot_minutes must be a positive number of minutes")
        if not self.days:
            raise ConfigurationError("At least one scheduling day is required")
        unknown = [day for day in self.days if day not in WEEKDAYS]
        if unknown:
            raise ConfigurationError(f"Unknown scheduling day(s): {', '.join(unknown)}")
        if len(set(self.days)) != len(self.days):
            raise ConfigurationError("Scheduling days must be unique")
        if self.low_utilization_threshold > self.high_utilization_threshold:
            raise ConfigurationError("low_utilization_threshold cannot exceed high_utilization_threshold")

    @classmethod
    def from_settings(cls, settings: Settings) -> "EngineConfig":
        return cls(
            slot_minutes=settings.slot_minutes,
            days=tuple(settings.scheduling_days),
            low_utilization_threshold=settings.low_utilization_threshold,
            high_utilization_threshold=settings.high_utilization_threshold,
        )


DEFAULT_ENGINE_CONFIG = EngineConfig()
