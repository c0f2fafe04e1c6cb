"""
Configuration management using Pydantic models.

Configuration is read once at startup from an optional YAML file and then
overlaid with environment variables. The resulting ``AppConfig`` is frozen
and passed explicitly to every component.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pendulum
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .domain.exceptions import ConfigurationError


class SchedulingConfig(BaseModel):
    """Slot arithmetic settings. Business days are fixed to Monday-Friday."""
    model_config = ConfigDict(frozen=True)

    min_lead_minutes: int = 120
    duration_minutes: int = 30
    step_minutes: int = 30
    search_days: int = 14
    work_start_hour: int = 9
    work_end_hour: int = 17
    timezone: str = "America/New_York"
    alternatives_count: int = 2

    @field_validator("duration_minutes", "step_minutes", "search_days", "alternatives_count")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure counts and durations are positive."""
        if value <= 0:
            raise ValueError(f"must be greater than zero, got {value}")
        return value

    @field_validator("min_lead_minutes")
    @classmethod
    def validate_lead(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"min_lead_minutes cannot be negative, got {value}")
        return value

    @field_validator("step_minutes")
    @classmethod
    def validate_step(cls, value: int) -> int:
        """Slot starts are counted from the top of the hour, so the step must divide it."""
        if 60 % value != 0:
            raise ValueError(f"step_minutes must divide 60, got {value}")
        return value

    @field_validator("work_start_hour", "work_end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value!r}") from exc
        return value

    @model_validator(mode="after")
    def validate_window(self) -> "SchedulingConfig":
        """Ensure the business window opens before it closes and fits one slot."""
        if self.work_end_hour <= self.work_start_hour:
            raise ValueError("work_end_hour must be later than work_start_hour")
        window_minutes = (self.work_end_hour - self.work_start_hour) * 60
        if self.duration_minutes > window_minutes:
            raise ValueError(
                f"duration_minutes ({self.duration_minutes}) does not fit in the "
                f"{window_minutes}-minute business window"
            )
        return self


class CalendarSettings(BaseModel):
    """Google Calendar connection settings."""
    model_config = ConfigDict(frozen=True)

    calendar_id: str = "primary"
    access_token: str = ""
    event_title: str = "MK Receptions Demo"


class SheetSettings(BaseModel):
    """Google Sheets booking log settings."""
    model_config = ConfigDict(frozen=True)

    spreadsheet_id: str = ""
    tab: str = "Bookings"
    access_token: str = ""  # Falls back to the calendar token when empty


class VoiceSettings(BaseModel):
    """Voice agent stream settings used by the TwiML endpoint."""
    model_config = ConfigDict(frozen=True)

    agent_id: str = ""
    stream_url: str = "wss://api.retellai.com/audio-stream"


class ProviderSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    timeout_seconds: float = 10.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    model_config = ConfigDict(frozen=True)

    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)
    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    sheets: SheetSettings = Field(default_factory=SheetSettings)
    voice: VoiceSettings = Field(default_factory=VoiceSettings)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @property
    def timezone(self) -> str:
        return self.scheduling.timezone

    def sheets_token(self) -> str:
        """Token used for the booking log, defaulting to the calendar token."""
        return self.sheets.access_token or self.calendar.access_token

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        base: Optional["AppConfig"] = None,
    ) -> "AppConfig":
        """
        Overlay environment variables on top of ``base`` (or the defaults).

        Empty variables are ignored so a blank ``.env`` entry never clears a
        value coming from the YAML file.
        """
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = (base or cls()).model_dump()

        for env_name, (section, key) in ENV_OVERRIDES.items():
            raw = (environ.get(env_name) or "").strip()
            if not raw:
                continue
            if section is None:
                data[key] = raw
            else:
                data[section][key] = raw

        token = (environ.get("GOOGLE_ACCESS_TOKEN") or "").strip()
        if token:
            data["calendar"]["access_token"] = token

        return cls.model_validate(data)

    def require_live_settings(self) -> None:
        """
        Check the settings a live (non-mock) deployment cannot run without.

        Raises:
            ConfigurationError: Listing every missing setting
        """
        missing: List[str] = []
        if not self.calendar.calendar_id:
            missing.append("calendar.calendar_id (GCAL_ID)")
        if not self.calendar.access_token:
            missing.append("calendar.access_token (GOOGLE_ACCESS_TOKEN)")
        if not self.sheets.spreadsheet_id:
            missing.append("sheets.spreadsheet_id (SHEET_ID)")
        if not self.voice.agent_id:
            missing.append("voice.agent_id (RETELL_AGENT_ID)")

        if missing:
            raise ConfigurationError("Missing required settings: " + ", ".join(missing))


# Environment variable -> (section, field). ``None`` means a top-level field.
ENV_OVERRIDES: Dict[str, tuple] = {
    "GCAL_ID": ("calendar", "calendar_id"),
    "EVENT_TITLE": ("calendar", "event_title"),
    "SHEET_ID": ("sheets", "spreadsheet_id"),
    "SHEET_TAB": ("sheets", "tab"),
    "SHEETS_ACCESS_TOKEN": ("sheets", "access_token"),
    "DEFAULT_TIMEZONE": ("scheduling", "timezone"),
    "MIN_LEAD_MINUTES": ("scheduling", "min_lead_minutes"),
    "DEMO_DURATION_MINUTES": ("scheduling", "duration_minutes"),
    "SLOT_GRANULARITY_MINUTES": ("scheduling", "step_minutes"),
    "SEARCH_DAYS": ("scheduling", "search_days"),
    "WORK_START_HOUR": ("scheduling", "work_start_hour"),
    "WORK_END_HOUR": ("scheduling", "work_end_hour"),
    "ALTERNATIVES_COUNT": ("scheduling", "alternatives_count"),
    "RETELL_AGENT_ID": ("voice", "agent_id"),
    "VOICE_STREAM_URL": ("voice", "stream_url"),
    "PROVIDER_TIMEOUT_SECONDS": ("provider", "timeout_seconds"),
    "LOG_LEVEL": (None, "log_level"),
}


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    Resolve the process configuration: YAML file (if any) plus environment.

    An explicitly passed path must exist; the default path is optional so a
    purely environment-driven deployment works without a file.

    Raises:
        ConfigurationError: If the file is unreadable or any value is invalid
    """
    try:
        if config_path is not None:
            base = AppConfig.load_from_yaml(config_path)
        else:
            default_path = get_default_config_path()
            base = AppConfig.load_from_yaml(default_path) if default_path.exists() else None

        return AppConfig.from_env(environ, base=base)

    except FileNotFoundError as exc:
        raise ConfigurationError(str(exc)) from exc
    except (ValidationError, ValueError, TypeError) as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
