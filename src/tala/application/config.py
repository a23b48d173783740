import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from tala.domain.constants import (
    DEFAULT_ALLOW_REVIEW_AHEAD,
    DEFAULT_DAILY_NEW_LIMIT,
    DEFAULT_DAILY_REVIEW_LIMIT,
)


def config_home() -> Path:
    return Path.home() / ".config/tala"


def config_file() -> Path:
    return config_home() / "config.toml"


def _clamp_limit(v: Any) -> Any:
    if isinstance(v, int) and not isinstance(v, bool) and v < 0:
        return 0
    return v


class StudySettings(BaseModel):
    """Daily limits and review-ahead switch consumed by the session engine."""

    model_config = ConfigDict(frozen=True)

    daily_new_limit: int = DEFAULT_DAILY_NEW_LIMIT
    daily_review_limit: int = DEFAULT_DAILY_REVIEW_LIMIT
    allow_review_ahead: bool = DEFAULT_ALLOW_REVIEW_AHEAD

    @field_validator("daily_new_limit", "daily_review_limit", mode="after")
    @classmethod
    def clamp_limits(cls, v: int) -> int:
        return _clamp_limit(v)


class AppConfig(BaseSettings):
    """
    Configuration model for tala.
    Supports loading from:
    1. Environment variables (TALA_*)
    2. Config file (~/.config/tala/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="TALA_",
        extra="ignore",
    )

    # Paths
    lessons_dir: Path | None = None
    state_file: Path | None = None
    completion_file: Path | None = None

    # Study settings
    daily_new_limit: int = DEFAULT_DAILY_NEW_LIMIT
    daily_review_limit: int = DEFAULT_DAILY_REVIEW_LIMIT
    allow_review_ahead: bool = DEFAULT_ALLOW_REVIEW_AHEAD

    # 0 warnings only, 1 info, 2 or more debug
    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Earlier sources win: CLI overrides, then environment, then the file.
        toml_file = config_file()
        if toml_file.exists():
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("lessons_dir", "state_file", "completion_file", mode="before")
    @classmethod
    def resolve_path(cls, v: Any) -> Path | None:
        if v is None or v == "":
            return None
        return Path(v).expanduser().resolve()

    @field_validator("daily_new_limit", "daily_review_limit", mode="after")
    @classmethod
    def clamp_limits(cls, v: int) -> int:
        return _clamp_limit(v)

    @property
    def log_level(self) -> int:
        if self.verbose <= 0:
            return logging.WARNING
        if self.verbose == 1:
            return logging.INFO
        return logging.DEBUG

    def study_settings(self) -> StudySettings:
        return StudySettings(
            daily_new_limit=self.daily_new_limit,
            daily_review_limit=self.daily_review_limit,
            allow_review_ahead=self.allow_review_ahead,
        )


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/tala/config.toml (if exists)
    3. Environment variables (TALA_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    config = AppConfig(**overrides)

    if config.lessons_dir is None:
        config.lessons_dir = Path.cwd() / "lessons"

    if config.state_file is None:
        config.state_file = config_home() / "card_states.json"

    if config.completion_file is None:
        config.completion_file = config_home() / "completed_lessons.json"

    return config
