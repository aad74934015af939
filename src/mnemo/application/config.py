from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from mnemo.domain.constants import FAILED_REVIEW_DELAY_MINUTES, SESSION_SIZE_STANDARD


def default_config_files() -> list[Path]:
    return [
        Path.home() / ".config/mnemo/config.toml",
        Path.home() / ".mnemo.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for mnemo.
    Supports loading from:
    1. Environment variables (MNEMO_*)
    2. Config file (~/.config/mnemo/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="MNEMO_",
        extra="ignore",
    )

    # Paths
    data_file: Path = Field(
        default_factory=lambda: Path.home() / ".config/mnemo/flashcards.json",
        validate_default=True,
    )
    backup_dir: Path | None = None

    # Persistence
    backup_on_save: bool = False

    # Study
    session_size: int = Field(default=SESSION_SIZE_STANDARD, ge=1)
    failed_review_delay_minutes: int = Field(default=FAILED_REVIEW_DELAY_MINUTES, ge=0)
    shuffle_seed: int | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Find the first existing file
        toml_file = None
        for f in default_config_files():
            if f.exists():
                toml_file = f
                break

        # Later sources lose: CLI overrides beat env, env beats the file.
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("data_file", mode="before")
    @classmethod
    def resolve_data_file(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("backup_dir", mode="before")
    @classmethod
    def resolve_backup_dir(cls, v: Any) -> Path | None:
        if v is None:
            return None
        return Path(v).expanduser().resolve()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/mnemo/config.toml (if exists)
    3. Environment variables (MNEMO_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    config = AppConfig(**overrides)

    if config.backup_dir is None:
        config.backup_dir = config.data_file.parent / "backups"

    return config
