from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class AppConfig(BaseSettings):
    """
    Application configuration for ridquiz.
    Supports loading from:
    1. Environment variables (RIDQUIZ_*)
    2. Config file (~/.config/ridquiz/config.toml)
    3. Manual overrides (CLI)

    Quiz settings (shuffle, session length, categories, speech) are not here:
    they live in the settings store so they can change mid-run.
    """

    model_config = SettingsConfigDict(
        env_prefix="RIDQUIZ_",
        extra="ignore",
    )

    # Paths
    catalog_path: Path | None = None  # None = bundled vocabulary
    settings_path: Path = Field(
        default_factory=lambda: Path.home() / ".config/ridquiz/settings.yaml"
    )

    # Session
    ephemeral: bool = False  # keep settings in memory only
    seed: int | None = None

    # Feedback
    notifier: Literal["console", "log", "none"] = "console"
    speech_command: str = "espeak-ng"
    speech_voice: str = "uk"

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
        from pydantic_settings import TomlConfigSettingsSource

        # Recomputed here so tests that patch HOME see their own files
        toml_files = [
            Path.home() / ".config/ridquiz/config.toml",
            Path.home() / ".ridquiz.toml",
        ]
        toml_file = next((f for f in toml_files if f.exists()), None)

        # Earlier sources win: CLI overrides, then env, then the file
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

    @field_validator("catalog_path", "settings_path", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        if v is None or v == "":
            return None
        return Path(v).expanduser()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/ridquiz/config.toml (if exists)
    3. Environment variables (RIDQUIZ_*)
    4. cli_overrides (passed from Typer)
    """
    # Typer passes None for options the user did not give
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
