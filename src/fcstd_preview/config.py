"""Configuration models and loading logic."""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_SETTINGS_FILE = Path("configs/settings.yaml")
SETTINGS_FILE_ENV = "FCSTD_PREVIEW_SETTINGS_FILE"


def _resolve_optional(value: Path | None, project_root: Path) -> Path | None:
    if value is None or value.is_absolute():
        return value
    return (project_root / value).resolve()


class ProjectConfig(BaseModel):
    """Project metadata settings."""

    name: str = "fcstd_preview"
    env: str = "dev"


class DiscoveryConfig(BaseModel):
    """Candidate discovery and preview naming."""

    extension: str = ".fcstd"
    preview_suffix: str = "-preview.png"


class IgnoreConfig(BaseModel):
    """Ignore-pattern source used by batch runs."""

    file: Path | None = None
    enabled: bool = True


class FitConfig(BaseModel):
    """External FreeCAD invocation used to regenerate thumbnails."""

    executable: str = "freecad"
    macro_path: Path | None = None
    timeout_sec: float | None = Field(default=600.0, gt=0.0)
    terminate_grace_sec: float = Field(default=10.0, ge=0.0)


class LoggingConfig(BaseModel):
    """Console and file logging settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: Path | None = None


class ReportsConfig(BaseModel):
    """Run summary artifact settings."""

    enabled: bool = False
    root: Path = Path("./artifacts/run_summaries")
    compression: Literal["zstd", "snappy", "gzip", "brotli", "lz4", "uncompressed"] = "zstd"


class AppSettings(BaseSettings):
    """Top-level application settings."""

    _yaml_file_override: ClassVar[Path | None] = None

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    ignore: IgnoreConfig = Field(default_factory=IgnoreConfig)
    fit: FitConfig = Field(default_factory=FitConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    reports: ReportsConfig = Field(default_factory=ReportsConfig)

    model_config = SettingsConfigDict(
        env_prefix="FCSTD_PREVIEW_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Use YAML defaults while allowing env vars to override values."""

        yaml_file = resolve_settings_file(cls._yaml_file_override)
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_settings,
            file_secret_settings,
        )

    def resolved(self, project_root: Path) -> "AppSettings":
        """Return a copy with project-relative file paths made absolute."""

        return self.model_copy(
            update={
                "ignore": self.ignore.model_copy(
                    update={"file": _resolve_optional(self.ignore.file, project_root)}
                ),
                "fit": self.fit.model_copy(
                    update={"macro_path": _resolve_optional(self.fit.macro_path, project_root)}
                ),
                "logging": self.logging.model_copy(
                    update={"log_file": _resolve_optional(self.logging.log_file, project_root)}
                ),
                "reports": self.reports.model_copy(
                    update={"root": _resolve_optional(self.reports.root, project_root)}
                ),
            }
        )

    def as_dict(self) -> dict[str, object]:
        """Return settings as a standard nested dictionary."""

        return self.model_dump(mode="json")


def find_project_root(start: Path | None = None) -> Path:
    """Locate the project root by traversing upward for config markers."""

    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / DEFAULT_SETTINGS_FILE).exists():
            return candidate
    return current


def resolve_settings_file(override: Path | None = None) -> Path:
    """Resolve settings file from explicit override, env var, or default."""

    chosen = override
    if chosen is None:
        env_value = os.getenv(SETTINGS_FILE_ENV)
        if env_value:
            chosen = Path(env_value)
    if chosen is None:
        chosen = DEFAULT_SETTINGS_FILE

    if not chosen.is_absolute():
        chosen = (find_project_root() / chosen).resolve()
    return chosen


def load_settings(config_file: Path | None = None) -> AppSettings:
    """Load settings with YAML defaults and environment variable overrides."""

    settings_file = resolve_settings_file(config_file)
    project_root = settings_file.parent.parent.resolve()
    AppSettings._yaml_file_override = settings_file
    try:
        settings = AppSettings()
    finally:
        AppSettings._yaml_file_override = None
    return settings.resolved(project_root=project_root)
