"""Configuration settings using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict, YamlConfigSettingsSource

from morphit.config.constants import (
    CONFIG_LOCATIONS,
    DEFAULT_GRACE_PERIOD,
    DEFAULT_IMAGE_QUALITY,
    DEFAULT_LOG_DIR,
    DEFAULT_OCR_RENDER_DPI,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PDF_DPI,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TEX_DIRS,
    DEFAULT_TOOL_PREFIXES,
)


class ToolsConfig(BaseModel):
    """External tool location configuration."""

    search_prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_TOOL_PREFIXES))
    ffmpeg_dir: str | None = None  # Bundled ffmpeg/ffprobe directory
    tex_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_TEX_DIRS))


class ProcessConfig(BaseModel):
    """Child process supervision configuration."""

    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0, le=1.0)
    grace_period: float = Field(default=DEFAULT_GRACE_PERIOD, ge=0, le=30.0)


class TempConfig(BaseModel):
    """Scratch space configuration."""

    root: str | None = None  # None uses the system temp dir


class OutputConfig(BaseModel):
    """Output configuration."""

    default_dir: str = DEFAULT_OUTPUT_DIR
    on_conflict: Literal["skip", "overwrite", "rename"] = "rename"


class ImageConfig(BaseModel):
    """Image conversion defaults."""

    quality: int = Field(default=DEFAULT_IMAGE_QUALITY, ge=1, le=100)
    pdf_dpi: int = Field(default=DEFAULT_PDF_DPI, ge=36, le=1200)


class OCRConfig(BaseModel):
    """OCR configuration."""

    render_dpi: int = Field(default=DEFAULT_OCR_RENDER_DPI, ge=72, le=600)


class MorphitSettings(BaseSettings):
    """Main configuration class for morphit."""

    model_config = SettingsConfigDict(
        env_prefix="MORPHIT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Customize settings sources to include YAML file."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            # Later files win: the working-directory file overrides the user one
            YamlConfigSettingsSource(settings_cls, yaml_file=list(reversed(CONFIG_LOCATIONS))),
            file_secret_settings,
        )

    # Sub-configurations
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    process: ProcessConfig = Field(default_factory=ProcessConfig)
    temp: TempConfig = Field(default_factory=TempConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    image: ImageConfig = Field(default_factory=ImageConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)

    # Global settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_dir: str = DEFAULT_LOG_DIR

    def get_output_dir(self, base_path: Path | None = None) -> Path:
        """Get the output directory path."""
        if base_path:
            return base_path / self.output.default_dir
        return Path(self.output.default_dir)


@lru_cache
def get_settings() -> MorphitSettings:
    """Get cached settings instance."""
    return MorphitSettings()


def reload_settings() -> MorphitSettings:
    """Force reload settings (clear cache)."""
    get_settings.cache_clear()
    return get_settings()
