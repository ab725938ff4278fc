"""Configuration management with YAML and environment variable support."""

from pathlib import Path
from typing import ClassVar, Optional

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads configuration from YAML file."""

    def get_field_value(self, field, field_name: str):
        # Not used with prepare method
        pass

    def prepare_field_value(self, field_name: str, field, value, value_is_complex: bool):
        return value

    def __call__(self):
        # Load from config.yaml in current directory
        yaml_path = Path("config.yaml")
        if not yaml_path.exists():
            return {}

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return data


class GoogleConfig(BaseModel):
    """Gemini API credentials.

    api_key is optional here; hosts may supply the key through a
    credential provider instead (see animlogo.services.credentials).
    """

    api_key: Optional[SecretStr] = None


class ModelsConfig(BaseModel):
    """AI model identifiers."""

    image_gen: str = "gemini-3-pro-image-preview"
    video_gen: str = "veo-3.1-fast-generate-preview"


class PipelineConfig(BaseModel):
    """Pipeline execution parameters."""

    video_poll_interval: float = Field(default=8.0, gt=0)
    # None means poll until the remote job reports done
    video_poll_max: Optional[int] = Field(default=None, ge=1)
    fetch_timeout: float = Field(default=120.0, gt=0)
    default_motion_prompt: str = (
        "The logo should shine and rotate elegantly in 3D space "
        "with gold dust particles."
    )


class StorageConfig(BaseModel):
    """Output location for saved logos and animations."""

    output_dir: Path = Path("output")

    @field_validator("output_dir", mode="before")
    @classmethod
    def convert_output_dir_to_path(cls, v):
        """Convert string to Path object."""
        if isinstance(v, str):
            return Path(v)
        return v


class LoggingConfig(BaseModel):
    """Log verbosity for CLI runs."""

    level: str = "INFO"


class Settings(BaseSettings):
    """Main application settings with YAML and environment variable support.

    Configuration sources (in priority order):
    1. Environment variables (prefix: ANIMLOGO_, delimiter: __)
    2. .env file
    3. YAML file (config.yaml)
    4. Field defaults
    """

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_nested_delimiter="__",
        env_prefix="ANIMLOGO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    google: GoogleConfig = GoogleConfig()
    models: ModelsConfig = ModelsConfig()
    pipeline: PipelineConfig = PipelineConfig()
    storage: StorageConfig = StorageConfig()
    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ):
        """Customize settings sources to include YAML configuration.

        Priority order (highest to lowest):
        1. Environment variables
        2. .env file
        3. YAML file
        4. Init settings (programmatic defaults)
        """
        return (
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            init_settings,
        )


# Singleton instance
settings = Settings()
