"""
xpath-reader configuration using pydantic-settings.

All settings can be set via environment variables with XPATH_READER_ prefix,
or via a .env file in the working directory.
"""

from pathlib import Path

from anystore.settings import BaseSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """
    xpath-reader configuration using pydantic-settings.

    Settings are loaded from (in order of priority, highest first):
    1. Environment variables with XPATH_READER_ prefix
    2. .env file
    """

    model_config = SettingsConfigDict(
        env_prefix="xpath_reader_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    debug: bool = Field(default=False)

    # lxml parser options
    resolve_entities: bool = Field(default=False)
    huge_tree: bool = Field(default=False)
    remove_blank_text: bool = Field(default=False)

    empty_as_absent: bool = Field(default=False)
    """Treat matches with an empty string value as absent in optional reads"""

    context_path: Path | None = Field(default=None)
    """YAML file holding the default namespace context"""
