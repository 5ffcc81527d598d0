"""
Shared settings for multibody packages.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppConfig(BaseSettings):
    """
    Settings every multibody package reads from the environment.
    """

    SERVICE_NAME: str = Field(default="multibody", description="Name stamped on every log line")
    LOG_LEVEL: str = Field(default="INFO", description="Log level")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )
