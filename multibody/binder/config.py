"""
Binder configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

import sys
from typing import List

from pydantic import Field
from multibody.common.core.config import BaseAppConfig


class BinderConfig(BaseAppConfig):
    """
    Configuration management for multi-body request binding.
    """

    # Body buffering policy
    BUFFERED_METHODS: List[str] = Field(
        default=["POST", "PUT", "PATCH"],
        description="HTTP methods whose JSON bodies are buffered for replay",
    )
    JSON_CONTENT_MARKER: str = Field(
        default="json", description="Substring identifying a JSON Content-Type"
    )
    DEFAULT_CHARSET: str = Field(
        default="utf-8", description="Charset used when the request declares none"
    )

    # Error rendering
    ERROR_DETAIL_INCLUDE_VALUE: bool = Field(
        default=True, description="Include the rejected value in type mismatch responses"
    )

    # Path settings
    LOG_CONFIG_PATH: str = Field(
        default="config/binder_log.yaml", description="Logging definition file path"
    )


# Load config as a singleton.
# pydantic-settings reads environment variables during instantiation.
try:
    config = BinderConfig()
except Exception as e:
    sys.stderr.write(f"Failed to load configuration: {e}\n")
    raise
