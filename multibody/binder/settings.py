"""
Resolver settings.

Decided once at startup (or when a handler is decorated) and never
re-checked per request.
"""

from dataclasses import dataclass, field
from typing import Tuple

from .config import BinderConfig, config
from .core.validation import PydanticValidator, Validator
from .models.params import Valid, Validated


@dataclass(frozen=True)
class ResolverSettings:
    # Closed set of marker types that request validation.
    validation_markers: Tuple[type, ...] = (Valid, Validated)
    validator: Validator = field(default_factory=PydanticValidator)
    default_charset: str = "utf-8"

    @classmethod
    def from_config(cls, binder_config: BinderConfig, **overrides) -> "ResolverSettings":
        overrides.setdefault("default_charset", binder_config.DEFAULT_CHARSET)
        return cls(**overrides)


DEFAULT_SETTINGS = ResolverSettings.from_config(config)
