"""
Public API package.

Aggregates what handler modules need to declare multi-body parameters.
"""

from ..configurer import install_multi_body
from ..core.shapes import Char, Float32, Float64, Int8, Int16, Int32, Int64
from ..models import BindingErrors, FieldError, MultiBody, Valid, Validated
from ..settings import ResolverSettings
from .deps import ReplayableBodyDep, get_replayable_body, multi_body

__all__ = [
    "install_multi_body",
    "Char",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "BindingErrors",
    "FieldError",
    "MultiBody",
    "Valid",
    "Validated",
    "ResolverSettings",
    "ReplayableBodyDep",
    "get_replayable_body",
    "multi_body",
]
