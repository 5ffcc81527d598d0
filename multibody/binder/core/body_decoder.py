"""
Decoding of a buffered request body into the shallow key -> value map.
"""

import codecs
import json
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .exceptions import BodyDecodeError

BodyMap = Mapping[str, Any]

EMPTY_BODY_MAP: BodyMap = MappingProxyType({})


def charset_from_content_type(content_type: Optional[str], default: str = "utf-8") -> str:
    """
    Read the charset parameter of a Content-Type header.

    Unknown charsets fall back to the default.
    """
    if not content_type:
        return default
    for part in content_type.split(";")[1:]:
        name, _, value = part.partition("=")
        if name.strip().lower() != "charset":
            continue
        charset = value.strip().strip('"').strip("'")
        try:
            codecs.lookup(charset)
        except LookupError:
            return default
        return charset
    return default


def decode_body_map(data: bytes, charset: str = "utf-8") -> BodyMap:
    """
    Parse body bytes as a JSON object.

    Empty or whitespace-only input yields an empty map. Nested values are
    kept as plain dict/list sub-trees.

    Raises:
        BodyDecodeError: invalid text for the charset, malformed JSON, or a
            top-level value that is not an object
    """
    try:
        text = data.decode(charset)
    except (UnicodeDecodeError, LookupError) as exc:
        raise BodyDecodeError(exc) from exc

    if not text.strip():
        return EMPTY_BODY_MAP

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BodyDecodeError(exc) from exc

    if not isinstance(parsed, dict):
        raise BodyDecodeError(
            ValueError(f"JSON body must be an object, got {type(parsed).__name__}")
        )
    return MappingProxyType(parsed)
