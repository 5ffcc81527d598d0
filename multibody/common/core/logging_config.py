"""
JSON line logging.

Provides:
- CustomJsonFormatter: one JSON object per record, with the current request
  ID and any ``extra={...}`` fields
- setup_logging: YAML dictConfig loader with ``${VAR}`` substitution
"""

import json
import logging
import logging.config
import os
import string
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import yaml

from .request_context import get_request_id

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

_SUBSTITUTION_DEFAULTS = {"LOG_LEVEL": "INFO", "SERVICE_NAME": "multibody"}


class CustomJsonFormatter(logging.Formatter):
    """
    JSON Formatter.

    Fields:
      - _time: ISO8601 timestamp (millisecond precision)
      - level, logger, message
      - service: set when the formatter is built with a service name
      - request_id: from the record, else from the request context
      - exception: formatted traceback, if any
    """

    def __init__(self, *args: Any, service_name: Optional[str] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def _extras(self, record: logging.LogRecord) -> Dict[str, Any]:
        return {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "_time": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service_name:
            payload["service"] = self.service_name

        extras = self._extras(record)
        request_id = extras.pop("request_id", None) or get_request_id()
        if request_id:
            payload["request_id"] = request_id
        for key, value in extras.items():
            payload.setdefault(key, value)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def _render_template(text: str, environ: Mapping[str, str]) -> str:
    mapping = {**_SUBSTITUTION_DEFAULTS, **environ}
    return string.Template(text).safe_substitute(mapping)


def setup_logging(config_path: str = "logging.yml"):
    """
    Initialize logging from a YAML dictConfig file.

    ``${VAR}`` placeholders are filled from the environment. Without the file,
    a plain basicConfig at LOG_LEVEL is used.
    """
    if not os.path.exists(config_path):
        logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
        return

    with open(config_path, "r", encoding="utf-8") as f:
        content = _render_template(f.read(), os.environ)

    logging.config.dictConfig(yaml.safe_load(content))
