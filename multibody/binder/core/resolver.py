"""
Multi-body resolver.

Reads the buffered body once per request, decodes the shared map and runs
every declared binding through extraction, coercion and validation.
"""

import logging
from typing import Any, Dict, List, Optional

from starlette.requests import ClientDisconnect, Request

from ..models.outcome import (
    BindingErrors,
    ExtractionOutcome,
    StructuralDecodeFailure,
    ValidationFailed,
    Value,
)
from .binding import ParameterBinding
from .body_buffer import STATE_KEY, ReplayableBody
from .body_decoder import charset_from_content_type, decode_body_map
from .exceptions import BodyCaptureError, BodyDecodeError, error_for_outcome
from .extractor import extract
from .validation import ValidationBridge
from ..settings import ResolverSettings

logger = logging.getLogger("multibody.resolver")


async def read_replayable_body(request: Request) -> ReplayableBody:
    """
    Return the request's buffered body.

    Requests that bypassed the buffering middleware are captured here through
    Starlette's own cached body and stored for later readers.
    """
    state = request.scope.setdefault("state", {})
    body = state.get(STATE_KEY)
    if body is not None:
        return body

    try:
        data = await request.body()
    except ClientDisconnect as exc:
        raise BodyCaptureError(exc) from exc
    body = ReplayableBody.from_bytes(data)
    state[STATE_KEY] = body
    return body


class MultiBodyResolver:
    """Resolves the multi-body parameters of one handler."""

    def __init__(
        self, bindings: List[ParameterBinding], signature: str, settings: ResolverSettings
    ):
        self.bindings = list(bindings)
        self.signature = signature
        self.settings = settings
        self.bridge = ValidationBridge(settings.validator)

    def resolve_outcomes(
        self, body: ReplayableBody, content_type: Optional[str] = None
    ) -> Dict[str, ExtractionOutcome]:
        """
        Compute one outcome per binding without raising.

        A body that is not a JSON object fails every binding the same way.
        """
        charset = charset_from_content_type(content_type, self.settings.default_charset)
        try:
            body_map = decode_body_map(body.open().read(), charset)
        except BodyDecodeError as exc:
            failure = StructuralDecodeFailure(exc.cause)
            return {binding.name: failure for binding in self.bindings}

        outcomes: Dict[str, ExtractionOutcome] = {}
        for binding in self.bindings:
            outcome = extract(body_map, binding)
            if isinstance(outcome, Value) and outcome.value is not None and binding.validates:
                outcome = self.bridge.validate(outcome.value, binding)
            outcomes[binding.name] = outcome
        return outcomes

    async def resolve(self, request: Request) -> Dict[str, Any]:
        """
        Resolve handler keyword arguments for a request.

        Raises:
            StructuralError: the body is not a JSON object
            ArgumentInvalidError: a parameter is missing, mistyped or invalid
        """
        body = await read_replayable_body(request)
        outcomes = self.resolve_outcomes(body, request.headers.get("content-type"))

        kwargs: Dict[str, Any] = {}
        for binding in self.bindings:
            outcome = outcomes[binding.name]

            if binding.errors_param is not None:
                errors = outcome.errors if isinstance(outcome, ValidationFailed) else ()
                kwargs[binding.errors_param] = BindingErrors(key=binding.key, errors=list(errors))
                if isinstance(outcome, ValidationFailed):
                    kwargs[binding.name] = outcome.value
                    continue

            error = error_for_outcome(outcome, binding.key, self.signature)
            if error is not None:
                logger.debug(
                    "Multi-body binding failed for %s",
                    binding.key,
                    extra={
                        "key": binding.key,
                        "parameter": binding.name,
                        "error_type": type(error).__name__,
                    },
                )
                raise error
            kwargs[binding.name] = outcome.value
        return kwargs
