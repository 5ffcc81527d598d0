"""
Dependency Injection for multi-body handlers.

Exposes the endpoint decorator that binds several parameters from one JSON
body, and FastAPI dependencies for the buffered body.
"""

import functools
import inspect
import logging
import typing
from typing import Annotated, Any, Callable, Optional

from fastapi import Depends, Request
from starlette.concurrency import run_in_threadpool

from ..core.binding import describe_handler, inspect_bindings
from ..core.body_buffer import ReplayableBody
from ..core.resolver import MultiBodyResolver, read_replayable_body
from ..settings import DEFAULT_SETTINGS, ResolverSettings

logger = logging.getLogger("multibody.resolver")

# Keyword under which FastAPI injects the Request into decorated handlers.
_REQUEST_PARAM = "multibody_request__"


# ==========================================
# 1. Body Accessors
# ==========================================


async def get_replayable_body(request: Request) -> ReplayableBody:
    return await read_replayable_body(request)


ReplayableBodyDep = Annotated[ReplayableBody, Depends(get_replayable_body)]


# ==========================================
# 2. Endpoint Decorator
# ==========================================


def _exposed_signature(handler: Callable, hidden: set) -> inspect.Signature:
    """Signature FastAPI analyses: multi-body parameters replaced by the Request."""
    signature = inspect.signature(handler)
    hints = typing.get_type_hints(handler, include_extras=True)

    params = []
    var_keyword = None
    for param in signature.parameters.values():
        if param.name in hidden:
            continue
        param = param.replace(annotation=hints.get(param.name, param.annotation))
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            var_keyword = param
            continue
        params.append(param)

    params.append(
        inspect.Parameter(_REQUEST_PARAM, inspect.Parameter.KEYWORD_ONLY, annotation=Request)
    )
    if var_keyword is not None:
        params.append(var_keyword)

    return signature.replace(
        parameters=params,
        return_annotation=hints.get("return", signature.return_annotation),
    )


def multi_body(
    handler: Optional[Callable] = None, *, settings: Optional[ResolverSettings] = None
) -> Any:
    """
    Bind ``Annotated[T, MultiBody(...)]`` parameters from keys of the JSON body.

    Usable bare (``@multi_body``) or with settings (``@multi_body(settings=...)``).
    Place it below the route decorator so FastAPI registers the wrapped handler.
    """
    resolver_settings = settings or DEFAULT_SETTINGS

    def decorate(func: Callable) -> Callable:
        bindings = inspect_bindings(func, resolver_settings.validation_markers)
        resolver = MultiBodyResolver(bindings, describe_handler(func), resolver_settings)
        hidden = {b.name for b in bindings} | {b.errors_param for b in bindings if b.errors_param}
        is_async = inspect.iscoroutinefunction(func)

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            request = kwargs.pop(_REQUEST_PARAM)
            kwargs.update(await resolver.resolve(request))
            if is_async:
                return await func(*args, **kwargs)
            return await run_in_threadpool(func, *args, **kwargs)

        # FastAPI must analyse the exposed signature, not the original handler.
        del wrapper.__wrapped__
        wrapper.__signature__ = _exposed_signature(func, hidden)
        wrapper.multibody_resolver = resolver

        logger.debug(
            "Registered multi-body handler %s",
            func.__qualname__,
            extra={"keys": [b.key for b in bindings]},
        )
        return wrapper

    if handler is not None:
        return decorate(handler)
    return decorate
