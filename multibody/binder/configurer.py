"""
Where: multibody/binder/configurer.py
What: One-call registration of multi-body binding on a FastAPI app.
Why: Keep app assembly to a single, ordered set of registrations.
"""

import logging

from fastapi import FastAPI

from .config import BinderConfig, config
from .core.logging_config import setup_logging
from .exceptions import register_exception_handlers
from .middleware import ReplayableBodyMiddleware, access_log_middleware

logger = logging.getLogger("multibody.configurer")


def install_multi_body(
    app: FastAPI,
    binder_config: BinderConfig = config,
    access_log: bool = True,
    include_default_handlers: bool = True,
    configure_logging: bool = False,
) -> FastAPI:
    """
    Register body buffering, optional access logging and error handlers.

    With configure_logging, the YAML logging definition is loaded first.
    Must be called before the application starts serving requests.
    """
    if configure_logging:
        setup_logging(binder_config)

    app.add_middleware(
        ReplayableBodyMiddleware,
        methods=binder_config.BUFFERED_METHODS,
        json_marker=binder_config.JSON_CONTENT_MARKER,
    )
    # Added last so it wraps the buffering middleware.
    if access_log:
        app.middleware("http")(access_log_middleware)

    register_exception_handlers(app, include_defaults=include_default_handlers)

    logger.info(
        "Multi-body binding installed",
        extra={
            "buffered_methods": list(binder_config.BUFFERED_METHODS),
            "json_marker": binder_config.JSON_CONTENT_MARKER,
        },
    )
    return app
