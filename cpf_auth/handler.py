"""
Lambda entry point serving both the ``POST /auth`` route and the API
Gateway TOKEN authorizer from one function.

The process-wide ``AppContext`` is built on the first invocation and reused
while the execution environment stays warm; ``shutdown()`` releases it.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from cpf_auth.auth.authorizer import handle_authorization
from cpf_auth.auth.events import AuthorizerRequest, InboundRequest, classify_event
from cpf_auth.auth.issuance import handle_issuance
from cpf_auth.auth.responses import internal_error
from cpf_auth.context import AppContext
from cpf_auth.errors import Unauthorized
from cpf_auth.logging_config import configure_app_logging

logger = logging.getLogger(__name__)

_app_context: AppContext | None = None


def get_app_context() -> AppContext:
    """Build the shared context on first use; kept only once logging is configured."""
    global _app_context
    if _app_context is None:
        app_context = AppContext()
        configure_app_logging(app_context.settings.log_level)
        _app_context = app_context
    return _app_context


def shutdown() -> None:
    global _app_context
    if _app_context is not None:
        _app_context.close()
        _app_context = None


def route(request: InboundRequest, app_context: AppContext) -> dict[str, Any]:
    if isinstance(request, AuthorizerRequest):
        logger.debug("Authorizer invocation resource=%s", request.method_arn)
        try:
            return handle_authorization(request, app_context.validator)
        except Unauthorized:
            raise
        except Exception as e:
            logger.exception("Authorizer failed")
            raise Unauthorized() from e

    logger.debug("Issuance invocation")
    return handle_issuance(request, app_context)


def dispatch(event: Mapping[str, Any], app_context: AppContext) -> dict[str, Any]:
    return route(classify_event(event), app_context)


def handler(event: Mapping[str, Any], context: Any = None) -> dict[str, Any]:
    request = classify_event(event)
    try:
        app_context = get_app_context()
    except Exception as e:
        # Bad settings or log level: answer in the mode the caller expects.
        logger.exception("App context setup failed")
        if isinstance(request, AuthorizerRequest):
            raise Unauthorized() from e
        return internal_error(e)
    return route(request, app_context)
