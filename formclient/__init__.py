"""Fluent HTTP request builder with form/multipart encoding over requests."""
from loguru import logger

from formclient.api import delete, get, head, new, patch, post, put
from formclient.application.request_builder import RequestBuilder
from formclient.application.response_view import ResponseView
from formclient.domain.exceptions import (
    CookieNotFoundError,
    FormClientError,
    RequestAlreadySentError,
    ResponseDecodeError,
    TransportError,
)
from formclient.domain.form import EncodingMode
from formclient.infrastructure.logging.log_setup import setup_console_logging

# Library default: silent until setup_console_logging() is called.
logger.disable("formclient")

__version__ = "0.1.0"

__all__ = [
    "new",
    "get",
    "post",
    "put",
    "patch",
    "delete",
    "head",
    "RequestBuilder",
    "ResponseView",
    "EncodingMode",
    "CookieNotFoundError",
    "FormClientError",
    "RequestAlreadySentError",
    "ResponseDecodeError",
    "TransportError",
    "setup_console_logging",
]
