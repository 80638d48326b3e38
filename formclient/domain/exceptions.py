# formclient/domain/exceptions.py
from __future__ import annotations

from typing import Any, Optional


class FormClientError(Exception):
    """Base class for errors raised by formclient itself."""


class TransportError(FormClientError):
    """
    The transport failed to complete the round trip.

    `response` is always set: it wraps whatever the transport surfaced, which
    may be no response at all (`response.raw is None`). Check this error
    before trusting the wrapper.
    """

    def __init__(self, message: str, response: Any = None, request: Any = None):
        super().__init__(message)
        self.response = response
        self.request = request


class CookieNotFoundError(FormClientError, LookupError):
    def __init__(self, name: str):
        super().__init__(f"cookie not found: {name}")
        self.name = name


class ResponseDecodeError(FormClientError, ValueError):
    def __init__(self, message: str, body_head: Optional[str] = None):
        super().__init__(message)
        self.body_head = body_head


class RequestAlreadySentError(FormClientError, RuntimeError):
    def __init__(self, method: str, url: str):
        super().__init__(f"request already sent: {method} {url}")
        self.method = method
        self.url = url
