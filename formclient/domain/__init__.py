from formclient.domain.exceptions import (
    CookieNotFoundError,
    FormClientError,
    RequestAlreadySentError,
    ResponseDecodeError,
    TransportError,
)
from formclient.domain.form import EncodingMode, FormField, ModeEvent, transition

__all__ = [
    "CookieNotFoundError",
    "FormClientError",
    "RequestAlreadySentError",
    "ResponseDecodeError",
    "TransportError",
    "EncodingMode",
    "FormField",
    "ModeEvent",
    "transition",
]
