# formclient/application/services/redactor.py
from __future__ import annotations

from http.cookiejar import Cookie
from typing import Any, Dict, Iterable, List, Mapping

SENSITIVE_KEYS = {
    "password",
    "passwd",
    "pass",
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
}

MASK = "********"


def mask_value(key: str, value: Any) -> Any:
    if key.lower() in SENSITIVE_KEYS and value is not None:
        return MASK
    return value


def mask_headers(headers: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Mask a header mapping for logging. Multi-valued entries keep their shape.
    """
    out: Dict[str, Any] = {}
    for k, v in headers.items():
        if isinstance(v, list):
            out[k] = [mask_value(k, item) for item in v]
        else:
            out[k] = mask_value(k, v)
    return out


def cookie_names(cookies: Iterable[Cookie]) -> List[str]:
    # names only, values never reach the logs
    return [c.name for c in cookies]
