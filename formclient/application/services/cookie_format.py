# formclient/application/services/cookie_format.py
from __future__ import annotations

import time
from email.utils import formatdate
from http.cookiejar import Cookie, parse_ns_headers
from typing import Iterable, List, Optional

from requests.cookies import create_cookie


def format_cookie(c: Cookie) -> str:
    """
    Render a cookie the way a Set-Cookie header would carry it.
    """
    parts: List[str] = [f"{c.name}={c.value if c.value is not None else ''}"]
    if c.path_specified and c.path:
        parts.append(f"Path={c.path}")
    if c.domain_specified and c.domain:
        parts.append(f"Domain={c.domain.lstrip('.')}")
    if c.expires is not None:
        parts.append(f"Expires={formatdate(c.expires, usegmt=True)}")
    if c.secure:
        parts.append("Secure")
    return "; ".join(parts)


def parse_set_cookie(line: str) -> Optional[Cookie]:
    """
    Parse one Set-Cookie header value into a cookie record.

    No cookie policy is applied: whatever the server sent is kept, including
    a Domain that does not match the request host. Returns None for a line
    without a name=value pair.
    """
    parsed = parse_ns_headers([line])
    if not parsed:
        return None
    (name, value), *attrs = parsed[0]
    if not name or value is None:
        return None

    options = {k.lower(): v for k, v in attrs}
    expires = options.get("expires")
    max_age = options.get("max-age")
    # Max-Age wins over Expires; a malformed one is ignored
    if max_age is not None and max_age.strip().lstrip("-").isdigit():
        expires = int(time.time()) + int(max_age)

    rest = {"HttpOnly": None} if "httponly" in options else {}
    return create_cookie(
        name,
        value,
        domain=options.get("domain") or "",
        path=options.get("path") or "",
        secure="secure" in options,
        expires=expires,
        rest=rest,
    )


def cookie_header(cookies: Iterable[Cookie], existing: Optional[str] = None) -> Optional[str]:
    """
    Cookie request header carrying every record, in order, after `existing`.
    Nothing is filtered or deduplicated.
    """
    pairs = [f"{c.name}={c.value if c.value is not None else ''}" for c in cookies]
    if existing:
        pairs.insert(0, existing)
    return "; ".join(pairs) if pairs else None
