# formclient/application/ports/requests_transport.py
from __future__ import annotations

from http.cookiejar import DefaultCookiePolicy
from typing import Optional

import requests
from requests.cookies import RequestsCookieJar

from formclient.application.ports.transport import TransportPort


class RequestsTransport(TransportPort):
    def __init__(self, follow_redirects: bool = True, session: Optional[requests.Session] = None):
        self.follow_redirects = follow_redirects
        self._session = session or requests.Session()
        # Session cookies would leak between unrelated builders; keep the jar empty.
        self._session.cookies = RequestsCookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))

    def send(self, prepared: requests.PreparedRequest) -> requests.Response:
        # stream=True leaves the body on the wire for ResponseView to read once
        return self._session.send(
            prepared,
            allow_redirects=self.follow_redirects,
            stream=True,
        )

    def __repr__(self) -> str:
        return f"RequestsTransport(follow_redirects={self.follow_redirects})"


_FOLLOW = RequestsTransport(follow_redirects=True)
_NO_FOLLOW = RequestsTransport(follow_redirects=False)


def default_transport(follow_redirects: bool = True) -> RequestsTransport:
    """
    Process-wide transports, one per redirect policy.
    """
    return _FOLLOW if follow_redirects else _NO_FOLLOW
