# formclient/application/ports/transport.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

import requests


class TransportPort(ABC):
    """
    Sends a fully prepared request and returns the raw response.

    Failures are raised as `requests.RequestException`; the body of the
    returned response must be left unread.
    """

    follow_redirects: bool = True

    @abstractmethod
    def send(self, prepared: requests.PreparedRequest) -> requests.Response:
        ...


# follow_redirects -> transport
TransportFactory = Callable[[bool], TransportPort]
