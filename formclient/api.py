# formclient/api.py
from __future__ import annotations

from typing import Any

from formclient.application.request_builder import RequestBuilder


def new(method: str, url: str, **options: Any) -> RequestBuilder:
    """
    Make a request builder for `method` and `url`.

    `options` go to RequestBuilder: transport_factory, logger, settings,
    writer_factory, encoder.
    """
    return RequestBuilder(method, url, **options)


def get(url: str, **options: Any) -> RequestBuilder:
    return new("GET", url, **options)


def post(url: str, **options: Any) -> RequestBuilder:
    return new("POST", url, **options)


def put(url: str, **options: Any) -> RequestBuilder:
    return new("PUT", url, **options)


def patch(url: str, **options: Any) -> RequestBuilder:
    return new("PATCH", url, **options)


def delete(url: str, **options: Any) -> RequestBuilder:
    return new("DELETE", url, **options)


def head(url: str, **options: Any) -> RequestBuilder:
    return new("HEAD", url, **options)
