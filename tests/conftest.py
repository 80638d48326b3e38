from __future__ import annotations

from pathlib import Path

import pytest

from formclient.application.ports.urllib3_multipart_writer import MultipartFormWriter
from formclient.application.request_builder import RequestBuilder
from formclient.infrastructure.config.env_settings import ClientSettings, get_settings

from fake_transport import FakeTransportFactory
from multipart_helpers import BOUNDARY, PNG_BYTES


@pytest.fixture(autouse=True)
def _fresh_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path) -> ClientSettings:
    return ClientSettings(dump_dir=str(tmp_path / "dumps"))


@pytest.fixture
def transports() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture
def make_builder(transports, settings):
    def _make(method: str = "POST", url: str = "http://example.test/upload", **overrides) -> RequestBuilder:
        options = dict(
            transport_factory=transports,
            settings=settings,
            writer_factory=lambda: MultipartFormWriter(boundary=BOUNDARY),
        )
        options.update(overrides)
        return RequestBuilder(method, url, **options)

    return _make


@pytest.fixture
def png_file(tmp_path) -> Path:
    path = tmp_path / "two.png"
    path.write_bytes(PNG_BYTES)
    return path
