# formclient/application/request_builder.py
from __future__ import annotations

import shutil
from contextlib import contextmanager
from http.cookiejar import Cookie
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterator, List, Optional, Sequence, Tuple, Union

import requests
from requests.cookies import RequestsCookieJar
from requests.structures import CaseInsensitiveDict
from requests.utils import default_headers

from formclient.application.ports.logger import LoggerPort
from formclient.application.ports.multipart_writer import MultipartWriterPort
from formclient.application.ports.requests_transport import default_transport
from formclient.application.ports.transport import TransportFactory
from formclient.application.ports.urllib3_multipart_writer import MultipartFormWriter
from formclient.application.response_view import ResponseView
from formclient.application.services.cookie_format import cookie_header, format_cookie
from formclient.application.services.form_encoder import FormEncoder
from formclient.application.services.redactor import cookie_names, mask_headers
from formclient.domain.exceptions import RequestAlreadySentError, TransportError
from formclient.domain.form import (
    EncodingMode,
    FormField,
    ModeEvent,
    as_text,
    transition,
    urlencoded_content_type,
)
from formclient.infrastructure.config.env_settings import ClientSettings, get_settings
from formclient.infrastructure.logging.loguru_logger import LoguruLogger

PathLike = Union[str, Path]


class RequestBuilder:
    """
    Fluent builder for one outgoing request.

    Every mutator returns the builder. The first failure inside the chain is
    kept as the deferred error: later mutators become no-ops and do() raises
    that same exception without touching the network.

    Body encoding is decided lazily:
    - value() calls alone => application/x-www-form-urlencoded, call order kept
    - any file() or force_multipart() => multipart/form-data for every field,
      including the ones buffered before the switch

    A builder is single-use and not thread-safe.
    """

    def __init__(
        self,
        method: str,
        url: str,
        transport_factory: Optional[TransportFactory] = None,
        logger: Optional[LoggerPort] = None,
        settings: Optional[ClientSettings] = None,
        writer_factory: Optional[Callable[[], MultipartWriterPort]] = None,
        encoder: Optional[FormEncoder] = None,
    ):
        self._method = method
        self._url = url
        self._transport_factory = transport_factory or default_transport
        self._log = (logger or LoguruLogger()).bind(method=method, url=url)
        self._settings = settings or get_settings()
        self._writer_factory = writer_factory or MultipartFormWriter
        self._encoder = encoder or FormEncoder()

        self._headers: CaseInsensitiveDict = CaseInsensitiveDict()  # name -> [values]
        self._cookies: List[Cookie] = []
        self._fields: List[FormField] = []  # ordered until the encoding is known
        self._mode = EncodingMode.UNDECIDED
        self._writer: Optional[MultipartWriterPort] = None
        self._error: Optional[Exception] = None
        self._no_redirect = False
        self._sent = False

    @property
    def method(self) -> str:
        return self._method

    @property
    def url(self) -> str:
        return self._url

    @property
    def mode(self) -> EncodingMode:
        return self._mode

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    # ---------- form ----------

    def value(self, key: str, value: Any) -> "RequestBuilder":
        """Add a form value."""
        if not self._accepting():
            return self
        text = as_text(value)
        if self._mode is EncodingMode.MULTIPART:
            with self._deferred("value", key=key):
                self._writer.write_field(key, text)
            return self
        self._fields.append(FormField(key, text))
        return self

    def values(self, pairs: Sequence[Tuple[str, Any]]) -> "RequestBuilder":
        """Add several form values; a list or tuple value adds one field per element."""
        for f in self._encoder.expand(pairs):
            self.value(f.key, f.value)
        return self

    def file(self, key: str, filename: str, stream: BinaryIO) -> "RequestBuilder":
        """
        Add a multipart file part and copy the whole stream into it.
        The stream is read to the end but left open.
        """
        if not self._accepting():
            return self
        self.force_multipart()
        if self._error is not None:
            return self
        with self._deferred("file", key=key, filename=filename):
            part = self._writer.create_file_part(key, filename)
            shutil.copyfileobj(stream, part)
        return self

    def open_file(self, key: str, path: PathLike) -> "RequestBuilder":
        """Open `path` and add it as a file part named after its base name."""
        if not self._accepting():
            return self
        try:
            handle = open(path, "rb")
        except OSError as e:
            self._fail(e, "open_file", key=key, path=str(path))
            return self
        with handle:
            return self.file(key, Path(path).name, handle)

    def force_multipart(self) -> "RequestBuilder":
        """Send multipart/form-data even when no file is attached."""
        if not self._accepting():
            return self
        if self._mode is EncodingMode.MULTIPART:
            return self
        self._writer = self._writer_factory()
        self._mode = transition(self._mode, ModeEvent.FORCE_MULTIPART)
        pending, self._fields = self._fields, []
        self._log.debug("request.multipart_forced", flushed=len(pending))
        with self._deferred("force_multipart"):
            for f in pending:
                self._writer.write_field(f.key, f.value)
        return self

    # ---------- headers / cookies / options ----------

    def header(self, key: str, value: str) -> "RequestBuilder":
        """Append a header value; existing values for `key` are kept."""
        if not self._accepting():
            return self
        self._headers.setdefault(key, []).append(value)
        return self

    def cookie(self, record: Cookie) -> "RequestBuilder":
        if not self._accepting():
            return self
        self._cookies.append(record)
        return self

    def user_agent(self, value: str) -> "RequestBuilder":
        return self.header("User-Agent", value)

    def disable_redirect(self) -> "RequestBuilder":
        """Return the first response as-is instead of following Location."""
        if not self._accepting():
            return self
        self._no_redirect = True
        return self

    # ---------- dispatch ----------

    def content_type(self) -> Optional[str]:
        """Content-Type do() would send, computed without finalizing anything."""
        mode = transition(self._mode, ModeEvent.FINALIZE, has_fields=bool(self._fields))
        if mode is EncodingMode.MULTIPART:
            return self._writer.content_type
        caller = self._headers.get("Content-Type")
        if caller:
            return ", ".join(caller)
        return urlencoded_content_type(mode)

    def do(self) -> ResponseView:
        """
        Send the request.

        Raises the deferred error if one was captured, RequestAlreadySentError
        on reuse, TransportError when the round trip fails. The TransportError
        carries a ResponseView over whatever the transport returned, which may
        wrap no response at all.
        """
        if self._error is not None:
            raise self._error
        if self._sent:
            raise RequestAlreadySentError(self._method, self._url)
        self._sent = True

        self._mode = transition(self._mode, ModeEvent.FINALIZE, has_fields=bool(self._fields))
        headers = self._build_headers()

        body: Optional[bytes] = None
        if self._mode is EncodingMode.MULTIPART:
            self._writer.close()
            body = self._writer.getvalue()
            headers["Content-Type"] = self._writer.content_type
        elif self._mode is EncodingMode.URLENCODED:
            body = self._encoder.encode(self._fields)
            headers.setdefault("Content-Type", urlencoded_content_type(self._mode))

        # every record goes out on the first hop, in call order, after any
        # caller Cookie header; the jar only feeds cookies to redirect hops
        cookie_value = cookie_header(self._cookies, existing=headers.get("Cookie"))
        if cookie_value is not None:
            headers["Cookie"] = cookie_value
        jar = RequestsCookieJar()
        for c in self._cookies:
            jar.set_cookie(c)

        prepared = requests.Request(
            method=self._method,
            url=self._url,
            headers=headers,
            data=body,
            cookies=jar,
        ).prepare()

        transport = self._transport_factory(not self._no_redirect)
        self._log.debug(
            "request.dispatch",
            mode=self._mode.value,
            body_len=len(body) if body is not None else 0,
            headers=mask_headers(dict(prepared.headers)),
            cookies=cookie_names(self._cookies),
            follow_redirects=not self._no_redirect,
            transport=repr(transport),
        )

        try:
            raw = transport.send(prepared)
        except requests.RequestException as e:
            self._log.error(
                "request.transport_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            partial = ResponseView(e.response, prepared, logger=self._log, settings=self._settings)
            raise TransportError(str(e), response=partial, request=prepared) from e

        self._log.debug(
            "response.received",
            status=raw.status_code,
            final_url=raw.url,
            redirects=len(raw.history or []),
        )
        return ResponseView(raw, prepared, logger=self._log, settings=self._settings)

    # ---------- internals ----------

    def _accepting(self) -> bool:
        return self._error is None and not self._sent

    def _fail(self, exc: Exception, action: str, **fields: Any) -> None:
        if self._error is not None:
            return
        self._error = exc
        self._log.debug(
            "request.deferred_error",
            action=action,
            error=str(exc),
            error_type=type(exc).__name__,
            **fields,
        )

    @contextmanager
    def _deferred(self, action: str, **fields: Any) -> Iterator[None]:
        try:
            yield
        except Exception as e:
            self._fail(e, action, **fields)

    def _build_headers(self) -> CaseInsensitiveDict:
        headers = default_headers()
        if self._settings.user_agent:
            headers["User-Agent"] = self._settings.user_agent
        for key, values in self._headers.items():
            sep = "; " if key.lower() == "cookie" else ", "
            headers[key] = sep.join(values)
        return headers

    def __str__(self) -> str:
        lines = [f"{self._method} {self._url}", "\tHeader:"]
        content_type = self.content_type()
        if content_type:
            lines.append(f"\t\tContent-Type: {content_type}")
        for key, values in self._headers.items():
            if key.lower() == "content-type":
                continue
            lines.append(f"\t\t{key}: {', '.join(values)}")
        if self._cookies:
            lines.append("\tCookies:")
            for c in self._cookies:
                lines.append(f"\t\t{format_cookie(c)}")
        return "\n".join(lines) + "\n"

    def __repr__(self) -> str:
        return f"<RequestBuilder {self._method} {self._url} mode={self._mode.value}>"
