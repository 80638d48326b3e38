# formclient/application/response_view.py
from __future__ import annotations

import html
import json
import mimetypes
import time
import webbrowser
from datetime import datetime
from http.cookiejar import Cookie
from pathlib import Path
from typing import Any, List, Optional, Union
from urllib.parse import unquote, urlsplit

import requests
from bs4 import BeautifulSoup
from requests.structures import CaseInsensitiveDict

from formclient.application.ports.logger import LoggerPort
from formclient.application.services.cookie_format import format_cookie, parse_set_cookie
from formclient.domain.exceptions import CookieNotFoundError, ResponseDecodeError
from formclient.infrastructure.config.env_settings import ClientSettings, get_settings
from formclient.infrastructure.logging.loguru_logger import LoguruLogger

CHUNK_SIZE = 64 * 1024

_DUMP_PRE_OPEN = b'<pre style="background:#000;color:#0f0;font:13px/1.2 monospace;padding:20px">'
_DUMP_PRE_CLOSE = b"</pre>"


def _try_extract_title(raw: bytes) -> Optional[str]:
    try:
        soup = BeautifulSoup(raw, "html.parser")
        return soup.title.get_text(strip=True) if soup.title else None
    except Exception:
        return None


def _http_version(raw: requests.Response) -> str:
    version = getattr(raw.raw, "version", None)
    if version == 10:
        return "HTTP/1.0"
    if version == 11:
        return "HTTP/1.1"
    if version == 20:
        return "HTTP/2"
    return "HTTP"


def _charset(content_type: str) -> Optional[str]:
    for param in content_type.split(";")[1:]:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset":
            return value.strip().strip("\"'") or None
    return None


def _set_cookie_lines(raw: requests.Response) -> List[str]:
    # one entry per header line, in wire order
    headers = getattr(raw.raw, "headers", None)
    if headers is not None and hasattr(headers, "getlist"):
        return headers.getlist("Set-Cookie")
    value = raw.headers.get("Set-Cookie")
    return [value] if value else []


class ResponseView:
    """
    Read-side wrapper around a `requests.Response` whose body is still on
    the wire.

    The body is a single-read stream: body_bytes(), body_string(), json()
    and dump() each consume it. close() must be called (or the view used as
    a context manager) so the connection goes back to the pool.
    """

    def __init__(
        self,
        raw: Optional[requests.Response],
        request: Optional[requests.PreparedRequest] = None,
        logger: Optional[LoggerPort] = None,
        settings: Optional[ClientSettings] = None,
    ):
        self._raw = raw
        # the request as built, not the last hop of a redirect chain
        self._request = request if request is not None else getattr(raw, "request", None)
        self._log = logger or LoguruLogger()
        self._settings = settings
        self._closed = False
        self._cookies: Optional[List[Cookie]] = None

    # ---------- plain accessors ----------

    @property
    def raw(self) -> Optional[requests.Response]:
        return self._raw

    @property
    def request(self) -> Optional[requests.PreparedRequest]:
        return self._request

    @property
    def status_code(self) -> Optional[int]:
        return self._raw.status_code if self._raw is not None else None

    @property
    def reason(self) -> Optional[str]:
        return self._raw.reason if self._raw is not None else None

    @property
    def headers(self) -> CaseInsensitiveDict:
        return self._raw.headers if self._raw is not None else CaseInsensitiveDict()

    @property
    def cookies(self) -> List[Cookie]:
        """
        Cookies set by this response, one per Set-Cookie line in the order
        received. Duplicates are kept and no cookie policy is applied.
        """
        if self._cookies is None:
            self._cookies = self._parse_cookies()
        return list(self._cookies)

    @property
    def url(self) -> Optional[str]:
        """Final URL, after any redirect that was followed."""
        return self._raw.url if self._raw is not None else None

    @property
    def closed(self) -> bool:
        return self._closed

    # ---------- lifecycle ----------

    def close(self) -> None:
        """Release the body stream. Further calls do nothing."""
        if self._closed:
            return
        self._closed = True
        if self._raw is not None:
            self._raw.close()

    def __enter__(self) -> "ResponseView":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------- cookies ----------

    def cookie(self, name: str) -> Cookie:
        """
        First cookie named `name` set by this response.
        Several cookies may share a name; the first one wins.
        """
        for c in self.cookies:
            if c.name == name:
                return c
        raise CookieNotFoundError(name)

    def _parse_cookies(self) -> List[Cookie]:
        if self._raw is None:
            return []
        result: List[Cookie] = []
        for line in _set_cookie_lines(self._raw):
            c = parse_set_cookie(line)
            if c is None:
                self._log.warning("response.cookie_skipped", url=self._raw.url, header_len=len(line))
                continue
            result.append(c)
        return result

    # ---------- body ----------

    def body_bytes(self) -> bytes:
        if self._raw is None:
            raise ValueError("no response to read")
        if self._closed:
            raise ValueError("response body is closed")
        return b"".join(self._raw.iter_content(chunk_size=CHUNK_SIZE))

    def body_string(self) -> str:
        """
        Body as text. Only an explicit charset in Content-Type is honoured;
        everything else is read as UTF-8.
        """
        data = self.body_bytes()
        encoding = _charset(self.headers.get("Content-Type", "")) or "utf-8"
        try:
            return data.decode(encoding, errors="replace")
        except LookupError:
            return data.decode("utf-8", errors="replace")

    def json(self, default: Any = None) -> Any:
        """
        Decode the body as JSON.

        An empty body is not an error: `default` is returned as given.
        """
        data = self.body_bytes()
        if not data.strip():
            return default
        try:
            return json.loads(data)
        except ValueError as e:
            raise ResponseDecodeError(
                f"invalid JSON body: {e}",
                body_head=data[:200].decode("utf-8", errors="replace"),
            ) from e

    def path(self) -> str:
        """
        URL path of the original request, percent-decoded.
        After a followed redirect this is still where the request was sent,
        not where it ended up; use `url` for the final location.
        """
        if self._request is None or self._request.url is None:
            return ""
        return unquote(urlsplit(self._request.url).path)

    # ---------- diagnostics ----------

    def dump(self, out_dir: Optional[Union[str, Path]] = None, open_browser: bool = False) -> Path:
        """
        Write the body to response-dump-<unix time><ext> for inspection.

        HTML bodies are prefixed with this response's summary in a <pre>
        block. Consumes the body.
        """
        settings = self._settings or get_settings()
        directory = Path(out_dir) if out_dir is not None else Path(settings.dump_dir)
        directory.mkdir(parents=True, exist_ok=True)

        content_type = self.headers.get("Content-Type", "")
        mime = content_type.split(";", 1)[0].strip().lower()
        ext = (mimetypes.guess_extension(mime) or "") if mime else ""
        path = directory / f"response-dump-{int(time.time())}{ext}"

        summary = str(self)
        is_html = mime == "text/html"
        body = self.body_bytes()
        with path.open("wb") as f:
            if is_html:
                stamp = datetime.now().strftime("%Y/%m/%d %H:%M:%S")
                f.write(_DUMP_PRE_OPEN)
                f.write(html.escape(f"{stamp}  - {summary}").encode("utf-8"))
                f.write(_DUMP_PRE_CLOSE)
            f.write(body)

        self._log.info(
            "response.dumped",
            path=str(path),
            status=self.status_code,
            content_type=content_type or None,
            body_len=len(body),
            html_title=_try_extract_title(body) if is_html else None,
        )
        if open_browser:
            webbrowser.open(path.resolve().as_uri())
        return path

    def __str__(self) -> str:
        if self._raw is None:
            method = self._request.method if self._request is not None else "?"
            url = self._request.url if self._request is not None else "?"
            return f"<no response> - {method} {url}\n"

        final = self._raw.request if self._raw.request is not None else self._request
        method = final.method if final is not None else "?"
        lines = [f"{self._raw.status_code} {self._raw.reason or ''} - {_http_version(self._raw)} {method} {self._raw.url}"]
        if self._raw.headers:
            lines.append("\tHeader:")
            for key, value in self._raw.headers.items():
                lines.append(f"\t\t{key}: {value}")
        cookies = self.cookies
        if cookies:
            lines.append("\tCookies:")
            for c in cookies:
                lines.append(f"\t\t{format_cookie(c)}")
        return "\n".join(lines) + "\n"

    def __repr__(self) -> str:
        return f"<ResponseView [{self.status_code}] {self.path()}>"
