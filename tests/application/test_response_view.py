from __future__ import annotations

import pytest
import requests
from requests.exceptions import StreamConsumedError

from formclient.application.response_view import ResponseView
from formclient.domain.exceptions import CookieNotFoundError, ResponseDecodeError

from fake_transport import make_response


def view_of(body: bytes = b"", **kwargs) -> ResponseView:
    request = requests.Request("POST", "http://example.test/form/submit?x=1").prepare()
    kwargs.setdefault("request", request)
    return ResponseView(make_response(body=body, **kwargs), request)


class TestCookie:
    def test_returns_first_match(self):
        view = view_of(set_cookies=["sid=first; Path=/a", "sid=second; Path=/b", "lang=en"])
        assert view.cookie("sid").value == "first"
        assert view.cookie("lang").value == "en"

    def test_first_wins_on_same_name_and_path(self):
        view = view_of(set_cookies=["sid=first; Path=/", "sid=second; Path=/"])
        assert view.cookie("sid").value == "first"
        assert [c.value for c in view.cookies] == ["first", "second"]

    def test_foreign_domain_is_kept(self):
        view = view_of(set_cookies=["tracker=1; Domain=other.test; Path=/"])
        c = view.cookie("tracker")
        assert c.value == "1"
        assert c.domain == "other.test"

    def test_attributes_are_parsed(self):
        view = view_of(set_cookies=["sid=abc; Path=/app; Secure; HttpOnly; Max-Age=60"])
        c = view.cookie("sid")
        assert c.path == "/app"
        assert c.secure
        assert c.has_nonstandard_attr("HttpOnly")
        assert c.expires is not None

    def test_malformed_line_is_skipped(self):
        view = view_of(set_cookies=["garbage", "lang=en"])
        assert [c.name for c in view.cookies] == ["lang"]

    def test_missing_cookie_raises(self):
        view = view_of(set_cookies=["lang=en"])
        with pytest.raises(CookieNotFoundError) as exc_info:
            view.cookie("session")
        assert exc_info.value.name == "session"

    def test_no_cookies_at_all(self):
        with pytest.raises(CookieNotFoundError):
            view_of().cookie("session")


class TestBody:
    def test_body_bytes(self):
        assert view_of(b"\x00\x01binary").body_bytes() == b"\x00\x01binary"

    def test_body_is_single_read(self):
        view = view_of(b"once")
        assert view.body_bytes() == b"once"
        with pytest.raises(StreamConsumedError):
            view.body_bytes()

    def test_body_string_uses_charset(self):
        view = view_of("café".encode("latin-1"), headers={"Content-Type": "text/plain; charset=latin-1"})
        assert view.body_string() == "café"

    def test_body_string_defaults_to_utf8(self):
        assert view_of("naïve".encode("utf-8")).body_string() == "naïve"

    def test_text_without_charset_is_utf8(self):
        view = view_of("café".encode("utf-8"), headers={"Content-Type": "text/plain"})
        assert view.body_string() == "café"

    def test_quoted_charset(self):
        view = view_of("café".encode("latin-1"), headers={"Content-Type": "text/html; charset=\"ISO-8859-1\""})
        assert view.body_string() == "café"

    def test_body_string_unknown_charset_falls_back(self):
        assert view_of(b"plain", headers={"Content-Type": "text/plain; charset=no-such-codec"}).body_string() == "plain"

    def test_read_after_close_fails(self):
        view = view_of(b"data")
        view.close()
        with pytest.raises(ValueError, match="closed"):
            view.body_bytes()


class TestJson:
    def test_decodes_object(self):
        assert view_of(b'{"id": 123, "tags": ["a"]}').json() == {"id": 123, "tags": ["a"]}

    def test_empty_body_returns_default_untouched(self):
        target = {"kept": True}
        result = view_of(b"").json(default=target)
        assert result is target
        assert target == {"kept": True}

    def test_whitespace_body_is_empty(self):
        assert view_of(b"  \r\n").json() is None

    def test_invalid_json_raises(self):
        with pytest.raises(ResponseDecodeError) as exc_info:
            view_of(b"<html>nope</html>").json()
        assert exc_info.value.body_head == "<html>nope</html>"
        assert isinstance(exc_info.value.__cause__, ValueError)


class TestPath:
    def test_path_is_from_original_request(self):
        original = requests.Request("GET", "http://example.test/old/place").prepare()
        final_hop = requests.Request("GET", "http://example.test/new/place").prepare()
        raw = make_response(request=final_hop, url="http://example.test/new/place")

        view = ResponseView(raw, original)

        assert view.path() == "/old/place"
        assert view.url == "http://example.test/new/place"

    def test_path_falls_back_to_response_request(self):
        req = requests.Request("GET", "http://example.test/only").prepare()
        view = ResponseView(make_response(request=req))
        assert view.path() == "/only"

    def test_path_is_percent_decoded(self):
        req = requests.Request("GET", "http://example.test/a%20b/caf%C3%A9").prepare()
        assert ResponseView(make_response(request=req), req).path() == "/a b/café"

    def test_path_without_request(self):
        assert ResponseView(None).path() == ""


class TestLifecycle:
    def test_close_is_idempotent(self):
        view = view_of(b"x")
        view.close()
        view.close()
        assert view.closed

    def test_context_manager_closes(self):
        with view_of(b"x") as view:
            assert not view.closed
        assert view.closed

    def test_close_without_response(self):
        view = ResponseView(None)
        view.close()
        assert view.closed


class TestStr:
    def test_renders_status_headers_cookies(self):
        view = view_of(
            headers={"Content-Type": "text/plain"},
            set_cookies=["sid=abc"],
            url="http://example.test/form/submit?x=1",
        )
        text = str(view)

        assert text.startswith("200 OK - HTTP POST http://example.test/form/submit?x=1\n")
        assert "\tHeader:\n\t\tContent-Type: text/plain\n" in text
        assert "\tCookies:\n\t\tsid=abc" in text

    def test_str_without_response(self):
        req = requests.Request("GET", "http://example.test/x").prepare()
        assert str(ResponseView(None, req)) == "<no response> - GET http://example.test/x\n"

    def test_accessors(self):
        view = view_of(headers={"X-Id": "7"}, reason="Created", status=201)
        assert view.status_code == 201
        assert view.reason == "Created"
        assert view.headers["x-id"] == "7"
        assert repr(view) == "<ResponseView [201] /form/submit>"


class TestDump:
    def test_html_dump_has_summary_block(self, tmp_path):
        html_body = b"<html><head><title>Hello</title></head><body>hi</body></html>"
        view = view_of(html_body, headers={"Content-Type": "text/html; charset=utf-8"})

        path = view.dump(out_dir=tmp_path)

        assert path.parent == tmp_path
        assert path.name.startswith("response-dump-")
        assert path.suffix in (".html", ".htm")
        content = path.read_bytes()
        assert content.startswith(b'<pre style="background:#000;color:#0f0;')
        assert b"200 OK - HTTP POST" in content
        assert content.endswith(html_body)

    def test_json_dump_is_raw_body(self, tmp_path):
        view = view_of(b'{"a": 1}', headers={"Content-Type": "application/json"})

        path = view.dump(out_dir=tmp_path)

        assert path.suffix == ".json"
        assert path.read_bytes() == b'{"a": 1}'

    def test_dump_defaults_to_settings_dir(self, settings):
        raw = make_response(body=b"x", headers={"Content-Type": "text/plain"})
        view = ResponseView(raw, settings=settings)

        path = view.dump()

        assert str(path.parent) == settings.dump_dir
        assert path.read_bytes() == b"x"

    def test_dump_can_open_browser(self, tmp_path, monkeypatch):
        opened = []
        monkeypatch.setattr("formclient.application.response_view.webbrowser.open", opened.append)

        path = view_of(b"x").dump(out_dir=tmp_path, open_browser=True)

        assert opened == [path.resolve().as_uri()]


class _Warnings:
    def __init__(self):
        self.events = []

    def warning(self, event: str, **fields) -> None:
        self.events.append((event, fields))


def test_skipped_cookie_is_logged_without_its_value():
    log = _Warnings()
    raw = make_response(set_cookies=["secret-without-pair", "lang=en"])
    view = ResponseView(raw, logger=log)

    assert [c.name for c in view.cookies] == ["lang"]
    assert [c.name for c in view.cookies] == ["lang"]
    assert log.events == [("response.cookie_skipped", {"url": "http://example.test/", "header_len": 19})]
