import pytest

from config.settings import Settings
from core.errors import BadRequest, UnsupportedMethod
from core.http_request import Request, build_origin_request
from core.uri_parser import parse_uri


def test_parse_request_line():
    req = Request.parse("GET http://example.com/ HTTP/1.1\r\n")
    assert req == Request("GET", "http://example.com/", "HTTP/1.1")


def test_parse_tolerates_missing_fields():
    assert Request.parse("GET\r\n") == Request("GET", "", "")
    assert Request.parse("HEAD  http://a/ ") == Request("HEAD", "http://a/", "")


def test_blank_line_is_bad_request():
    with pytest.raises(BadRequest):
        Request.parse("\r\n")


@pytest.mark.parametrize("method", ["GET", "get", "Get", "HEAD", "head"])
def test_supported_methods(method):
    Request(method, "http://a/").require_supported_method()


@pytest.mark.parametrize("method", ["POST", "PUT", "CONNECT", "OPTIONS"])
def test_other_methods_are_not_implemented(method):
    with pytest.raises(UnsupportedMethod) as info:
        Request(method, "http://a/").require_supported_method()
    assert info.value.status == 501
    assert info.value.cause == method


def test_origin_request_is_downgraded_to_http10():
    req = Request.parse("GET http://example.com:8080/a?b=c HTTP/1.1")
    payload = build_origin_request(req, parse_uri(req.uri), "UA/1.0")
    assert payload == (
        b"GET /a?b=c HTTP/1.0\r\n"
        b"Host: example.com\r\n"
        b"User-Agent: UA/1.0\r\n"
        b"Connection: close\r\n"
        b"Proxy-Connection: close\r\n"
        b"\r\n"
    )


def test_origin_request_keeps_method_and_default_path():
    req = Request.parse("head http://example.com HTTP/1.0")
    payload = build_origin_request(req, parse_uri(req.uri), Settings.USER_AGENT)
    assert payload.startswith(b"head / HTTP/1.0\r\nHost: example.com\r\n")
    assert Settings.USER_AGENT.encode() in payload
