import pytest
import requests

from webprobe.httputilz import ParsedRequest, dump_request, normalize_spaces, parse_request

RAW = "GET /path HTTP/1.1\nHost: example.com\nContent-Length: 5\nX-A:  b \n\nbody"


def test_parse_request_safe():
    parsed = parse_request(RAW, False)
    assert parsed == ParsedRequest("GET", "/path", {"Host": "example.com", "X-A": "b"}, "body")


def test_parse_request_unsafe_keeps_raw_headers():
    parsed = parse_request(RAW, True)
    assert parsed.headers["X-A"] == "  b"
    assert parsed.headers["Content-Length"] == " 5"


def test_parse_request_full_url_sets_host():
    parsed = parse_request("GET http://foo.com:8080/x HTTP/1.1\nHost: other\n\n", False)
    assert parsed.path == "http://foo.com:8080/x"
    assert parsed.headers["Host"] == "foo.com:8080"


def test_parse_request_errors():
    with pytest.raises(ValueError, match="could not read request"):
        parse_request("GET / HTTP/1.1", False)
    with pytest.raises(ValueError, match="malformed"):
        parse_request("GET /\n", False)


def test_normalize_spaces():
    assert normalize_spaces("a \t\n b  c") == "a b c"


def test_dump_request():
    req = requests.Request("POST", "http://example.com/p?q=1", data=b"xy")
    dumped = dump_request(req)
    assert dumped.startswith("POST /p?q=1 HTTP/1.1\r\n")
    assert "Host: example.com\r\n" in dumped
    assert dumped.endswith("\r\n\r\nxy")