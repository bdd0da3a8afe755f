from webprobe.response import ChainItem, Proto, Response, Target


def _chain_response():
    return Response(
        chain=[
            ChainItem(b"req1", b"resp1", 301, "/two", "http://a.example.com/"),
            ChainItem(b"req2", b"resp2", 302, "/three", "http://a.example.com/two"),
            ChainItem(b"req3", b"resp3", 200, "", "http://a.example.com/three"),
        ]
    )


def test_get_header_joins_values():
    response = Response(headers={"Set-Cookie": ["a=1", "b=2"]})
    assert response.get_header("Set-Cookie") == "a=1 b=2"
    assert response.get_header("Missing") == ""


def test_get_header_part():
    response = Response(headers={"Content-Type": ["text/html; charset=utf-8"]})
    assert response.get_header_part("Content-Type", ";") == "text/html"
    assert response.get_header_part("Server", ";") == ""


def test_chain_status_codes():
    assert _chain_response().chain_status_codes() == [301, 302, 200]


def test_get_chain_skips_first_request_and_last_response():
    assert _chain_response().get_chain() == "resp1req2resp2req3"


def test_chain_last_url_and_has_chain():
    response = _chain_response()
    assert response.has_chain() is True
    assert response.chain_last_url() == "http://a.example.com/three"
    single = Response(chain=[ChainItem(request_url="http://a.example.com/")])
    assert single.has_chain() is False
    assert single.chain_last_url() == ""


def test_chain_as_list_omits_empty_fields():
    items = _chain_response().chain_as_list()
    assert len(items) == 3
    assert items[0]["request-url"] == "http://a.example.com/"
    assert items[0]["status_code"] == 301
    assert "location" not in items[2]


def test_proto_and_target():
    assert Proto("http11") is Proto.HTTP11
    assert Proto.UNKNOWN.value == ""
    target = Target("example.com", custom_ip="127.0.0.1")
    assert target.custom_host == ""
    assert target.custom_ip == "127.0.0.1"