import pytest

from webprobe.domains import (
    body_domain_grab,
    csp_grab,
    is_valid_domain,
    registered_domain,
)
from webprobe.response import Response

BODY = (
    '<a href="cdn.example.com"> <a href="example.org"> "1.2.3.4" '
    '"com.example.app" "bundle.min.js" "foo.notatld"'
)


def test_body_domain_grab():
    result = body_domain_grab(Response(raw=BODY))
    assert result.domains == ["example.com", "example.org"]
    assert result.fqdns == ["cdn.example.com"]


def test_body_domain_grab_excludes_input():
    result = body_domain_grab(Response(raw=BODY, input="example.com"))
    assert result.domains == ["example.org"]
    assert result.fqdns == ["cdn.example.com"]


def test_body_domain_grab_empty():
    result = body_domain_grab(Response(raw="no domains here"))
    assert result.domains == [] and result.fqdns == []


@pytest.mark.parametrize(
    "name, expected",
    [
        ("example.com", True),
        ("1.2.3.4", False),
        ("com.example.app", False),
        ("bundle.min.js", False),
        ("localhost", False),
    ],
)
def test_is_valid_domain(name, expected):
    assert is_valid_domain(name) is expected


def test_registered_domain():
    assert registered_domain("www.example.co.uk") == "example.co.uk"
    assert registered_domain("a.b.example.com") == "example.com"
    assert registered_domain("host.internal") == "host.internal"


@pytest.mark.parametrize("name", ["co.uk", "com", "", "a..com"])
def test_registered_domain_rejects(name):
    with pytest.raises(ValueError):
        registered_domain(name)


def test_csp_grab_from_headers():
    policy = "default-src 'self' *.example.com https://cdn.example.net; img-src data:"
    result = csp_grab(Response(headers={"Content-Security-Policy": [policy]}))
    assert result is not None
    assert result.domains == ["example.com", "example.net"]
    assert result.fqdns == ["cdn.example.net"]


def test_csp_grab_from_meta():
    body = b'<meta http-equiv="Content-Security-Policy" content="script-src https://js.example.org">'
    result = csp_grab(Response(data=body))
    assert result is not None
    assert result.domains == ["example.org"]
    assert result.fqdns == ["js.example.org"]


def test_csp_grab_ignores_meta_without_http_equiv():
    body = b'<meta name="x" content="https://js.example.org">'
    assert csp_grab(Response(data=body)) is None


def test_csp_grab_none_without_policy():
    assert csp_grab(Response(headers={"Server": ["nginx"]})) is None