import re

import pytest

from webprobe.filters import FilterCustom, FilterRegex, FilterString, apply_filters
from webprobe.response import Response


def test_filter_string_is_case_insensitive():
    response = Response(raw="HTTP/1.1 200 OK\r\n\r\nSay Hello")
    assert FilterString(["hello"]).filter(response) is True
    assert FilterString(["goodbye"]).filter(response) is False


def test_filter_regex():
    response = Response(raw="Server: nginx/1.2")
    assert FilterRegex([r"apache", r"nginx/\d"]).filter(response) is True
    assert FilterRegex([r"^nginx"]).filter(response) is False


def test_filter_regex_invalid_pattern_raises():
    with pytest.raises(re.error):
        FilterRegex(["("]).filter(Response(raw="x"))


def test_filter_custom_skips_failing_callbacks():
    def broken(_):
        raise RuntimeError("boom")

    response = Response(status_code=404)
    assert FilterCustom([broken, lambda r: r.status_code == 404]).filter(response) is True
    assert FilterCustom([broken]).filter(response) is False


def test_apply_filters():
    response = Response(raw="abc")
    assert apply_filters([FilterString(["zzz"]), FilterRegex(["b"])], response) is True
    assert apply_filters([], response) is False