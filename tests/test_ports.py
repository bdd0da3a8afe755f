import pytest

from webprobe.ports import HTTP, HTTP_AND_HTTPS, HTTP_OR_HTTPS, HTTPS, CustomPorts


def test_plain_ports_use_either_scheme():
    ports = CustomPorts()
    ports.add("80,443,80")
    assert ports.ports == {80: HTTP_OR_HTTPS, 443: HTTP_OR_HTTPS}
    assert ports.values == ["80,443,80"]


def test_scheme_prefixes_merge():
    ports = CustomPorts()
    ports.add("http:8080")
    assert ports.ports[8080] == HTTP
    ports.add("HTTPS:8080")
    assert ports.ports[8080] == HTTP_AND_HTTPS


def test_range_expansion():
    ports = CustomPorts()
    ports.add("https:8000-8002")
    assert ports.ports == {8000: HTTPS, 8001: HTTPS, 8002: HTTPS}


def test_range_merge_carries_forward():
    ports = CustomPorts()
    ports.add("http:8001")
    ports.add("https:8000-8002")
    assert ports.ports == {8000: HTTPS, 8001: HTTP_AND_HTTPS, 8002: HTTP_AND_HTTPS}


@pytest.mark.parametrize("bad", ["abc", "70000", "10-5", "1-70000", "x-5"])
def test_invalid_values(bad):
    ports = CustomPorts()
    with pytest.raises(ValueError):
        ports.add(bad)
    assert ports.values == []


def test_range_order_message():
    with pytest.raises(ValueError, match="should be lower"):
        CustomPorts().add("10-5")