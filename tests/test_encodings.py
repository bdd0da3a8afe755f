import pytest

from webprobe.encodings import (
    decode_big5,
    decode_data,
    decode_gbk,
    decode_korean,
    encode_big5,
)

TEXT = "中文測試"


def test_decode_gbk():
    assert decode_gbk("中文".encode("gbk")) == "中文".encode("utf-8")


def test_big5_round_trip():
    encoded = encode_big5(TEXT.encode("utf-8"))
    assert encoded == TEXT.encode("big5")
    assert decode_big5(encoded) == TEXT.encode("utf-8")


def test_encode_big5_rejects_unrepresentable():
    with pytest.raises(ValueError):
        encode_big5("😀".encode("utf-8"))


def test_decode_korean():
    assert decode_korean("한국어".encode("euc_kr")) == "한국어".encode("utf-8")


def test_decode_data_from_header_charset():
    body = "中文".encode("gbk")
    result = decode_data(body, {"Content-Type": ["text/html; charset=GBK"]})
    assert result == "中文".encode("utf-8")


def test_decode_data_euc_kr_header():
    body = "한국어".encode("euc_kr")
    result = decode_data(body, {"Content-Type": ["text/html; charset=euc-kr"]})
    assert result == "한국어".encode("utf-8")


def test_decode_data_from_meta_charset():
    body = '<meta charset="gb2312"><p>中文</p>'.encode("gbk")
    result = decode_data(body, {"Content-Type": ["text/html"]})
    assert result.decode("utf-8").endswith("中文</p>")


def test_decode_data_without_content_type_is_unchanged():
    body = '<meta charset="gb2312">'.encode("ascii") + "中文".encode("gbk")
    assert decode_data(body, {}) == body


def test_decode_data_utf8_unchanged():
    body = "plain".encode("utf-8")
    assert decode_data(body, {"Content-Type": ["text/html; charset=utf-8"]}) == body