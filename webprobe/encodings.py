"""Conversion of East Asian legacy encodings to UTF-8."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

_META_CHARSET_RE = re.compile(rb'\s*charset="(.*?)"|charset=(.*?)"\s*', re.IGNORECASE | re.MULTILINE)


def _transcode(data: bytes, codec: str) -> bytes:
    return data.decode(codec, errors="replace").encode("utf-8")


def decode_gbk(data: bytes) -> bytes:
    """Convert GBK bytes to UTF-8."""
    return _transcode(data, "gbk")


def decode_big5(data: bytes) -> bytes:
    """Convert Big5 bytes to UTF-8."""
    return _transcode(data, "big5")


def encode_big5(data: bytes) -> bytes:
    """Convert UTF-8 bytes to Big5; raise ValueError when a character has no Big5 form."""
    try:
        return data.decode("utf-8").encode("big5")
    except UnicodeError as exc:
        raise ValueError(f"cannot encode to big5: {exc}") from exc


def decode_korean(data: bytes) -> bytes:
    """Convert EUC-KR (and its UHC extension) bytes to UTF-8."""
    return _transcode(data, "cp949")


def _meta_charset(data: bytes) -> str:
    match = _META_CHARSET_RE.search(data)
    if match is None:
        return ""
    charset = ""
    for group in match.groups():
        if group:
            charset = group.decode("latin-1")
    return charset.lower()


def decode_data(data: bytes, headers: Mapping[str, Sequence[str]]) -> bytes:
    """Convert a GBK or EUC-KR body to UTF-8 based on its headers or meta tags."""
    content_types = headers.get("Content-Type")
    if content_types is None:
        return data

    content_type = ";".join(content_types).lower()
    if "charset=gb2312" in content_type or "charset=gbk" in content_type:
        return decode_gbk(data)
    if "euc-kr" in content_type:
        return decode_korean(data)

    meta = _meta_charset(data)
    if "gb2312" in meta or "gbk" in meta:
        return decode_gbk(data)
    return data