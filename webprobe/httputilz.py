"""Raw HTTP request parsing and dumping."""

from __future__ import annotations

import io
import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit

import requests

_SPACES_RE = re.compile(r"[\t\n\f\r ]+")


@dataclass
class ParsedRequest:
    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""


def parse_request(raw: str, unsafe: bool = False) -> ParsedRequest:
    """Parse a raw HTTP request; raise ValueError when it is malformed."""
    reader = io.StringIO(raw)
    first = reader.readline()
    if not first.endswith("\n"):
        raise ValueError("could not read request: EOF")
    parts = first.split(" ")
    if len(parts) < 3:
        raise ValueError("malformed request supplied")
    method = parts[0]

    headers: dict[str, str] = {}
    while True:
        line = reader.readline()
        at_eof = not line.endswith("\n")
        line = line.strip()
        if at_eof or line == "":
            break
        pieces = line.split(":", 1)
        key = pieces[0]
        value = pieces[1] if len(pieces) == 2 else ""
        if not unsafe:
            if len(pieces) != 2 or key.lower() == "content-length":
                continue
            key, value = key.strip(), value.strip()
        headers[key] = value

    path = parts[1]
    if path.startswith("http"):
        try:
            host = urlsplit(path).netloc
        except ValueError as exc:
            raise ValueError(f"could not parse request URL: {exc}") from exc
        headers["Host"] = host

    return ParsedRequest(method, path, headers, reader.read())


def dump_request(request: requests.Request | requests.PreparedRequest) -> str:
    """Render a request as it goes on the wire."""
    prepared = request.prepare() if isinstance(request, requests.Request) else request
    host = next(
        (value for name, value in prepared.headers.items() if name.lower() == "host"),
        urlsplit(prepared.url).netloc,
    )
    lines = [f"{prepared.method} {prepared.path_url} HTTP/1.1", f"Host: {host}"]
    lines.extend(
        f"{name}: {value}" for name, value in prepared.headers.items() if name.lower() != "host"
    )
    body = prepared.body or b""
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    return "\r\n".join(lines) + "\r\n\r\n" + body


def normalize_spaces(data: str) -> str:
    """Collapse every run of whitespace into a single space."""
    return _SPACES_RE.sub(" ", data)