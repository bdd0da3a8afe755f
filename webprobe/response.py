"""HTTP response model, scan targets and protocol names."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class Proto(str, enum.Enum):
    """HTTP protocol version to force on the client."""

    UNKNOWN = ""
    HTTP11 = "http11"
    HTTP2 = "http2"
    HTTP3 = "http3"


@dataclass
class Target:
    """A scan target, optionally overriding the Host header or the IP to connect to."""

    host: str
    custom_host: str = ""
    custom_ip: str = ""


@dataclass
class ChainItem:
    """One request/response hop of a redirect chain."""

    request: bytes = b""
    response: bytes = b""
    status_code: int = 0
    location: str = ""
    request_url: str = ""

    def as_dict(self) -> dict[str, Any]:
        """Return the hop as a JSON-ready mapping, leaving out empty fields."""
        fields = {
            "request": self.request.decode("utf-8", "replace"),
            "response": self.response.decode("utf-8", "replace"),
            "status_code": self.status_code,
            "location": self.location,
            "request-url": self.request_url,
        }
        return {key: value for key, value in fields.items() if value}


@dataclass
class Response:
    """The outcome of probing one target."""

    input: str = ""
    status_code: int = 0
    headers: dict[str, list[str]] = field(default_factory=dict)
    raw_data: bytes = b""
    data: bytes = b""
    content_length: int = 0
    raw: str = ""
    raw_headers: str = ""
    words: int = 0
    lines: int = 0
    tls_data: Any = None
    csp_data: Any = None
    body_domains: Any = None
    http2: bool = False
    pipeline: bool = False
    duration: float = 0.0
    chain: list[ChainItem] = field(default_factory=list)

    def get_header(self, name: str) -> str:
        """Return all values of header ``name`` joined by spaces, or ''."""
        values = self.headers.get(name)
        return " ".join(values) if values is not None else ""

    def get_header_part(self, name: str, sep: str) -> str:
        """Return the part of header ``name`` before the first ``sep``."""
        values = self.headers.get(name)
        if not values:
            return ""
        joined = " ".join(values)
        if sep == "":
            return joined[:1]
        return joined.split(sep, 1)[0]

    def chain_status_codes(self) -> list[int]:
        return [item.status_code for item in self.chain]

    def get_chain(self) -> str:
        """Dump the redirect chain: every request after the first, every response but the last."""
        last = len(self.chain) - 1
        pieces: list[bytes] = []
        for position, item in enumerate(self.chain):
            if position != 0:
                pieces.append(item.request)
            if position < last:
                pieces.append(item.response)
        return b"".join(pieces).decode("utf-8", "replace")

    def chain_as_list(self) -> list[dict[str, Any]]:
        return [item.as_dict() for item in self.chain]

    def has_chain(self) -> bool:
        return len(self.chain) > 1

    def chain_last_url(self) -> str:
        return self.chain[-1].request_url if self.has_chain() else ""