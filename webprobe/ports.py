"""Port list parsing with optional scheme prefixes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

HTTP = "http"
HTTPS = "https"
HTTP_OR_HTTPS = "http|https"
HTTP_AND_HTTPS = "http&https"

_MAX_PORT = 65535
_INT_RE = re.compile(r"[+-]?[0-9]+")


def _atoi(text: str, message: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"{message}: invalid syntax")
    return int(text)


def _check_port(port: int, context: str = "") -> None:
    if port > _MAX_PORT:
        suffix = f"{context}: " if context else ""
        raise ValueError(f"{suffix}port value is bigger than {_MAX_PORT}")


def _merge(existing: str | None, protocol: str) -> str:
    if (existing, protocol) in ((HTTP, HTTPS), (HTTPS, HTTP)):
        return HTTP_AND_HTTPS
    return protocol


@dataclass
class CustomPorts:
    """Ports to probe, each mapped to the scheme(s) to use."""

    ports: dict[int, str] = field(default_factory=dict)
    values: list[str] = field(default_factory=list)

    def add(self, value: str) -> None:
        """Add ports like ``80,https:443,http:8000-8010``; raise ValueError on bad input."""
        for item in dict.fromkeys(value.split(",")):
            protocol = HTTP_OR_HTTPS
            item = item.strip().lower()
            for scheme in (HTTP, HTTPS, HTTP_AND_HTTPS):
                if item.startswith(scheme + ":"):
                    item = item[len(scheme) + 1:]
                    protocol = scheme
                    break

            bounds = item.split("-")
            if len(bounds) < 2:
                port = _atoi(item, f"Could not cast port to integer from your value: {item}")
                _check_port(port)
                protocol = _merge(self.ports.get(port), protocol)
                self.ports[port] = protocol
                continue

            low = _atoi(
                bounds[0],
                f"Could not cast first port of your range({item}) to integer from your value: {bounds[0]}",
            )
            _check_port(low, f"first port of your range({low})")
            high = _atoi(
                bounds[1],
                f"Could not cast last port of your port range({item}) to integer from your value: {bounds[1]}",
            )
            _check_port(high, f"last port of your range({low})")
            if low > high:
                raise ValueError(
                    "First value of port range should be lower than the last port "
                    f"from your range: [{low}, {high}]"
                )
            for port in range(low, high + 1):
                protocol = _merge(self.ports.get(port), protocol)
                self.ports[port] = protocol

        self.values.append(value)