"""Capability probes: HTTP/2, HTTP/1.1 pipelining and virtual hosts."""

from __future__ import annotations

import re
import secrets
import socket
import ssl
from collections import Counter

import requests
from urllib.parse import urlsplit

from webprobe.client import HTTPX, UnsafeOptions

_HTTP = "http"
_HTTPS = "https"
_H2C_SETTINGS = "AAMAAABkAARAAAAAAAIAAAAA"
_PIPELINE_PROBES = 10
_PIPELINE_READ = 1024
_SIMILARITY_MULTIPLIER = 100
_XID_ALPHABET = "0123456789abcdefghijklmnopqrstuv"
_WHITESPACE_RE = re.compile(r"\s+")


def support_http2(client: HTTPX, protocol: str, method: str, target_url: str) -> bool:
    """Tell whether the target speaks HTTP/2: h2c upgrade for http, ALPN for https."""
    if protocol == _HTTP:
        request = requests.Request(
            method=method,
            url=target_url,
            headers={
                "Connection": "Upgrade, HTTP2-Settings",
                "Upgrade": "h2c",
                "HTTP2-Settings": _H2C_SETTINGS,
            },
        )
        try:
            response = client.do(request)
        except (requests.RequestException, OSError, ValueError):
            return False
        return response.status_code == 101
    return _negotiates_h2(target_url, client.options.timeout or None, client.options.sni_name)


def _negotiates_h2(target_url: str, timeout: float | None, sni_name: str) -> bool:
    parts = urlsplit(target_url)
    if parts.scheme.lower() != _HTTPS or not parts.hostname:
        return False
    try:
        port = parts.port or 443
    except ValueError:
        return False
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    context.set_alpn_protocols(["h2", "http/1.1"])
    try:
        with socket.create_connection((parts.hostname, port), timeout=timeout) as sock:
            with context.wrap_socket(sock, server_hostname=sni_name or parts.hostname) as tls:
                return tls.selected_alpn_protocol() == "h2"
    except (OSError, ValueError):
        return False


def _has_port(host: str) -> bool:
    if host.startswith("["):
        end = host.find("]")
        return end >= 0 and host[end + 1:end + 2] == ":"
    return host.count(":") == 1


def _pipeline_dial(protocol: str, addr: str) -> socket.socket:
    host, _, port = addr.rpartition(":")
    host = host.removeprefix("[").removesuffix("]")
    sock = socket.create_connection((host, int(port)), timeout=5)
    if protocol == _HTTP:
        return sock
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context.wrap_socket(sock, server_hostname=host)


def support_pipeline(protocol: str, method: str, host: str, port: int) -> bool:
    """Send a burst of requests on one connection and expect at least two replies."""
    addr = host
    if port == 0:
        port = 443 if protocol == _HTTPS else 80
    if not _has_port(host) and port > 0:
        addr = f"{host}:{port}"
    probe = f"{method} / HTTP/1.1\nHost: {addr}\n\n".encode("latin-1", "replace")
    try:
        conn = _pipeline_dial(protocol, addr)
    except (OSError, ValueError):
        return False
    with conn:
        try:
            for _ in range(_PIPELINE_PROBES):
                conn.sendall(probe)
        except OSError:
            return False
        replies = 0
        for _ in range(_PIPELINE_PROBES):
            try:
                conn.settimeout(1.0)
                chunk = conn.recv(_PIPELINE_READ)
            except OSError:
                break
            if not chunk:
                break
            text = chunk.decode("latin-1").lower()
            replies += sum(
                1 for piece in text.split("\n\n") if "http/1.1" in piece or "http/1.0" in piece
            )
    return replies >= 2


def similarity(a: str, b: str) -> float:
    """Dice coefficient of the character bigrams of two strings, ignoring whitespace."""
    a = _WHITESPACE_RE.sub("", a)
    b = _WHITESPACE_RE.sub("", b)
    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0
    first = Counter(a[i:i + 2] for i in range(len(a) - 1))
    shared = 0
    for i in range(len(b) - 1):
        bigram = b[i:i + 2]
        if first[bigram] > 0:
            first[bigram] -= 1
            shared += 1
    return 2.0 * shared / (len(a) + len(b) - 2)


def _random_id() -> str:
    return "".join(secrets.choice(_XID_ALPHABET) for _ in range(20))


def _request_host(request: requests.Request) -> str:
    host = next((v for k, v in request.headers.items() if k.lower() == "host"), None)
    return host or urlsplit(request.url).netloc


def is_virtual_host(
    client: HTTPX, request: requests.Request, unsafe_options: UnsafeOptions | None = None
) -> bool:
    """Compare the response for the real host with one for a made-up subdomain."""
    first = client.do(request, unsafe_options)

    fake_host = f"{_random_id()}.{_request_host(request)}"
    for key in [k for k in request.headers if k.lower() == "host"]:
        del request.headers[key]
    request.headers["Host"] = fake_host

    second = client.do(request, unsafe_options)
    options = client.options

    if not options.vhost_ignore_status_code and first.status_code != second.status_code:
        return True
    if not options.vhost_ignore_content_length and first.content_length != second.content_length:
        return True
    if not options.vhost_ignore_number_of_words and first.words != second.words:
        return True
    if not options.vhost_ignore_number_of_lines and first.lines != second.lines:
        return True
    ratio = int(similarity(first.raw, second.raw) * _SIMILARITY_MULTIPLIER)
    return ratio <= options.vhost_similarity_ratio