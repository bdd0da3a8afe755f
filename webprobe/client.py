"""HTTP client that probes targets and builds Response objects."""

from __future__ import annotations

import gzip
import hashlib
import random
import re
import socket
import ssl
import time
import warnings
import zlib
from dataclasses import dataclass, field
from urllib.parse import urljoin, urlsplit

import requests

from webprobe.domains import body_domain_grab, csp_grab
from webprobe.encodings import decode_data
from webprobe.filters import Filter, apply_filters
from webprobe.httputilz import dump_request, normalize_spaces
from webprobe.options import Options, default_options
from webprobe.response import ChainItem, Proto, Response
from webprobe.title import strip_html

_USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/123.0.0.0 Safari/537.36",
)
_REDIRECT_CODES = frozenset({301, 302, 303, 307, 308})
_NO_BODY_CODES = frozenset({101, 304})
_TLS_VERSIONS = {"TLSv1": "tls10", "TLSv1.1": "tls11", "TLSv1.2": "tls12", "TLSv1.3": "tls13"}
_PROTO_NAMES = {10: "HTTP/1.0", 11: "HTTP/1.1", 20: "HTTP/2.0"}
_HEAD_END_RE = re.compile(rb"\r?\n\r?\n")
_CHUNK = 65536


@dataclass
class UnsafeOptions:
    """Overrides for raw (unsafe) requests."""

    uri_path: str = ""


@dataclass
class TLSData:
    """Facts about the TLS session of an https target."""

    host: str
    port: str
    version: str
    cipher: str
    server_name: str
    fingerprint_hash: dict[str, str] = field(default_factory=dict)
    probe_status: bool = True
    tls_connection: str = "ctls"


@dataclass
class _Exchange:
    status_code: int
    proto: str
    reason: str
    headers: dict[str, list[str]]
    body: bytes
    final_url: str
    chain: list[ChainItem] = field(default_factory=list)


def _canonical_key(name: str) -> str:
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def _set_header(headers: dict, name: str, value: str) -> None:
    for existing in [key for key in headers if key.lower() == name.lower()]:
        del headers[existing]
    headers[name] = value


def _get_header(headers: dict, name: str) -> str | None:
    return next((value for key, value in headers.items() if key.lower() == name.lower()), None)


def _dump_head(proto: str, status: int, reason: str, headers: dict[str, list[str]]) -> str:
    lines = [f"{proto} {status} {reason}".rstrip()]
    lines.extend(f"{name}: {value}" for name, values in headers.items() for value in values)
    return "\r\n".join(lines) + "\r\n\r\n"


def _response_headers(resp: requests.Response) -> dict[str, list[str]]:
    raw_headers = getattr(resp.raw, "headers", None)
    iteritems = getattr(raw_headers, "iteritems", None)
    pairs = iteritems() if iteritems else resp.headers.items()
    headers: dict[str, list[str]] = {}
    for name, value in pairs:
        headers.setdefault(_canonical_key(name), []).append(value)
    return headers


def _read_body(resp: requests.Response, decode: bool, limit: int) -> bytes:
    if limit <= 0:
        return b""
    stream = resp.iter_content(_CHUNK) if decode else resp.raw.stream(_CHUNK, decode_content=False)
    chunks = []
    size = 0
    for chunk in stream:
        chunks.append(chunk)
        size += len(chunk)
        if size >= limit:
            break
    return b"".join(chunks)[:limit]


def _dechunk(data: bytes) -> bytes:
    out = bytearray()
    pos = 0
    while True:
        newline = data.find(b"\n", pos)
        if newline < 0:
            break
        try:
            size = int(data[pos:newline].split(b";")[0].strip(), 16)
        except ValueError:
            break
        if size == 0:
            break
        start = newline + 1
        out += data[start:start + size]
        pos = start + size
        if data.startswith(b"\r\n", pos):
            pos += 2
        elif data.startswith(b"\n", pos):
            pos += 1
    return bytes(out)


def _decompress(body: bytes, encoding: str) -> bytes:
    try:
        if encoding == "gzip":
            return gzip.decompress(body)
        if encoding == "deflate":
            return zlib.decompress(body)
    except (OSError, EOFError, zlib.error):
        pass
    return body


class HTTPX:
    """Probing client: sends requests, measures and describes the responses."""

    def __init__(self, options: Options | None = None) -> None:
        self.options = options if options is not None else default_options()
        self.options._parse_custom_cookies()
        self.filters: list[Filter] = []
        self.custom_headers = self.options.custom_headers

        if self.options.http_proxy:
            self.options.proxy = self.options.http_proxy
        elif self.options.socks_proxy:
            self.options.proxy = self.options.socks_proxy
        if self.options.proxy:
            proxy_parts = urlsplit(self.options.proxy)
            if not proxy_parts.scheme or not proxy_parts.netloc:
                raise ValueError(f"invalid proxy url: {self.options.proxy!r}")
            self._proxies = {"http": self.options.proxy, "https": self.options.proxy}
        else:
            self._proxies = {}

        self._session = requests.Session()
        self._session.trust_env = False
        self._session.verify = False

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> HTTPX:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def new_request(self, method: str, target_url: str) -> requests.Request:
        """Build a request; raise ValueError for URLs without an http(s) scheme and host."""
        parts = urlsplit(target_url)
        if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
            raise ValueError(f"invalid url: {target_url!r}")
        headers: dict[str, str] = {}
        if not self.options.unsafe:
            headers["User-Agent"] = self.options.default_user_agent
            headers["Accept-Charset"] = "utf-8"
        return requests.Request(method=method, url=target_url, headers=headers)

    def set_custom_headers(self, request: requests.Request, headers: dict[str, str]) -> None:
        """Apply headers to a request; 'host' overrides the Host header."""
        for name, value in headers.items():
            _set_header(request.headers, "Host" if name.lower() == "host" else name, value)
        if self.options.random_agent:
            _set_header(request.headers, "User-Agent", random.choice(_USER_AGENTS))

    def add_filter(self, f: Filter) -> None:
        self.filters.append(f)

    def verify(self, request: requests.Request, unsafe_options: UnsafeOptions | None = None) -> bool:
        """Send the request and tell whether any filter matches the response."""
        return apply_filters(self.filters, self.do(request, unsafe_options))

    def sanitize(self, text: str, trim_line: bool, normalize_spaces: bool) -> str:
        text = strip_html(text)
        if trim_line:
            text = text.replace("\n", "")
        if normalize_spaces:
            text = _normalize(text)
        return text

    def do(self, request: requests.Request, unsafe_options: UnsafeOptions | None = None) -> Response:
        """Send the request and describe the response; network errors propagate."""
        unsafe_options = unsafe_options or UnsafeOptions()
        started = time.monotonic()
        if self.options.unsafe:
            exchange = self._raw_exchange(request, unsafe_options)
        else:
            exchange = self._safe_exchange(request)

        resp = Response(input=self._request_host(request))
        resp.headers = {name: list(values) for name, values in exchange.headers.items()}
        resp.raw_headers = _dump_head(exchange.proto, exchange.status_code, exchange.reason, exchange.headers)
        resp.raw = resp.raw_headers + exchange.body.decode("utf-8", "replace")
        resp.raw_data = bytes(exchange.body)

        data = decode_data(exchange.body, exchange.headers)
        text = data.decode("utf-8", "replace")
        if self.options.vhost_strip_html:
            text = strip_html(text)

        lengths = resp.headers.get("Content-Length")
        if lengths:
            try:
                resp.content_length = int(lengths[0].strip())
            except ValueError:
                resp.content_length = 0
        if resp.content_length <= 0 and data:
            resp.content_length = len(data)

        resp.data = data
        resp.status_code = exchange.status_code
        if text:
            resp.words = len(text.split(" "))
            resp.lines = len(text.strip().split("\n"))

        if not self.options.unsafe and self.options.tls_grab:
            resp.tls_data = self._tls_grab(exchange.final_url)

        if self.options.extract_fqdn:
            resp.csp_data = csp_grab(resp)
            resp.body_domains = body_domain_grab(resp)

        resp.chain = exchange.chain
        resp.duration = time.monotonic() - started
        return resp

    # safe requests

    def _request_host(self, request: requests.Request) -> str:
        return _get_header(request.headers, "Host") or urlsplit(request.url).netloc

    def _prepare(self, request: requests.Request) -> requests.PreparedRequest:
        prepared = request.prepare()
        if "Accept-Encoding" not in prepared.headers:
            prepared.headers["Accept-Encoding"] = "gzip"
        if self.options.protocol is Proto.HTTP11:
            prepared.headers.setdefault("Connection", "close")
        return prepared

    def _send(self, prepared: requests.PreparedRequest) -> requests.Response:
        attempts = max(self.options.retry_max, 0) + 1
        for attempt in range(attempts):
            try:
                with warnings.catch_warnings():
                    warnings.simplefilter("ignore")
                    return self._session.send(
                        prepared,
                        allow_redirects=False,
                        stream=True,
                        timeout=self.options.timeout or None,
                        verify=False,
                        proxies=self._proxies,
                    )
            except (requests.ConnectionError, requests.Timeout):
                if attempt == attempts - 1:
                    raise
        raise AssertionError("unreachable")

    def _safe_exchange(self, request: requests.Request) -> _Exchange:
        try:
            return self._follow(request, decode=True)
        except requests.exceptions.ContentDecodingError:
            # the server declared an encoding its body does not have: read it undecoded
            _set_header(request.headers, "Accept-Encoding", "identity")
            return self._follow(request, decode=False)

    def _next_url(self, resp: requests.Response, requests_sent: int, first_host: str) -> str | None:
        if not (self.options.follow_redirects or self.options.follow_host_redirects):
            return None
        location = resp.headers.get("Location")
        if resp.status_code not in _REDIRECT_CODES or not location:
            return None
        next_url = urljoin(resp.url, location)
        if self.options.follow_host_redirects:
            new_parts = urlsplit(next_url)
            if (new_parts.hostname or "") != first_host:
                return None
        if requests_sent >= self.options.max_redirects:
            return None
        if self.options.respect_hsts and resp.headers.get("Strict-Transport-Security"):
            next_url = urlsplit(next_url)._replace(scheme="https").geturl()
        return next_url

    def _redirect_request(self, previous: requests.Request, status: int, url: str) -> requests.Request:
        method = previous.method
        data = previous.data
        if status in (301, 302, 303):
            data = None
            if (status == 303 and method not in ("GET", "HEAD")) or (status in (301, 302) and method == "POST"):
                method = "GET"
        headers = {
            name: value
            for name, value in previous.headers.items()
            if name.lower() != "host" and not (data is None and name.lower() == "content-length")
        }
        if self.options._has_custom_cookies():
            cookie = "; ".join(f"{name}={value}" for name, value in self.options._custom_cookies)
            _set_header(headers, "Cookie", cookie)
        return requests.Request(method=method, url=url, headers=headers, data=data)

    def _follow(self, request: requests.Request, decode: bool) -> _Exchange:
        limit = self.options.max_response_body_size_to_read
        chain: list[ChainItem] = []
        current = request
        prepared = self._prepare(current)
        first_parts = urlsplit(prepared.url)
        first_host = first_parts.hostname or first_parts.netloc
        resp = self._send(prepared)
        try:
            while True:
                next_url = self._next_url(resp, len(chain) + 1, first_host)
                if next_url is None:
                    break
                headers = _response_headers(resp)
                body = _read_body(resp, decode, limit)
                chain.append(self._chain_item(prepared, resp, headers, body))
                resp.close()
                current = self._redirect_request(current, resp.status_code, next_url)
                prepared = self._prepare(current)
                resp = self._send(prepared)

            headers = _response_headers(resp)
            body = b"" if resp.status_code in _NO_BODY_CODES else _read_body(resp, decode, limit)
            chain.append(self._chain_item(prepared, resp, headers, body))
            return _Exchange(
                status_code=resp.status_code,
                proto=_PROTO_NAMES.get(getattr(resp.raw, "version", 11), "HTTP/1.1"),
                reason=resp.reason or "",
                headers=headers,
                body=body,
                final_url=prepared.url,
                chain=chain,
            )
        finally:
            resp.close()

    @staticmethod
    def _chain_item(
        prepared: requests.PreparedRequest,
        resp: requests.Response,
        headers: dict[str, list[str]],
        body: bytes,
    ) -> ChainItem:
        proto = _PROTO_NAMES.get(getattr(resp.raw, "version", 11), "HTTP/1.1")
        head = _dump_head(proto, resp.status_code, resp.reason or "", headers)
        return ChainItem(
            request=dump_request(prepared).encode("utf-8"),
            response=head.encode("utf-8") + body,
            status_code=resp.status_code,
            location=resp.headers.get("Location", ""),
            request_url=prepared.url,
        )

    # raw requests

    def _raw_exchange(self, request: requests.Request, unsafe_options: UnsafeOptions) -> _Exchange:
        parts = urlsplit(request.url)
        scheme = parts.scheme.lower()
        host = parts.hostname or ""
        port = parts.port or (443 if scheme == "https" else 80)
        path = unsafe_options.uri_path
        if not path:
            path = parts.path or "/"
            if parts.query:
                path += "?" + parts.query

        body = request.data or b""
        if isinstance(body, str):
            body = body.encode("utf-8")
        elif not isinstance(body, bytes):
            raise TypeError("raw requests take a str or bytes body")

        headers = dict(request.headers)
        lines = [f"{request.method} {path} HTTP/1.1"]
        if _get_header(headers, "Host") is None:
            lines.append(f"Host: {parts.netloc}")
        if _get_header(headers, "Connection") is None:
            headers["Connection"] = "close"
        if body and _get_header(headers, "Content-Length") is None:
            headers["Content-Length"] = str(len(body))
        lines.extend(f"{name}: {value}" for name, value in headers.items())
        payload = ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1") + body

        timeout = self.options.timeout or None
        chunks: list[bytes] = []
        with socket.create_connection((host, port), timeout=timeout) as sock:
            conn = sock
            if scheme == "https":
                conn = self._tls_context().wrap_socket(sock, server_hostname=self.options.sni_name or host)
            try:
                conn.sendall(payload)
                try:
                    while chunk := conn.recv(_CHUNK):
                        chunks.append(chunk)
                except (socket.timeout, ConnectionResetError):
                    if not chunks:
                        raise
            finally:
                if conn is not sock:
                    conn.close()
        return self._parse_raw(b"".join(chunks), request.method, request.url)

    def _parse_raw(self, data: bytes, method: str, url: str) -> _Exchange:
        match = _HEAD_END_RE.search(data)
        head, body = (data[:match.start()], data[match.end():]) if match else (data, b"")
        head_lines = head.decode("latin-1").splitlines()
        if not head_lines or not head_lines[0].startswith("HTTP/"):
            raise ValueError("malformed HTTP response")
        status_parts = head_lines[0].split(" ", 2)
        try:
            status = int(status_parts[1])
        except (IndexError, ValueError) as exc:
            raise ValueError(f"malformed status line: {head_lines[0]!r}") from exc
        proto = status_parts[0]
        reason = status_parts[2] if len(status_parts) > 2 else ""

        headers: dict[str, list[str]] = {}
        for line in head_lines[1:]:
            name, sep, value = line.partition(":")
            if sep:
                headers.setdefault(_canonical_key(name.strip()), []).append(value.strip())

        if method.upper() == "HEAD" or status in _NO_BODY_CODES or 100 <= status < 200 or status == 204:
            body = b""
        elif "chunked" in ",".join(headers.get("Transfer-Encoding", [])).lower():
            body = _dechunk(body)
        elif headers.get("Content-Length", [""])[0].isdigit():
            body = body[:int(headers["Content-Length"][0])]
        encoding = ",".join(headers.get("Content-Encoding", [])).strip().lower()
        body = _decompress(body, encoding)
        limit = self.options.max_response_body_size_to_read
        body = body[:max(limit, 0)]
        return _Exchange(status, proto, reason, headers, body, url)

    # TLS

    @staticmethod
    def _tls_context() -> ssl.SSLContext:
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        return context

    def _tls_grab(self, url: str) -> TLSData | None:
        parts = urlsplit(url)
        if parts.scheme.lower() != "https" or not parts.hostname:
            return None
        port = parts.port or 443
        server_name = self.options.sni_name or parts.hostname
        try:
            with socket.create_connection((parts.hostname, port), timeout=self.options.timeout or None) as sock:
                with self._tls_context().wrap_socket(sock, server_hostname=server_name) as tls:
                    der = tls.getpeercert(binary_form=True)
                    version = tls.version() or ""
                    cipher = (tls.cipher() or ("",))[0]
        except (OSError, ValueError):
            return None
        if not der:
            return None
        return TLSData(
            host=parts.hostname,
            port=str(port),
            version=_TLS_VERSIONS.get(version, version.lower()),
            cipher=cipher,
            server_name=server_name,
            fingerprint_hash={
                "md5": hashlib.md5(der).hexdigest(),
                "sha1": hashlib.sha1(der).hexdigest(),
                "sha256": hashlib.sha256(der).hexdigest(),
            },
        )


def _normalize(text: str) -> str:
    return normalize_spaces(text)