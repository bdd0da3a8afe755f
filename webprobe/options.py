"""Client configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from webprobe.response import Proto

DEFAULT_USER_AGENT = "webprobe - open-source HTTP prober"

_COOKIE_NAME_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_COOKIE_VALUE_RE = re.compile(r'[\x20\x21\x23-\x2b\x2d-\x3a\x3c-\x5b\x5d-\x7e]*')


def _parse_cookie_header(value: str) -> list[tuple[str, str]]:
    """Split a Cookie header into (name, value) pairs, skipping malformed ones."""
    cookies = []
    for part in value.strip().split(";"):
        part = part.strip()
        if not part:
            continue
        name, _, raw_value = part.partition("=")
        if not _COOKIE_NAME_RE.fullmatch(name):
            continue
        if len(raw_value) > 1 and raw_value[0] == raw_value[-1] == '"':
            raw_value = raw_value[1:-1]
        if not _COOKIE_VALUE_RE.fullmatch(raw_value):
            continue
        cookies.append((name, raw_value))
    return cookies


@dataclass
class Options:
    """Settings of an HTTP client; the defaults are the recommended ones."""

    random_agent: bool = True
    default_user_agent: str = DEFAULT_USER_AGENT
    proxy: str = ""
    http_proxy: str = ""  # deprecated: use proxy
    socks_proxy: str = ""  # deprecated: use proxy
    threads: int = 25
    cdn_check: str = "true"
    exclude_cdn: bool = False
    extract_fqdn: bool = False
    timeout: float = 30.0
    retry_max: int = 5
    custom_headers: dict[str, str] = field(default_factory=dict)
    vhost_similarity_ratio: int = 85
    follow_redirects: bool = False
    follow_host_redirects: bool = False
    respect_hsts: bool = False
    max_redirects: int = 10
    unsafe: bool = False
    tls_grab: bool = False
    ztls: bool = False
    vhost_ignore_status_code: bool = False
    vhost_ignore_content_length: bool = True
    vhost_ignore_number_of_words: bool = False
    vhost_ignore_number_of_lines: bool = False
    vhost_strip_html: bool = False
    max_response_body_size_to_save: int = 0
    max_response_body_size_to_read: int = 10 * 1024 * 1024
    unsafe_uri: str = ""
    resolvers: list[str] = field(default_factory=list)
    sni_name: str = ""
    tls_impersonate: bool = False
    protocol: Proto = Proto.UNKNOWN
    trace: bool = False
    _custom_cookies: list[tuple[str, str]] = field(default_factory=list, init=False, repr=False)

    def _parse_custom_cookies(self) -> None:
        for name, value in self.custom_headers.items():
            if name.lower() == "cookie":
                self._custom_cookies = _parse_cookie_header(value)

    def _has_custom_cookies(self) -> bool:
        return bool(self._custom_cookies)


def default_options() -> Options:
    """Return a fresh set of default options."""
    return Options()