"""Domain discovery in response bodies and Content-Security-Policy rules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import NamedTuple
from urllib.parse import urlsplit

from webprobe.response import Response

_POTENTIAL_DOMAIN_RE = re.compile(r"(?:^|['\"/@])([a-z0-9]+[a-z0-9.-]*\.[a-z]{2,})(?:['\"/@]|\Z)")
_URL_INVALID_CHAR_RE = re.compile(r"[^\w\-./:~]", re.ASCII)
_CSP_SEPARATORS_RE = re.compile(r"[ ;,]")

CSP_HEADERS = (
    "Content-Security-Policy",
    "Content-Security-Policy-Report-Only",
    "X-Content-Security-Policy-Report-Only",
    "X-Webkit-Csp-Report-Only",
)

_DENYLIST = frozenset(
    """
    .3g2 .3gp .7z .apk .arj .avi .axd .bmp .csv .deb .dll .doc .drv .eot .exe .flv .gif .gifv .gz
    .h264 .ico .iso .jar .jpeg .jpg .lock .m4a .m4v .map .mkv .mov .mp3 .mp4 .mpeg .mpg .msi .ogg
    .ogm .ogv .otf .pdf .pkg .png .ppt .psd .rar .rm .rpm .svg .swf .sys .tar.gz .tar .tif .tiff
    .ttf .txt .vob .wav .webm .webp .wmv .woff .woff2 .xcf .xls .xlsx .zip .css .js .php .sheet
    .ms .wp .html .htm .md
    """.split()
)

_COUNTRY_TLDS = """
ac ad ae af ag ai al am ao aq ar as at au aw ax az ba bb be bf bg bh bi bj bm bn bo br bs bt bw
by bz ca cc cd cf cg ch ci cl cm cn co cr cu cv cw cx cy cz de dj dk dm do dz ec ee eg es et eu
fi fj fm fo fr ga gd ge gf gg gh gi gl gm gn gp gq gr gs gt gu gw gy hk hm hn hr ht hu id ie il
im in io iq ir is it je jo jp ke kg ki km kn kp kr kw ky kz la lb lc li lk lr ls lt lu lv ly ma
mc md me mg mh mk ml mn mo mp mq mr ms mt mu mv mw mx my mz na nc ne nf ng ni nl no nr nu nz om
pa pe pf ph pk pl pm pn pr ps pt pw py qa re ro rs ru rw sa sb sc sd se sg sh si sk sl sm sn so
sr ss st su sv sx sy sz tc td tf tg th tj tk tl tm tn to tr tt tv tw tz ua ug uk us uy uz va vc
ve vg vi vn vu wf ws ye yt za zm zw
"""

_GENERIC_TLDS = """
com net org edu gov mil int info biz name pro aero coop museum mobi asia tel travel jobs cat
post xxx app dev page blog cloud shop store online site tech xyz top club live news link media
agency digital network solutions company email design art wiki academy capital finance bank
insurance health software systems services support center group global world today space
website host team zone one run fun icu vip work life love money social studio works tools
ventures security codes ninja expert guru photos photography events community foundation
science review download
"""

_SECOND_LEVEL_SUFFIXES = """
co.uk org.uk ac.uk gov.uk me.uk ltd.uk plc.uk net.uk sch.uk nhs.uk
com.au net.au org.au edu.au gov.au asn.au id.au co.nz net.nz org.nz govt.nz ac.nz
co.jp ne.jp or.jp ac.jp go.jp ad.jp ed.jp gr.jp lg.jp
com.br net.br org.br gov.br edu.br com.cn net.cn org.cn gov.cn edu.cn ac.cn
com.hk net.hk org.hk gov.hk edu.hk com.tw net.tw org.tw gov.tw edu.tw idv.tw
com.sg net.sg org.sg gov.sg edu.sg com.my net.my org.my gov.my edu.my
co.in net.in org.in gov.in ac.in firm.in gen.in ind.in co.za org.za gov.za ac.za net.za
co.kr or.kr ne.kr go.kr ac.kr re.kr com.mx net.mx org.mx gob.mx edu.mx
com.ar net.ar org.ar gob.ar com.tr net.tr org.tr gov.tr edu.tr
co.il org.il net.il ac.il gov.il com.ua net.ua org.ua gov.ua com.pl net.pl org.pl
com.ru net.ru org.ru co.id or.id ac.id go.id web.id com.vn net.vn org.vn gov.vn edu.vn
com.ph net.ph org.ph gov.ph com.pk net.pk org.pk gov.pk com.eg com.sa
com.co net.co org.co gov.co co.th in.th ac.th go.th or.th
com.pe com.ve com.ec com.uy com.bo com.py
github.io githubusercontent.com herokuapp.com blogspot.com appspot.com cloudfront.net
azurewebsites.net netlify.app vercel.app pages.dev workers.dev firebaseapp.com web.app
s3.amazonaws.com
"""

_PUBLIC_SUFFIXES = frozenset((_COUNTRY_TLDS + _GENERIC_TLDS + _SECOND_LEVEL_SUFFIXES).split())


@dataclass
class BodyDomain:
    """Domains and fully qualified names found in a response body."""

    fqdns: list[str] = field(default_factory=list)
    domains: list[str] = field(default_factory=list)


@dataclass
class CSPData:
    """Domains and fully qualified names found in Content-Security-Policy rules."""

    fqdns: list[str] = field(default_factory=list)
    domains: list[str] = field(default_factory=list)


class _DomainName(NamedTuple):
    trd: str
    sld: str
    tld: str

    def __str__(self) -> str:
        return ".".join(part for part in (self.trd, self.sld, self.tld) if part)


def _find_suffix(domain: str) -> tuple[str, bool]:
    """Return the longest known public suffix of ``domain`` and whether one was known."""
    labels = domain.split(".")
    for start in range(len(labels)):
        candidate = ".".join(labels[start:])
        if candidate in _PUBLIC_SUFFIXES:
            return candidate, True
    return labels[-1], False


def _parse_domain(domain: str) -> _DomainName:
    domain = domain.lower()
    if not domain or "" in domain.split("."):
        raise ValueError(f"{domain!r} is not a valid domain")
    suffix, _ = _find_suffix(domain)
    if domain == suffix:
        raise ValueError(f"{domain!r} is a public suffix")
    rest = domain[: -len(suffix) - 1]
    trd, _, sld = rest.rpartition(".")
    return _DomainName(trd, sld, suffix)


def registered_domain(domain: str) -> str:
    """Return the registrable domain (e.g. example.co.uk); raise ValueError if there is none."""
    name = _parse_domain(domain)
    return f"{name.sld}.{name.tld}"


def _has_known_suffix(domain: str) -> bool:
    _, known = _find_suffix(domain)
    if not known:
        return False
    try:
        _parse_domain(domain)
    except ValueError:
        return False
    return True


def is_valid_domain(domain: str) -> bool:
    """Reject IP-like names, names with file-extension labels and mobile package names."""
    parts = domain.split(".")
    if len(parts) < 2:
        return False
    if any("." + part in _DENYLIST for part in parts):
        return False
    if all(ch.isdigit() for part in parts for ch in part):
        return False
    reversed_ids = ("com", "net", "io", "org")
    if domain.startswith(reversed_ids) and not domain.endswith(reversed_ids):
        return False
    return True


def body_domain_grab(response: Response) -> BodyDomain:
    """Collect the domains and subdomains mentioned in the raw response."""
    domains: set[str] = set()
    fqdns: set[str] = set()
    for match in _POTENTIAL_DOMAIN_RE.finditer(response.raw):
        name = match.group(1)
        if not is_valid_domain(name) or not _has_known_suffix(name):
            continue
        try:
            registered = registered_domain(name)
        except ValueError:
            continue
        if response.input != registered:
            domains.add(registered)
        if name != registered and name != response.input:
            fqdns.add(name)
    return BodyDomain(fqdns=sorted(fqdns), domains=sorted(domains))


def _remove_wildcards(domain: str) -> str:
    if domain.startswith(("'", '"')):
        domain = domain[1:]
    if domain.endswith(("'", '"')):
        domain = domain[:-1]
    if "://" in domain:
        domain = domain.split("://")[1]
    return ".".join(part for part in domain.split(".") if "*" not in part)


def _sanitize_url(url: str) -> str:
    return _URL_INVALID_CHAR_RE.sub(lambda m: "%{:02X}".format(m.group().encode("utf-8")[0]), url)


def _hostname(url: str) -> str:
    try:
        netloc = urlsplit(url).netloc
    except ValueError:
        return ""
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        host = host[1:host.find("]")] if "]" in host else ""
    elif ":" in host:
        host = host.rpartition(":")[0]
    return "" if "%" in host else host


def _extract_domain(token: str) -> str:
    value = _remove_wildcards(token)
    url = value if "://" in value else "https://" + value
    return _hostname(_sanitize_url(url))


def _is_potential_domain(token: str) -> bool:
    return "." in token or token.startswith("http")


def _parse_potential_domains(fqdns: set[str], domains: set[str], data: str) -> None:
    for token in filter(None, _CSP_SEPARATORS_RE.split(data)):
        if not _is_potential_domain(token):
            continue
        try:
            name = _parse_domain(_extract_domain(token))
        except ValueError:
            continue
        domains.add(f"{name.sld}.{name.tld}")
        if name.trd:
            fqdns.add(str(name))


class _MetaCollector(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.contents: list[str] = []

    def handle_starttag(self, tag: str, attrs: list) -> None:
        if tag != "meta":
            return
        values = dict(attrs)
        if "http-equiv" in values and values.get("content") is not None:
            self.contents.append(values["content"])

    handle_startendtag = handle_starttag


def csp_grab(response: Response) -> CSPData | None:
    """Collect domains from CSP headers and meta tags; None when there are none."""
    domains: set[str] = set()
    fqdns: set[str] = set()
    for header in CSP_HEADERS:
        for value in response.headers.get(header, ()):
            _parse_potential_domains(fqdns, domains, value)

    if response.data:
        collector = _MetaCollector()
        collector.feed(response.data.decode("utf-8", "replace"))
        collector.close()
        for content in collector.contents:
            _parse_potential_domains(fqdns, domains, content)

    if domains or fqdns:
        return CSPData(fqdns=sorted(fqdns), domains=sorted(domains))
    return None