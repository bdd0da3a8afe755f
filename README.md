# webprobe

A toolkit for probing HTTP services and making sense of what comes back.
It bundles an HTTP client with redirect, proxy, retry and header control,
response analysis (page titles, domains in bodies and CSP rules, charset
decoding, filters), parsing of port lists and raw requests, and a few
active probes (HTTP/2 support, HTTP/1.1 pipelining, virtual host detection).

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## What is in the package

| Module | Purpose |
| --- | --- |
| `webprobe.httputilz` | `parse_request` for raw HTTP requests (returns a `ParsedRequest`), `dump_request`, `normalize_spaces` |
| `webprobe.ports` | `CustomPorts`, parsing `http:80,https:443,8000-8010` style port lists into a port-to-scheme map |
| `webprobe.response` | `Response`, `ChainItem`, `Target`, `Proto` |
| `webprobe.filters` | `FilterString`, `FilterRegex`, `FilterCustom` and `apply_filters` |
| `webprobe.encodings` | GBK, Big5 and EUC-KR conversion and `decode_data` |
| `webprobe.title` | `extract_title`, `can_have_title_tag`, `strip_html` |
| `webprobe.domains` | `body_domain_grab`, `csp_grab`, `is_valid_domain`, `registered_domain` |
| `webprobe.options` | `Options` and `default_options()` |
| `webprobe.client` | the `HTTPX` client, `UnsafeOptions` and `TLSData` |
| `webprobe.probes` | `support_http2`, `support_pipeline`, `similarity`, `is_virtual_host` |
| `webprobe.filteroperator` | `FilterOperator` for values such as `">3ms"` or `"<=10"` |
| `webprobe.functional` | helpers that run a probing binary and compare the results of two builds |

## Examples

Making a request and reading the page title:

```python
from webprobe.client import HTTPX, UnsafeOptions
from webprobe.options import default_options
from webprobe.title import extract_title

with HTTPX(default_options()) as client:
    request = client.new_request("GET", "https://example.com")
    response = client.do(request, UnsafeOptions())
    print(response.status_code, response.content_length, extract_title(response))
```

`HTTPX.do` raises the `requests` network errors when a target cannot be
reached. With `Options(unsafe=True)` the request is written to the socket
as is, and `UnsafeOptions(uri_path=...)` sends an arbitrary request path.
Setting `follow_redirects` or `follow_host_redirects` records every hop in
`response.chain`.

Collecting domains referenced by a page:

```python
from webprobe.domains import body_domain_grab, csp_grab

found = body_domain_grab(response)
print(found.domains, found.fqdns)
print(csp_grab(response))  # None when no CSP header or meta tag names a domain
```

Parsing a raw request:

```python
from webprobe.httputilz import parse_request

raw = "GET /index HTTP/1.1\r\nHost: example.com\r\nAccept: */*\r\n\r\n"
request = parse_request(raw, False)
print(request.method, request.path, request.headers)
```

Parsing a port list:

```python
from webprobe.ports import CustomPorts

ports = CustomPorts()
ports.add("http:80,https:443,8000-8002")
print(ports.ports)
# {80: 'http', 443: 'https', 8000: 'http|https', 8001: 'http|https', 8002: 'http|https'}
```

Response-time comparisons; a bare number counts as seconds:

```python
from webprobe.filteroperator import FilterOperator

FilterOperator("-mrt").parse("<10")    # ('<', timedelta(seconds=10))
FilterOperator("-frt").parse(">3ms")   # ('>', timedelta(microseconds=3000))
```

Filtering responses:

```python
from webprobe.filters import FilterRegex, FilterString

client.add_filter(FilterString(keywords=["admin"]))
client.add_filter(FilterRegex(regexes=[r"version \d+"]))
matched = client.verify(client.new_request("GET", "https://example.com"))
```

## Functional comparison command

`webprobe-functional-test` reads a file of test cases, one per line in the
form `target <ignored> args...`, pipes each target into two builds of a
probing binary with the given arguments and reports whether they return
the same number of result lines. It exits with status 1 if any case fails.

```
webprobe-functional-test -main ./probe-main -dev ./probe-dev -testcases cases.txt
```

Set `DEBUG=true` in the environment to see the binaries' own output. The
command needs `bash` on the path.

## What the package does not do

- It has no command that probes a list of targets and prints results; the
  building blocks are here, the scanning front end is not. The helpers
  `run_and_get_results` and `run_and_get_combined_results` expect such a
  binary at `./webprobe`, which this package does not install.
- It computes no favicon or body hashes and does not fingerprint
  technologies, CDNs or TLS stacks beyond the certificate digests in
  `TLSData`.
- It takes no screenshots and serves no HTTP API for changing settings
  while running.