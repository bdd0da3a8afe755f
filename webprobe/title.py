"""Page title extraction and HTML stripping."""

from __future__ import annotations

import html
import re
from html.parser import HTMLParser

from webprobe.response import Response

_CUTSET = "\n\t\v\f\r"
_TITLE_RE = re.compile(r"<\s*title.*>(.*?)<\s*/\s*title>", re.IGNORECASE | re.MULTILINE)
_TITLE_END_RE = re.compile(r"</title[\s/>]", re.IGNORECASE)
_SUPPORTED_TITLE_MIME_TYPES = frozenset(
    {
        "text/html",
        "application/xhtml+xml",
        "application/xml",
        "application/rss+xml",
        "application/atom+xml",
        "application/vnd.wap.xhtml+xml",
    }
)
_HIDDEN_ELEMENTS = frozenset({"script", "style"})


class _TitleFound(Exception):
    def __init__(self, line: int, column: int, tag_text: str) -> None:
        super().__init__()
        self.line = line
        self.column = column
        self.tag_text = tag_text


class _TitleLocator(HTMLParser):
    def handle_starttag(self, tag: str, attrs: list) -> None:
        if tag == "title":
            line, column = self.getpos()
            raise _TitleFound(line, column, self.get_starttag_text() or "")


def _title_from_dom(document: str) -> str | None:
    locator = _TitleLocator(convert_charrefs=True)
    try:
        locator.feed(document)
        locator.close()
    except _TitleFound as found:
        line_start = 0
        for _ in range(found.line - 1):
            line_start = document.index("\n", line_start) + 1
        start = line_start + found.column + len(found.tag_text)
        end_match = _TITLE_END_RE.search(document, start)
        end = end_match.start() if end_match else len(document)
        return html.unescape(document[start:end])
    return None


def _trim_title_tags(title: str) -> str:
    begin = title.find(">")
    end = title.find("</")
    if begin < 0 or end < 0:
        return title
    return title[begin + 1:end]


def extract_title(response: Response) -> str:
    """Return the cleaned page title of a response, or ''."""
    title = _title_from_dom(response.data.decode("utf-8", "replace"))
    if title is None:
        match = _TITLE_RE.search(response.raw)
        title = html.unescape(_trim_title_tags(match.group(0) if match else ""))
    title = title.strip(_CUTSET).strip()
    return re.sub(r"[\n\t\v\f\r]", "", title)


def can_have_title_tag(mime_type: str) -> bool:
    return mime_type in _SUPPORTED_TITLE_MIME_TYPES


def _escape(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("'", "&#39;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&#34;")
    )


class _TextCollector(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.pieces: list[str] = []
        self._hidden_depth = 0

    def handle_starttag(self, tag: str, attrs: list) -> None:
        if tag in _HIDDEN_ELEMENTS:
            self._hidden_depth += 1

    def handle_endtag(self, tag: str) -> None:
        if tag in _HIDDEN_ELEMENTS and self._hidden_depth:
            self._hidden_depth -= 1

    def handle_data(self, data: str) -> None:
        if not self._hidden_depth:
            self.pieces.append(_escape(data))


def strip_html(text: str) -> str:
    """Remove every tag, and script and style content, keeping escaped text."""
    collector = _TextCollector()
    collector.feed(text)
    collector.close()
    return "".join(collector.pieces)