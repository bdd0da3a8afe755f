"""Response filters: a response passes when any rule of a filter matches."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol

from webprobe.response import Response

CustomCallback = Callable[[Response], bool]


class Filter(Protocol):
    def filter(self, response: Response) -> bool: ...


@dataclass
class FilterString:
    """Matches when the raw response contains any keyword, ignoring case."""

    keywords: list[str] = field(default_factory=list)

    def filter(self, response: Response) -> bool:
        haystack = response.raw.lower()
        return any(keyword.lower() in haystack for keyword in self.keywords)


@dataclass
class FilterRegex:
    """Matches when any pattern is found in the raw response."""

    regexes: list[str] = field(default_factory=list)

    def filter(self, response: Response) -> bool:
        """Raise re.error when a pattern does not compile."""
        return any(re.search(pattern, response.raw) for pattern in self.regexes)


@dataclass
class FilterCustom:
    """Matches when any callback accepts the response; failing callbacks are skipped."""

    callbacks: list[CustomCallback] = field(default_factory=list)

    def filter(self, response: Response) -> bool:
        return any(_accepts(callback, response) for callback in self.callbacks)


def _accepts(callback: CustomCallback, response: Response) -> bool:
    try:
        return bool(callback(response))
    except Exception:  # a failing callback counts as no match
        return False


def apply_filters(filters: Iterable[Filter], response: Response) -> bool:
    """Return True as soon as one filter matches."""
    return any(f.filter(response) for f in filters)