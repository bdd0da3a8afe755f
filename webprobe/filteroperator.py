"""Comparison filters over durations, such as '>=3s' or '<500ms'."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from fractions import Fraction

COMPARE_OPERATORS = (">=", "<=", "=", "<", ">", "!=")

_NUMBER_RE = re.compile(r"([0-9]*)(?:\.([0-9]*))?")
_UNIT_RE = re.compile(r"[^0-9.]*")
_UNIT_NANOS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}


class _MissingUnit(ValueError):
    pass


def _parse_duration(text: str) -> timedelta:
    """Parse durations such as '1h30m', '1.5s' or '300ms'."""
    s = text
    negative = False
    if s[:1] in ("+", "-"):
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise ValueError(f"invalid duration {text!r}")
    total = Fraction(0)
    while s:
        number = _NUMBER_RE.match(s)
        whole, fraction = number.group(1), number.group(2) or ""
        if not whole and not fraction:
            raise ValueError(f"invalid duration {text!r}")
        s = s[number.end():]
        unit = _UNIT_RE.match(s).group()
        s = s[len(unit):]
        if not unit:
            raise _MissingUnit(f"missing unit in duration {text!r}")
        if unit not in _UNIT_NANOS:
            raise ValueError(f"unknown unit {unit!r} in duration {text!r}")
        value = Fraction(int(whole or "0"))
        if fraction:
            value += Fraction(int(fraction), 10 ** len(fraction))
        total += value * _UNIT_NANOS[unit]
    nanos = int(total)
    return timedelta(microseconds=(-nanos if negative else nanos) / 1000)


def _split_after(value: str, op: str) -> tuple[str, str]:
    index = value.find(op) + len(op)
    rest = value[index:]
    following = rest.find(op)
    if following >= 0:
        rest = rest[:following + len(op)]
    return value[:index], rest


@dataclass
class FilterOperator:
    """Parser for a comparison flag such as -mrt or -frt."""

    flag: str = ""

    def parse(self, flag_value: str) -> tuple[str, timedelta]:
        """Split a value into operator and duration; bare numbers are seconds."""
        for op in COMPARE_OPERATORS:
            if op not in flag_value:
                continue
            head, tail = _split_after(flag_value, op)
            operator = head.strip(" ")
            time_value = tail.strip(" ")
            try:
                duration = _parse_duration(time_value)
            except _MissingUnit:
                try:
                    duration = _parse_duration(time_value + "s")
                except ValueError:
                    duration = timedelta(0)
            except ValueError as exc:
                raise ValueError(f"invalid value provided for {self.flag}") from exc
            if operator:
                return operator, duration
            break
        raise ValueError(
            f"invalid operator provided for {self.flag}, "
            f"valid operators are {','.join(COMPARE_OPERATORS)}"
        )