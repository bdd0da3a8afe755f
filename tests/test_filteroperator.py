from datetime import timedelta

import pytest

from webprobe.filteroperator import COMPARE_OPERATORS, FilterOperator


@pytest.mark.parametrize(
    "value, operator, duration",
    [
        (">=3", ">=", timedelta(seconds=3)),
        ("<10s", "<", timedelta(seconds=10)),
        ("= 500ms", "=", timedelta(milliseconds=500)),
        ("!=2m", "!=", timedelta(minutes=2)),
        ("<=1h30m", "<=", timedelta(hours=1, minutes=30)),
        (">1.5", ">", timedelta(seconds=1.5)),
        (" > 3ms ", ">", timedelta(milliseconds=3)),
    ],
)
def test_parse_operator_and_duration(value, operator, duration):
    assert FilterOperator("-mrt").parse(value) == (operator, duration)


def test_missing_operator_raises():
    with pytest.raises(ValueError) as excinfo:
        FilterOperator("-mrt").parse("10s")
    assert "invalid operator provided for -mrt" in str(excinfo.value)
    assert ",".join(COMPARE_OPERATORS) in str(excinfo.value)


@pytest.mark.parametrize("value", [">abc", "<10x", ">="])
def test_invalid_value_raises(value):
    with pytest.raises(ValueError, match="invalid value provided for -frt"):
        FilterOperator("-frt").parse(value)


def test_zero_duration():
    assert FilterOperator("-mrt").parse(">0") == (">", timedelta(0))