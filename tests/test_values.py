from __future__ import annotations

import pytest
from pydantic import ValidationError

from liveconf.exceptions import KeyTypeMismatchError
from liveconf.models.values import (
    BoolValue,
    ConfigKey,
    DoubleArrayValue,
    DoubleValue,
    IntValue,
    StringValue,
    ValueType,
    typed_value,
)


@pytest.mark.parametrize(
    ("key", "value_type", "name"),
    [
        ("Int:brightness", ValueType.INT, "brightness"),
        ("Double:width", ValueType.DOUBLE, "width"),
        ("Bool:enabled", ValueType.BOOL, "enabled"),
        ("String:title", ValueType.STRING, "title"),
        ("[Double]:pts", ValueType.DOUBLE_ARRAY, "pts"),
        ("Int:a:b", ValueType.INT, "a:b"),
    ],
)
def test_parse_recognized_tags(key: str, value_type: ValueType, name: str) -> None:
    parsed = ConfigKey.parse(key)
    assert parsed.value_type is value_type
    assert parsed.name == name
    assert parsed.key == key


def test_parse_unrecognized_tag_keeps_name() -> None:
    parsed = ConfigKey.parse("Color:background")
    assert parsed.value_type is None
    assert parsed.tag == "Color"
    assert parsed.name == "background"

    bare = ConfigKey.parse("untagged")
    assert bare.value_type is None
    assert bare.tag == ""
    assert bare.name == "untagged"


def test_empty_name_is_not_a_recognized_key() -> None:
    assert ConfigKey.parse("Int:").value_type is None


def test_build_round_trips_through_parse() -> None:
    key = ConfigKey.build(ValueType.DOUBLE_ARRAY, "pts")
    assert key == "[Double]:pts"
    assert ConfigKey.parse(key).value_type is ValueType.DOUBLE_ARRAY


def test_typed_value_builds_each_variant() -> None:
    assert typed_value(ValueType.INT, 90) == IntValue(value=90)
    assert typed_value(ValueType.DOUBLE, 15.5) == DoubleValue(value=15.5)
    assert typed_value(ValueType.BOOL, False) == BoolValue(value=False)
    assert typed_value(ValueType.STRING, "hi") == StringValue(value="hi")
    assert typed_value(ValueType.DOUBLE_ARRAY, [1, 2.5]) == DoubleArrayValue(value=(1.0, 2.5))


def test_double_accepts_json_integers() -> None:
    value = typed_value(ValueType.DOUBLE, 15)
    assert isinstance(value, DoubleValue)
    assert value.value == 15.0
    assert isinstance(value.value, float)


@pytest.mark.parametrize(
    ("value_type", "raw", "actual"),
    [
        (ValueType.INT, "5", "string"),
        (ValueType.INT, True, "boolean"),
        (ValueType.INT, 1.5, "number"),
        (ValueType.DOUBLE, True, "boolean"),
        (ValueType.DOUBLE, None, "null"),
        (ValueType.BOOL, 1, "integer"),
        (ValueType.STRING, 3, "integer"),
        (ValueType.DOUBLE_ARRAY, 1.0, "number"),
        (ValueType.DOUBLE_ARRAY, {"a": 1}, "object"),
    ],
)
def test_type_mismatch_raises(value_type: ValueType, raw: object, actual: str) -> None:
    with pytest.raises(KeyTypeMismatchError) as exc_info:
        typed_value(value_type, raw, key=f"{value_type.value}:x")
    assert exc_info.value.actual == actual
    assert exc_info.value.key == f"{value_type.value}:x"


@pytest.mark.parametrize("raw", [10**400, float("nan"), float("inf"), float("-inf")])
def test_double_must_be_a_finite_float(raw: object) -> None:
    with pytest.raises(KeyTypeMismatchError):
        typed_value(ValueType.DOUBLE, raw, key="Double:x")
    with pytest.raises(KeyTypeMismatchError):
        typed_value(ValueType.DOUBLE_ARRAY, [0.5, raw], key="[Double]:x")


def test_array_with_non_numeric_item_is_rejected() -> None:
    with pytest.raises(KeyTypeMismatchError):
        typed_value(ValueType.DOUBLE_ARRAY, [1.0, "2"])
    with pytest.raises(KeyTypeMismatchError):
        typed_value(ValueType.DOUBLE_ARRAY, [1.0, True])


def test_equality_is_per_variant() -> None:
    assert DoubleArrayValue(value=(1.0, 2.0)) == DoubleArrayValue(value=(1.0, 2.0))
    assert DoubleArrayValue(value=(1.0, 2.0)) != DoubleArrayValue(value=(1.0, 2.1))
    assert IntValue(value=1) != DoubleValue(value=1.0)
    assert IntValue(value=1) != BoolValue(value=True)


def test_values_are_immutable() -> None:
    value = IntValue(value=1)
    with pytest.raises(ValidationError):
        value.value = 2  # type: ignore[misc]
