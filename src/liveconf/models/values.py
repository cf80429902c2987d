"""Typed configuration values and key parsing.

Configuration keys carry their type as a prefix, e.g.::

    { "Int:brightness": 90, "Double:width": 15.5, "Bool:enabled": false }

The prefix is the only source of truth for the variant a value must hold.
:func:`typed_value` builds the matching variant from a decoded JSON value
and raises :class:`~liveconf.exceptions.KeyTypeMismatchError` when the JSON
type does not fit the tag.
"""

from __future__ import annotations

import math
import re
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, StrictBool, StrictFloat, StrictInt, StrictStr

from liveconf.exceptions import KeyTypeMismatchError


class ValueType(StrEnum):
    INT = "Int"
    DOUBLE = "Double"
    BOOL = "Bool"
    STRING = "String"
    DOUBLE_ARRAY = "[Double]"


_KEY_RE = re.compile(r"^(Int|Double|Bool|String|\[Double\]):(.+)$", re.DOTALL)


class _TypedValueBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    value_type: ClassVar[ValueType]


class IntValue(_TypedValueBase):
    value_type: ClassVar[ValueType] = ValueType.INT
    value: StrictInt


class DoubleValue(_TypedValueBase):
    value_type: ClassVar[ValueType] = ValueType.DOUBLE
    value: StrictFloat


class BoolValue(_TypedValueBase):
    value_type: ClassVar[ValueType] = ValueType.BOOL
    value: StrictBool


class StringValue(_TypedValueBase):
    value_type: ClassVar[ValueType] = ValueType.STRING
    value: StrictStr


class DoubleArrayValue(_TypedValueBase):
    """Element-wise compared sequence of floats."""

    value_type: ClassVar[ValueType] = ValueType.DOUBLE_ARRAY
    value: tuple[StrictFloat, ...]


TypedValue = IntValue | DoubleValue | BoolValue | StringValue | DoubleArrayValue


class ConfigKey(BaseModel):
    """A parsed ``<tag>:<name>`` configuration key.

    ``value_type`` is ``None`` when the tag is not one of the recognized
    prefixes.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    tag: str
    name: str
    value_type: ValueType | None = None

    @classmethod
    def parse(cls, key: str) -> ConfigKey:
        match = _KEY_RE.match(key)
        if match is not None:
            tag, name = match.group(1), match.group(2)
            return cls(key=key, tag=tag, name=name, value_type=ValueType(tag))
        tag, sep, name = key.partition(":")
        if not sep:
            return cls(key=key, tag="", name=key)
        return cls(key=key, tag=tag, name=name)

    @staticmethod
    def build(value_type: ValueType, name: str) -> str:
        """Return the wire key for *name*, e.g. ``Int:brightness``."""
        return f"{value_type.value}:{name}"


def json_type_name(raw: Any) -> str:
    """Describe the JSON type of a decoded value for error messages."""
    if raw is None:
        return "null"
    if isinstance(raw, bool):
        return "boolean"
    if isinstance(raw, int):
        return "integer"
    if isinstance(raw, float):
        return "number"
    if isinstance(raw, str):
        return "string"
    if isinstance(raw, list):
        return "array"
    if isinstance(raw, dict):
        return "object"
    return type(raw).__name__


def _is_number(raw: Any) -> bool:
    # bool is an int subclass but never a JSON number.
    return isinstance(raw, (int, float)) and not isinstance(raw, bool)


def _finite_float(raw: Any, *, key: str) -> float:
    """Convert a JSON number to a finite float.

    ``NaN`` never compares equal to itself and integers beyond the float
    range do not convert at all; both are rejected for the key.
    """
    try:
        number = float(raw)
    except OverflowError:
        raise KeyTypeMismatchError(key, expected="number", actual="integer out of float range") from None
    if not math.isfinite(number):
        raise KeyTypeMismatchError(key, expected="finite number", actual=repr(number))
    return number


def typed_value(value_type: ValueType, raw: Any, *, key: str = "") -> TypedValue:
    """Build the variant for *value_type* from a decoded JSON value.

    Raises
    ------
    KeyTypeMismatchError
        If the JSON type of *raw* does not match *value_type*, or a number
        is not representable as a finite float.
    """
    if value_type is ValueType.INT:
        if isinstance(raw, int) and not isinstance(raw, bool):
            return IntValue(value=raw)
    elif value_type is ValueType.DOUBLE:
        if _is_number(raw):
            return DoubleValue(value=_finite_float(raw, key=key))
    elif value_type is ValueType.BOOL:
        if isinstance(raw, bool):
            return BoolValue(value=raw)
    elif value_type is ValueType.STRING:
        if isinstance(raw, str):
            return StringValue(value=raw)
    elif value_type is ValueType.DOUBLE_ARRAY:
        if isinstance(raw, list) and all(_is_number(item) for item in raw):
            return DoubleArrayValue(value=tuple(_finite_float(item, key=key) for item in raw))
        if isinstance(raw, list):
            raise KeyTypeMismatchError(key, expected="array of numbers", actual="array with non-numeric items")

    expected = {
        ValueType.INT: "integer",
        ValueType.DOUBLE: "number",
        ValueType.BOOL: "boolean",
        ValueType.STRING: "string",
        ValueType.DOUBLE_ARRAY: "array of numbers",
    }[value_type]
    raise KeyTypeMismatchError(key, expected=expected, actual=json_type_name(raw))
