"""Data models for configuration values."""

from liveconf.models.values import (
    BoolValue,
    ConfigKey,
    DoubleArrayValue,
    DoubleValue,
    IntValue,
    StringValue,
    TypedValue,
    ValueType,
    typed_value,
)

__all__ = [
    "BoolValue",
    "ConfigKey",
    "DoubleArrayValue",
    "DoubleValue",
    "IntValue",
    "StringValue",
    "TypedValue",
    "ValueType",
    "typed_value",
]
