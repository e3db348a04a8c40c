"""Built-in float64 vector representation."""

from .array import (
    Float64Array,
    Float64Value,
    Float64Range,
    Float64TargetFunc,
    make_param,
)

__all__ = [
    "Float64Array",
    "Float64Value",
    "Float64Range",
    "Float64TargetFunc",
    "make_param",
]
