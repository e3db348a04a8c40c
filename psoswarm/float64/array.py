"""Float64 implementations of the vector, fitness, bounds and objective contracts."""

from typing import Callable, Iterator, Optional, Sequence, Type, Union
import math

import numpy as np

from ..core.errors import DimensionMismatch, InvalidArgument, TypeMismatch
from ..core.param import Param
from ..core.values import EvalValue, Range, TargetFunc, Values, check_same_type


class Float64Array(Values):
    """Vector of float64 values backed by a one-dimensional numpy array."""

    def __init__(self, values: Union[Sequence[float], np.ndarray]) -> None:
        data = np.array(values, dtype=np.float64)
        if data.ndim != 1:
            raise InvalidArgument(f"Float64Array needs a flat sequence, got shape {data.shape}")
        self._data = data

    @classmethod
    def full(cls, dimension: int, value: float) -> "Float64Array":
        """Vector of ``dimension`` copies of ``value``."""
        return cls(np.full(dimension, value, dtype=np.float64))

    @classmethod
    def zeros(cls, dimension: int) -> "Float64Array":
        return cls.full(dimension, 0.0)

    def _operand(self, other: "Float64Array", operation: str) -> np.ndarray:
        check_same_type(self, other, operation)
        if len(other) != len(self):
            raise DimensionMismatch(
                f"Cannot {operation} vectors of length {len(self)} and {len(other)}"
            )
        return other._data

    def add(self, other: "Float64Array") -> "Float64Array":
        self._data += self._operand(other, "add")
        return self

    def sub(self, other: "Float64Array") -> "Float64Array":
        self._data -= self._operand(other, "subtract")
        return self

    def mul(self, other: "Float64Array") -> "Float64Array":
        self._data *= self._operand(other, "multiply")
        return self

    def div(self, other: "Float64Array") -> "Float64Array":
        self._data /= self._operand(other, "divide")
        return self

    def clone(self) -> "Float64Array":
        return Float64Array(self._data.copy())

    def random(self, rng: Optional[np.random.Generator] = None) -> "Float64Array":
        if rng is None:
            rng = np.random.default_rng()
        return Float64Array(rng.random(len(self)))

    def to_numpy(self) -> np.ndarray:
        """Copy of the underlying data."""
        return self._data.copy()

    def tolist(self) -> list[float]:
        return self._data.tolist()

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __iter__(self) -> Iterator[float]:
        return iter(self._data.tolist())

    def __repr__(self) -> str:
        return f"Float64Array({self._data.tolist()})"


class Float64Value(EvalValue):
    """Scalar fitness value. Lower is better."""

    def __init__(self, value: float) -> None:
        self.value = float(value)

    def compare_to(self, other: "Float64Value") -> int:
        check_same_type(self, other, "compare")
        if self.value > other.value:
            return 1
        if self.value < other.value:
            return -1
        return 0

    def __float__(self) -> float:
        return self.value

    def __repr__(self) -> str:
        return f"Float64Value({self.value})"


class Float64Range(Range[Float64Array]):
    """Per-dimension inclusive [minimum, maximum] bounds."""

    def __init__(self, minimum: Float64Array, maximum: Float64Array) -> None:
        if minimum is None:
            raise InvalidArgument("minimum cannot be None")
        if maximum is None:
            raise InvalidArgument("maximum cannot be None")
        if type(minimum) is not Float64Array or type(maximum) is not Float64Array:
            raise InvalidArgument("minimum and maximum must be Float64Array")
        if len(minimum) != len(maximum):
            raise InvalidArgument(
                f"minimum and maximum lengths differ ({len(minimum)} != {len(maximum)})"
            )

        self._min = minimum.clone()
        self._max = maximum.clone()

    @classmethod
    def with_inf(cls, length: int) -> "Float64Range":
        """Unbounded range of the given dimension."""
        return cls(Float64Array.full(length, -math.inf), Float64Array.full(length, math.inf))

    @property
    def minimum(self) -> Float64Array:
        return self._min.clone()

    @property
    def maximum(self) -> Float64Array:
        return self._max.clone()

    @property
    def dimension(self) -> int:
        return len(self._min)

    @property
    def type(self) -> Type[Float64Array]:
        return Float64Array

    def contains(self, values: Float64Array) -> bool:
        if type(values) is not Float64Array:
            raise TypeMismatch(f"Float64Range cannot test {type(values).__name__}")
        if len(values) != len(self._min):
            raise DimensionMismatch(
                f"Expected {len(self._min)} values, got {len(values)}"
            )

        data = values._data
        return bool(np.all((data >= self._min._data) & (data <= self._max._data)))

    def __repr__(self) -> str:
        return f"Float64Range(min={self._min.tolist()}, max={self._max.tolist()})"


ObjectiveFn = Callable[[Float64Array], Union[float, Float64Value]]


class Float64TargetFunc(TargetFunc[Float64Array, Float64Value]):
    """Adapts a plain Python callable to the objective contract."""

    def __init__(self, fn: ObjectiveFn) -> None:
        if fn is None:
            raise InvalidArgument("objective function cannot be None")
        self._fn = fn

    @property
    def type(self) -> Type[Float64Array]:
        return Float64Array

    def evaluate(self, values: Optional[Float64Array]) -> Float64Value:
        # No solution yet ranks below every real one
        if values is None:
            return Float64Value(math.inf)

        if type(values) is not Float64Array:
            raise TypeMismatch(f"Objective expects Float64Array, got {type(values).__name__}")

        result = self._fn(values)
        if isinstance(result, Float64Value):
            return result
        return Float64Value(result)


Coefficient = Union[float, Sequence[float]]


def _coefficient(value: Coefficient, dimension: int, name: str) -> Float64Array:
    if value is None:
        raise InvalidArgument(f"{name} cannot be None")
    if isinstance(value, (int, float)):
        return Float64Array.full(dimension, value)

    vector = Float64Array(value)
    if len(vector) != dimension:
        raise InvalidArgument(f"{name} has {len(vector)} values, expected {dimension}")
    return vector


def make_param(w: Coefficient, c1: Coefficient, c2: Coefficient, dimension: int) -> Param:
    """
    Build a Param of Float64Array coefficients.

    Args:
        w: Inertia weight, scalar or per-dimension sequence
        c1: Cognitive coefficient, scalar or per-dimension sequence
        c2: Social coefficient, scalar or per-dimension sequence
        dimension: Search space dimension

    Returns:
        Param with one coefficient per dimension
    """
    if dimension <= 0:
        raise InvalidArgument("dimension must be positive")

    return Param(
        w=_coefficient(w, dimension, "w"),
        c1=_coefficient(c1, dimension, "c1"),
        c2=_coefficient(c2, dimension, "c2"),
    )
