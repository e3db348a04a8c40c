"""Abstract contracts for vectors, fitness values, bounds and objectives."""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, Type, TypeVar

import numpy as np

from .errors import TypeMismatch

V = TypeVar("V", bound="Values")
E = TypeVar("E", bound="EvalValue")


def check_same_type(receiver: Any, other: Any, operation: str) -> None:
    """Raise TypeMismatch unless both operands share one concrete type."""
    if type(receiver) is not type(other):
        raise TypeMismatch(
            f"Cannot {operation} {type(other).__name__} "
            f"with {type(receiver).__name__}"
        )


class Values(ABC):
    """
    Fixed-dimension vector used for positions, velocities and coefficients.

    Arithmetic is element-wise and mutates the receiver, which is also
    returned so calls can be chained. Callers that still need an operand
    unchanged must clone it first.
    """

    @abstractmethod
    def add(self: V, other: V) -> V:
        """Add ``other`` element-wise into this vector."""

    @abstractmethod
    def sub(self: V, other: V) -> V:
        """Subtract ``other`` element-wise from this vector."""

    @abstractmethod
    def mul(self: V, other: V) -> V:
        """Multiply this vector element-wise by ``other``."""

    @abstractmethod
    def div(self: V, other: V) -> V:
        """Divide this vector element-wise by ``other``."""

    @abstractmethod
    def clone(self: V) -> V:
        """Return an independent copy holding the same element values."""

    @abstractmethod
    def random(self: V, rng: Optional[np.random.Generator] = None) -> V:
        """
        Return a new vector of the same dimension drawn from U[0, 1).

        Args:
            rng: Random source owned by the caller. A fresh generator is
                used when omitted.
        """

    @abstractmethod
    def __len__(self) -> int:
        pass


class EvalValue(ABC):
    """Fitness value produced by a target function. Lower is better."""

    @abstractmethod
    def compare_to(self: E, other: E) -> int:
        """Return -1 if better than ``other``, 0 if equal, 1 if worse."""


class Range(ABC, Generic[V]):
    """Admissible region of the search space."""

    @abstractmethod
    def contains(self, values: V) -> bool:
        """Whether every element of ``values`` lies within the bounds."""

    @property
    @abstractmethod
    def type(self) -> Type[V]:
        """Vector class these bounds accept."""

    def __contains__(self, values: V) -> bool:
        return self.contains(values)


class TargetFunc(ABC, Generic[V, E]):
    """Objective function to minimize."""

    @abstractmethod
    def evaluate(self, values: Optional[V]) -> E:
        """
        Evaluate ``values``.

        ``None`` stands for "no solution yet" and must not raise.
        """

    @property
    @abstractmethod
    def type(self) -> Type[V]:
        """Vector class this function accepts."""

    def __call__(self, values: Optional[V]) -> E:
        return self.evaluate(values)
