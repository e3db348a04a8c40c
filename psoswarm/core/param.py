"""PSO coefficients."""

from dataclasses import dataclass

from .errors import InvalidArgument
from .values import Values


@dataclass(frozen=True)
class Param:
    """
    Immutable PSO coefficients, one value per dimension.

    Attributes:
        w: Inertia weight
        c1: Cognitive coefficient (pull toward the personal best)
        c2: Social coefficient (pull toward the global best)
    """

    w: Values
    c1: Values
    c2: Values

    def __post_init__(self) -> None:
        for name in ("w", "c1", "c2"):
            if getattr(self, name) is None:
                raise InvalidArgument(f"{name} cannot be None")

        if not (type(self.w) is type(self.c1) is type(self.c2)):
            raise InvalidArgument("w, c1 and c2 must share one vector type")

        if not (len(self.w) == len(self.c1) == len(self.c2)):
            raise InvalidArgument("w, c1 and c2 must share one dimension")

    @property
    def dimension(self) -> int:
        """Number of dimensions the coefficients cover."""
        return len(self.w)
