"""Exception types raised by the swarm core."""


class PSOError(Exception):
    """Base class for all swarm errors."""


class InvalidArgument(PSOError, ValueError):
    """A required argument is missing, empty, or inconsistent with another."""


class TypeMismatch(PSOError, TypeError):
    """Operands use different vector or fitness representations."""


class DimensionMismatch(PSOError, ValueError):
    """Vectors of different lengths were combined or tested against bounds."""


class ChannelClosed(PSOError):
    """Send attempted on a closed channel."""


class ChannelTimeout(PSOError, TimeoutError):
    """A send or receive did not complete before its timeout elapsed."""
