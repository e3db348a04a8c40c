"""Core swarm components."""

from .errors import (
    PSOError,
    InvalidArgument,
    TypeMismatch,
    DimensionMismatch,
    ChannelClosed,
    ChannelTimeout,
)
from .values import Values, EvalValue, Range, TargetFunc
from .param import Param
from .channel import Channel
from .event_bus import EventBus, EventType, Event, get_event_bus, reset_event_bus
from .particle import Particle, ParticleState
from .solver import Solver

__all__ = [
    "PSOError",
    "InvalidArgument",
    "TypeMismatch",
    "DimensionMismatch",
    "ChannelClosed",
    "ChannelTimeout",
    "Values",
    "EvalValue",
    "Range",
    "TargetFunc",
    "Param",
    "Channel",
    "EventBus",
    "EventType",
    "Event",
    "get_event_bus",
    "reset_event_bus",
    "Particle",
    "ParticleState",
    "Solver",
]
