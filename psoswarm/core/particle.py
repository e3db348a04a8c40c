"""Particle worker: one candidate solution searching the space on its own thread."""

from enum import Enum, auto
from typing import Generic, Optional
import logging
import threading

import numpy as np

from .channel import Channel
from .errors import ChannelClosed, InvalidArgument
from .param import Param
from .values import EvalValue, Range, TargetFunc, V
from ..config.constants import INBOX_QUEUE_SIZE

logger = logging.getLogger(__name__)


class ParticleState(Enum):
    """Lifecycle of a particle worker."""
    IDLE = auto()                   # Not handed to a solver yet
    AWAITING_INITIAL_BEST = auto()  # Reported start position, waiting for first broadcast
    RUNNING = auto()
    STOPPED = auto()


class Particle(Generic[V]):
    """
    A particle in the swarm.

    Holds a position, a velocity and the best position it has visited. Once
    started it reports each improved personal best on the solver's report
    channel and reads global-best broadcasts from its own inbox. Only the
    solver writes to the inbox; everything else is mutated by the particle's
    own thread.
    """

    def __init__(
        self,
        position: V,
        velocity: V,
        bounds: Range[V],
        rng: Optional[np.random.Generator] = None,
        name: str = "",
    ) -> None:
        """
        Create a particle.

        Args:
            position: Start position
            velocity: Start velocity, same representation as position
            bounds: Admissible region for the position
            rng: Random source for the velocity update. A fresh generator is
                created when omitted.
            name: Label used in logs and thread names
        """
        if position is None:
            raise InvalidArgument("position cannot be None")
        if velocity is None:
            raise InvalidArgument("velocity cannot be None")
        if bounds is None:
            raise InvalidArgument("bounds cannot be None")
        if type(position) is not type(velocity):
            raise InvalidArgument("position and velocity must share one vector type")
        if len(position) != len(velocity):
            raise InvalidArgument(
                f"position has {len(position)} dimensions, velocity has {len(velocity)}"
            )
        if type(position) is not bounds.type:
            raise InvalidArgument(
                f"bounds accept {bounds.type.__name__}, position is {type(position).__name__}"
            )

        self.name = name
        self._position = position
        self._velocity = velocity
        self._bounds = bounds
        self._rng = rng if rng is not None else np.random.default_rng()

        self._eval_value: Optional[EvalValue] = None
        self._best: V = position.clone()
        self._global_best: Optional[V] = None

        self._inbox: Channel[V] = Channel(maxsize=INBOX_QUEUE_SIZE, name=f"{name}-inbox")
        self._inbox_closed = threading.Event()
        self._state = ParticleState.IDLE
        self._iterations = 0

    @property
    def position(self) -> V:
        return self._position

    @property
    def velocity(self) -> V:
        return self._velocity

    @property
    def bounds(self) -> Range[V]:
        return self._bounds

    @property
    def eval_value(self) -> Optional[EvalValue]:
        """Fitness of the current position at the last iteration."""
        return self._eval_value

    @property
    def best(self) -> V:
        """Personal best position."""
        return self._best

    @property
    def global_best(self) -> Optional[V]:
        """Latest global best received from the solver."""
        return self._global_best

    @property
    def inbox(self) -> Channel[V]:
        """Channel the solver uses to deliver the global best."""
        return self._inbox

    @property
    def state(self) -> ParticleState:
        return self._state

    @property
    def iterations(self) -> int:
        return self._iterations

    def start(self, target: TargetFunc, param: Param, reports: Channel[V]) -> None:
        """
        Run the particle loop until the solver closes the inbox.

        Blocks the calling thread. The start position is reported first so
        the solver always has something to broadcast.

        Args:
            target: Objective function
            param: PSO coefficients
            reports: Solver's shared channel for personal-best reports
        """
        if self._state is not ParticleState.IDLE:
            raise RuntimeError(f"Particle {self.name!r} has already been started")

        self._state = ParticleState.AWAITING_INITIAL_BEST
        try:
            reports.send(self._best.clone())
        except ChannelClosed:
            self._state = ParticleState.STOPPED
            return

        global_best, ok = self._inbox.receive()
        if not ok:
            logger.debug(f"Particle {self.name!r} stopped before first broadcast")
            self._state = ParticleState.STOPPED
            return
        self._global_best = global_best

        receiver = threading.Thread(
            target=self._receive_broadcasts,
            name=f"{self.name}-receiver",
            daemon=True,
        )
        receiver.start()

        self._state = ParticleState.RUNNING
        logger.debug(f"Particle {self.name!r} running")
        try:
            while not self._inbox_closed.is_set():
                self.step(target, param, self._global_best, reports)
        except ChannelClosed:
            pass
        finally:
            self._state = ParticleState.STOPPED

        # The receiver exits once the solver closes the inbox
        receiver.join()
        logger.debug(f"Particle {self.name!r} stopped after {self._iterations} iterations")

    def _receive_broadcasts(self) -> None:
        """Keep the latest global best; exit once the inbox is closed."""
        while True:
            global_best, ok = self._inbox.receive()
            if not ok:
                self._inbox_closed.set()
                return
            self._global_best = global_best

    def step(
        self,
        target: TargetFunc,
        param: Param,
        global_best: V,
        reports: Optional[Channel[V]] = None,
    ) -> bool:
        """
        Run one iteration of the velocity and position update.

        Args:
            target: Objective function
            param: PSO coefficients
            global_best: Best position known to the swarm
            reports: Channel to send an improved personal best on, if any

        Returns:
            True if the personal best improved
        """
        # Move only if the candidate stays inside the bounds
        candidate = self._position.clone().add(self._velocity)
        if self._bounds.contains(candidate):
            self._position = candidate

        r1 = self._velocity.random(self._rng)
        r2 = self._velocity.random(self._rng)

        # v <- w*v + r1*c1*(best - x) + r2*c2*(global_best - x)
        self._velocity.mul(param.w)
        r1.mul(param.c1).mul(self._best.clone().sub(self._position))
        r2.mul(param.c2).mul(global_best.clone().sub(self._position))
        self._velocity.add(r1).add(r2)

        self._iterations += 1
        self._eval_value = target.evaluate(self._position)
        best_value = target.evaluate(self._best)
        if self._eval_value.compare_to(best_value) >= 0:
            return False

        self._best = self._position
        if reports is not None:
            reports.send(self._position.clone())
        return True

    def __repr__(self) -> str:
        return f"Particle(name={self.name!r}, state={self._state.name}, position={self._position!r})"
