"""Swarm orchestrator: tracks the global best and broadcasts it to every particle."""

from concurrent.futures import Future
from typing import Callable, Generic, List, Optional, Sequence, Tuple
import logging
import threading
import time

from .channel import Channel
from .errors import ChannelTimeout, InvalidArgument
from .event_bus import Event, EventBus, EventType, get_event_bus
from .param import Param
from .particle import Particle
from .values import EvalValue, TargetFunc, V
from ..config.settings import Settings, get_settings
from ..utils.threading_utils import WorkerPool, run_in_background

logger = logging.getLogger(__name__)


class Solver(Generic[V]):
    """
    PSO solver.

    Runs one worker thread per particle plus the coordination loop on the
    thread that calls start(). Particles report improved personal bests on a
    shared channel; the solver keeps the best of them and sends it to each
    particle's inbox in particle order. The broadcast is sequential, so for
    a moment some particles may still be working against the previous
    global best.
    """

    def __init__(
        self,
        target: TargetFunc,
        particles: Sequence[Particle[V]],
        param: Param,
        settings: Settings | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        """
        Create a solver.

        Args:
            target: Objective function to minimize
            particles: Swarm members, at least one
            param: PSO coefficients shared by every particle
            settings: Solver settings, defaults to get_settings()
            event_bus: Bus for progress events, defaults to get_event_bus()
        """
        if target is None:
            raise InvalidArgument("target function cannot be None")
        if particles is None:
            raise InvalidArgument("particles cannot be None")
        if len(particles) == 0:
            raise InvalidArgument("the swarm needs at least one particle")
        if any(p is None for p in particles):
            raise InvalidArgument("particles cannot contain None")
        if param is None:
            raise InvalidArgument("param cannot be None")

        for particle in particles:
            if type(particle.position) is not target.type:
                raise InvalidArgument(
                    f"target accepts {target.type.__name__}, "
                    f"particle position is {type(particle.position).__name__}"
                )
            if len(particle.position) != param.dimension:
                raise InvalidArgument(
                    f"param covers {param.dimension} dimensions, "
                    f"particle position has {len(particle.position)}"
                )
        if type(param.w) is not target.type:
            raise InvalidArgument(
                f"param uses {type(param.w).__name__}, target accepts {target.type.__name__}"
            )

        self._target = target
        self._particles: Tuple[Particle[V], ...] = tuple(particles)
        self._param = param
        self.settings = settings or get_settings()
        self.event_bus = event_bus or get_event_bus()

        # (best, best_value), replaced as a pair by the coordination thread
        self._best: Tuple[Optional[V], Optional[EvalValue]] = (None, None)
        self._reports_received = 0

        self._started = False
        self._done = threading.Event()
        self._running = threading.Event()
        self._errors: List[BaseException] = []
        self._lock = threading.Lock()

    @property
    def target(self) -> TargetFunc:
        return self._target

    @property
    def particles(self) -> List[Particle[V]]:
        """Copy of the particle list."""
        return list(self._particles)

    @property
    def param(self) -> Param:
        return self._param

    @property
    def best(self) -> Optional[V]:
        """Global best position, or None before the first report."""
        return self._best[0]

    @property
    def best_value(self) -> Optional[EvalValue]:
        """Fitness of the global best, or None before the first report."""
        return self._best[1]

    @property
    def reports_received(self) -> int:
        return self._reports_received

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    @property
    def errors(self) -> List[BaseException]:
        """Exceptions raised by failed particle workers."""
        with self._lock:
            return list(self._errors)

    def stop(self) -> None:
        """Ask a running start() to return after its current report."""
        if not self._done.is_set():
            logger.info("Stop requested")
            self._done.set()
            self.event_bus.publish(Event(type=EventType.STOP_REQUESTED, source="solver"))

    def start(self, stop_signal: Channel | None = None) -> Optional[V]:
        """
        Run the swarm until stopped.

        Blocks the calling thread. Returns only after every particle worker
        has finished, so the global best no longer changes afterwards.

        Args:
            stop_signal: Optional channel; a truthy value or closing it stops
                the solver. stop() works as well.

        Returns:
            The global best position, or None if nothing was reported
        """
        with self._lock:
            if self._started:
                raise RuntimeError("Solver can only be started once")
            self._started = True

        self._running.set()

        reports: Channel[V] = Channel(
            maxsize=self.settings.solver.report_queue_size, name="reports"
        )
        pool = WorkerPool(max_workers=len(self._particles) + 1, name="particle")

        for i, particle in enumerate(self._particles):
            if not particle.name:
                particle.name = f"particle-{i}"
            future = pool.submit(particle.start, self._target, self._param, reports)
            future.add_done_callback(
                lambda f, p=particle: self._on_particle_done(p, f)
            )

        if stop_signal is not None:
            pool.submit(self._watch_stop_signal, stop_signal)

        logger.info(f"Solver started with {len(self._particles)} particles")
        self.event_bus.publish(Event(
            type=EventType.SOLVER_STARTED,
            data={"particles": len(self._particles)},
            source="solver",
        ))

        try:
            while not self._done.is_set():
                try:
                    report, ok = reports.receive(timeout=self.settings.solver.poll_interval)
                except ChannelTimeout:
                    continue
                if not ok:
                    break
                self._process_report(report)
        finally:
            self._shutdown(reports, pool)

        return self.best

    def _process_report(self, report: V) -> None:
        """Adopt ``report`` if it beats the global best and broadcast it."""
        self._reports_received += 1
        value = self._target.evaluate(report)
        best, best_value = self._best

        if best is not None and value.compare_to(best_value) >= 0:
            return

        self._best = (report, value)
        logger.debug(f"Global best improved to {value!r}")

        for particle in self._particles:
            particle.inbox.send(report)

        self.event_bus.publish(Event(
            type=EventType.GLOBAL_BEST_UPDATED,
            data={
                "best": report.clone(),
                "value": value,
                "reports": self._reports_received,
            },
            source="solver",
        ))

    def _shutdown(self, reports: Channel[V], pool: WorkerPool) -> None:
        self._done.set()
        for particle in self._particles:
            particle.inbox.close()
        reports.close()
        pool.shutdown(wait=True)
        self._running.clear()

        logger.info(
            f"Solver stopped after {self._reports_received} reports, "
            f"best value {self.best_value!r}"
        )
        self.event_bus.publish(Event(
            type=EventType.SOLVER_STOPPED,
            data={
                "best": self.best.clone() if self.best is not None else None,
                "value": self.best_value,
                "reports": self._reports_received,
            },
            source="solver",
        ))

    def _watch_stop_signal(self, stop_signal: Channel) -> None:
        while not self._done.is_set():
            try:
                value, ok = stop_signal.receive(timeout=self.settings.solver.poll_interval)
            except ChannelTimeout:
                continue
            if not ok or value:
                self.stop()
                return

    def _on_particle_done(self, particle: Particle[V], future: Future) -> None:
        error = future.exception()
        if error is None:
            return

        logger.error(
            f"Particle {particle.name!r} failed: {error!r}",
            exc_info=(type(error), error, error.__traceback__),
        )
        with self._lock:
            self._errors.append(error)
            all_failed = len(self._errors) == len(self._particles)

        self.event_bus.publish(Event(
            type=EventType.PARTICLE_FAILED,
            data={"particle": particle.name, "error": error},
            source="solver",
        ))

        if all_failed:
            logger.error("Every particle has failed, stopping solver")
            self.stop()

    def start_in_background(self, stop_signal: Channel | None = None) -> "Future[Optional[V]]":
        """Run start() on a background thread and return its future."""
        return run_in_background(self.start, stop_signal)

    def run_until(
        self,
        condition: Callable[[EvalValue], bool] | None = None,
        timeout: float | None = None,
        check_interval: float = 0.01,
    ) -> Optional[V]:
        """
        Run the solver until ``condition`` holds for the best value.

        Args:
            condition: Predicate on the global best fitness. Without one the
                solver runs until the timeout.
            timeout: Seconds before stopping regardless of the condition
            check_interval: Seconds between checks of the global best

        Returns:
            The global best position once the solver has stopped
        """
        if condition is None and timeout is None:
            raise InvalidArgument("run_until needs a condition or a timeout")

        future = self.start_in_background()
        deadline = None if timeout is None else time.monotonic() + timeout

        try:
            while not future.done():
                best_value = self.best_value
                if condition is not None and best_value is not None and condition(best_value):
                    break
                if deadline is not None and time.monotonic() >= deadline:
                    logger.info(f"run_until timed out after {timeout}s")
                    break
                time.sleep(check_interval)
        finally:
            self.stop()

        return future.result()
