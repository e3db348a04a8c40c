"""Recording of global-best progress for convergence analysis."""

from dataclasses import dataclass
from typing import List, Optional
import threading
import time

import pandas as pd

from ..core.event_bus import Event, EventBus, EventType, get_event_bus


@dataclass
class ConvergenceSample:
    """One global-best improvement."""

    elapsed: float         # Seconds since the recorder was attached
    value: float           # Fitness of the new global best
    best: List[float]      # Position of the new global best
    reports: int           # Reports the solver had received at that point


class ConvergenceRecorder:
    """
    Record every global-best update published on an event bus.

    Only fitness values convertible with ``float()`` are supported, which
    covers the built-in float64 representation.
    """

    def __init__(self, event_bus: Optional[EventBus] = None) -> None:
        self.event_bus = event_bus or get_event_bus()
        self._samples: List[ConvergenceSample] = []
        self._lock = threading.Lock()
        self._started_at = time.monotonic()
        self.event_bus.subscribe(EventType.GLOBAL_BEST_UPDATED, self._on_update)

    def _on_update(self, event: Event) -> None:
        best = event.data.get("best")
        sample = ConvergenceSample(
            elapsed=time.monotonic() - self._started_at,
            value=float(event.data["value"]),
            best=list(best) if best is not None else [],
            reports=event.data.get("reports", 0),
        )
        with self._lock:
            self._samples.append(sample)

    def detach(self) -> None:
        """Stop recording."""
        self.event_bus.unsubscribe(EventType.GLOBAL_BEST_UPDATED, self._on_update)

    @property
    def samples(self) -> List[ConvergenceSample]:
        with self._lock:
            return list(self._samples)

    @property
    def values(self) -> List[float]:
        """Fitness of each recorded global best, oldest first."""
        return [s.value for s in self.samples]

    def is_monotonic(self) -> bool:
        """Whether every recorded value improves on the one before it."""
        values = self.values
        return all(later < earlier for earlier, later in zip(values, values[1:]))

    def to_dataframe(self) -> pd.DataFrame:
        """
        Export samples as a DataFrame.

        Columns: elapsed, value, reports, and one ``x{i}`` column per
        dimension of the best position.
        """
        rows = []
        for sample in self.samples:
            row = {"elapsed": sample.elapsed, "value": sample.value, "reports": sample.reports}
            row.update({f"x{i}": x for i, x in enumerate(sample.best)})
            rows.append(row)
        return pd.DataFrame(rows, columns=None if rows else ["elapsed", "value", "reports"])
