"""Threading and recording helpers."""

from .threading_utils import WorkerPool, run_in_background
from .recorder import ConvergenceRecorder, ConvergenceSample

__all__ = [
    "WorkerPool",
    "run_in_background",
    "ConvergenceRecorder",
    "ConvergenceSample",
]
