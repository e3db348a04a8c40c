"""Centralized constants for the swarm runtime."""

# Channels
CHANNEL_POLL_INTERVAL = 0.01  # Seconds between closed-flag checks while blocked
INBOX_QUEUE_SIZE = 0          # Unbounded so global-best broadcasts never block
DEFAULT_REPORT_QUEUE_SIZE = 1  # Small buffer so fast particles wait on the solver

# Solver
DEFAULT_POLL_INTERVAL = 0.05  # Seconds between stop-flag checks without reports
BACKGROUND_WORKERS = 4        # Threads shared by start_in_background/run_until

# Default PSO coefficients
DEFAULT_INERTIA = 0.5
DEFAULT_COGNITIVE = 0.5
DEFAULT_SOCIAL = 0.5
