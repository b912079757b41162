"""
Trading run lifecycle enumerations.
"""

from enum import StrEnum


class RunStatus(StrEnum):
    """
    Simulation driver states.

    IDLE -> RUNNING -> {COMPLETED, FAILED, CANCELLED}
    """

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transitions are allowed."""
        return self in [self.COMPLETED, self.FAILED, self.CANCELLED]

    def can_transition_to(self, target: "RunStatus") -> bool:
        """Check if the state machine allows moving to ``target``."""
        allowed = {
            RunStatus.IDLE: {RunStatus.RUNNING, RunStatus.FAILED},
            RunStatus.RUNNING: {RunStatus.COMPLETED, RunStatus.FAILED, RunStatus.CANCELLED},
        }
        return target in allowed.get(self, set())


class SessionType(StrEnum):
    """Kind of trading session a run belongs to."""

    SIMULATION = "simulation"
    BACKTEST = "backtest"


class RunMode(StrEnum):
    """How a backtest is executed."""

    QUICK = "quick"  # Synchronous, returns the complete result
    FULL = "full"  # Background task with progress and cancellation
