# options.py
#
# Project: Incremental PageRank Engine
#
# Description:
#   Run configuration and result records shared by every driver.
#
#   PagerankOptions is frozen; derive variants with dataclasses.replace().
#   The two algorithm axes (synchronous/asynchronous relaxation and
#   naive/dead-end-aware teleport) are plain boolean fields.

from dataclasses import dataclass, field
from enum import IntEnum


class ErrorNorm(IntEnum):
    """Error measured between the current and previous rank estimates."""
    L1 = 1  # sum of absolute differences
    L2 = 2  # sum of squared differences
    LI = 3  # maximum absolute difference


@dataclass(frozen=True)
class PagerankOptions:
    """
    Configuration for a PageRank run.

    Attributes:
        damping:        Probability of following an edge instead of teleporting.
        tolerance:      Stop once the error falls below this value.
        max_iterations: Hard cap on the number of sweeps.
        error_norm:     Norm used for the convergence test.
        asynchronous:   Relax in place; updates see fresh neighbor values
                        within the same sweep.
        dead_ends:      Redistribute the rank held by dead-end vertices
                        through the teleport term instead of losing it.
        repeat:         Number of timed repetitions (time is averaged).
        verbose:        Report per-sweep progress on the terminal.
    """
    damping: float = 0.85
    tolerance: float = 1e-10
    max_iterations: int = 500
    error_norm: ErrorNorm = ErrorNorm.L1
    asynchronous: bool = False
    dead_ends: bool = False
    repeat: int = 1
    verbose: bool = False

    def __post_init__(self):
        if not 0.0 <= self.damping <= 1.0:
            raise ValueError(f"damping must lie in [0, 1], got {self.damping}")
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {self.tolerance}")
        if self.max_iterations < 0:
            raise ValueError(f"max_iterations must be non-negative, got {self.max_iterations}")
        if self.repeat < 1:
            raise ValueError(f"repeat must be at least 1, got {self.repeat}")
        # Accept plain ints (1/2/3) as well as ErrorNorm members
        object.__setattr__(self, 'error_norm', ErrorNorm(self.error_norm))


@dataclass
class PagerankResult:
    """
    Outcome of a run.

    Attributes:
        ranks:           vertex key -> final rank
        iterations:      sweeps actually performed (0..max_iterations)
        time:            mean wall time per repetition, in milliseconds
        faulted_workers: number of worker contexts cancelled at return
    """
    ranks: dict = field(default_factory=dict)
    iterations: int = 0
    time: float = 0.0
    faulted_workers: int = 0

    @property
    def faulted(self):
        return self.faulted_workers > 0
