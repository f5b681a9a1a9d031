"""
Base workload unit: sampling cadence, ramp-up gating and per-unit counters.
"""

import enum
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class WorkloadState(enum.Enum):
    NOT_STARTED = "not_started"
    RAMPING = "ramping"
    MEASURING = "measuring"
    FINISHED = "finished"


@dataclass(frozen=True)
class WorkloadParams:
    """Everything needed to build one workload unit."""

    store: Any
    name: str
    amount: int
    ratio: int
    sampling: int
    ramp: float
    document_factory: Any
    logger: Optional[logging.Logger] = None
    clock: Callable[[], float] = time.perf_counter


class Workload:
    """One unit of concurrency running an operation mix against a store connection.

    The unit is mutated only by the thread executing ``run``. Latency samples
    are kept per operation kind; samples taken while the unit's own elapsed
    time is below the ramp-up threshold are discarded.
    """

    kind = ""

    def __init__(self, params: WorkloadParams):
        if params.amount < 0:
            raise ValueError(f"Workload amount must not be negative, got {params.amount}")
        if params.ratio < 0:
            raise ValueError(f"Workload ratio must not be negative, got {params.ratio}")
        if not 1 <= params.sampling <= 100:
            raise ValueError(f"Sampling must be between 1 and 100, got {params.sampling}")

        self.store = params.store
        self.name = params.name
        self.amount = params.amount
        self.ratio = params.ratio
        self.sampling = 100 // params.sampling
        self.ramp = params.ramp
        self.document_factory = params.document_factory
        self.logger = params.logger or logger
        self._clock = params.clock

        self.total_ops = 0
        self.measured_ops = 0
        self.measures: Dict[str, List[float]] = {}

        self._sampling_count = 0
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    def start_timer(self) -> None:
        self._start_time = self._clock()
        self._end_time = None

    def end_timer(self) -> None:
        self._end_time = self._clock()

    def is_running(self) -> bool:
        return self._start_time is not None and self._end_time is None

    def elapsed(self) -> float:
        """Seconds since the unit started, 0 before it started."""
        if self._start_time is None:
            return 0.0
        end = self._end_time if self._end_time is not None else self._clock()
        return end - self._start_time

    def total_elapsed(self) -> float:
        """Lifetime of the finished unit in seconds.

        Raises:
            RuntimeError: If the unit is still running
        """
        if self.is_running():
            raise RuntimeError(f"Workload {self.name} is still running")
        return self.elapsed()

    @property
    def state(self) -> WorkloadState:
        if self._start_time is None:
            return WorkloadState.NOT_STARTED
        if self._end_time is not None:
            return WorkloadState.FINISHED
        if self.elapsed() < self.ramp:
            return WorkloadState.RAMPING
        return WorkloadState.MEASURING

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    def incr_total_ops(self) -> None:
        self.total_ops += 1

    def add_measure(self, kind: str, duration: float) -> None:
        """Store a latency sample, unless the ramp-up time is not through yet.

        Args:
            kind: Operation kind label, e.g. "get" or "cas"
            duration: Latency in seconds
        """
        if self.elapsed() < self.ramp:
            return
        self.measures.setdefault(kind, []).append(duration)
        self.measured_ops += 1

    def should_sample(self) -> bool:
        """Advance the sampling cadence; True for every ``100 // sampling``-th iteration."""
        self._sampling_count += 1
        if self._sampling_count >= self.sampling:
            self._sampling_count = 0
            return True
        return False

    def timed(self, kind: str, operation: Callable, *args):
        """Run a store operation and record its latency under ``kind``."""
        start = self._clock()
        result = operation(*args)
        self.add_measure(kind, self._clock() - start)
        return result

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def random_key(self) -> str:
        return str(uuid.uuid4())

    def get_document(self) -> bytes:
        return self.document_factory.get_document()

    def run(self) -> None:
        """Run all iterations sequentially; single operation failures never abort the unit."""
        thread = threading.current_thread()
        previous_name = thread.name
        thread.name = self.name
        self.logger.debug(f"Workload {self.name} starting {self.amount} iterations")

        self.start_timer()
        try:
            for _ in range(self.amount):
                key = self.random_key()
                sampled = self.should_sample()
                try:
                    self.run_iteration(key, sampled)
                except Exception as e:
                    self.logger.warning(f"Workload {self.name}: problem with key {key}: {e}")
        finally:
            self.end_timer()
            thread.name = previous_name

        self.logger.debug(
            f"Workload {self.name} finished: {self.total_ops} ops, "
            f"{self.measured_ops} measured in {self.elapsed():.3f}s"
        )

    def run_iteration(self, key: str, sampled: bool) -> None:
        """Execute one iteration of the operation mix."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, amount={self.amount}, "
            f"ratio={self.ratio}, state={self.state.value})"
        )
