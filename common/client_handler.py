"""
Client handler: one store connection plus the worker pool running its workload units.
"""

import logging
import time
from concurrent.futures import Future
from typing import List, Optional

from common.metrics_utils import AggregatedResult, Measures, merge_measures
from common.worker_pool import WorkerPool
from configuration import POOL_SHUTDOWN_TIMEOUT_SECONDS
from workloads import Workload, WorkloadKind, WorkloadParams, WorkloadState, create_workload


class ClientHandler:
    """Manages its own store connection and thread pool and dispatches workload units onto it."""

    def __init__(
        self,
        config,
        handler_id: str,
        num_docs: int,
        cluster,
        logger: Optional[logging.Logger] = None,
        shutdown_timeout: float = POOL_SHUTDOWN_TIMEOUT_SECONDS,
    ):
        """Initialize the client handler and open its store connection.

        Args:
            config: Run configuration
            handler_id: Identifier, e.g. "ClientHandler-1"
            num_docs: Documents assigned to this handler
            cluster: Store cluster to take the connection from
            logger: Logger for this handler and its units (default: module logger)
            shutdown_timeout: Bounded wait in seconds for the units to drain on cleanup

        Raises:
            StoreConnectionError: If the connection cannot be established
        """
        self.config = config
        self.id = handler_id
        self.num_docs = num_docs
        self.shutdown_timeout = shutdown_timeout
        self.logger = logger or logging.getLogger(__name__)

        self.store = cluster.connect(handler_id)
        try:
            self.pool = WorkerPool(
                config.num_threads,
                queue_size=config.num_threads,
                name=handler_id,
                logger=self.logger,
            )
        except Exception:
            self.store.close()
            raise
        self.workloads: List[Workload] = []
        self.result: Optional[AggregatedResult] = None

    def execute_workload(self, kind: WorkloadKind, document_factory) -> None:
        """Build ``num_threads`` workload units and submit them to the pool.

        If a unit cannot be built or submitted, the units already running are
        drained and the connection is released before the error propagates.

        Args:
            kind: Operation mix to run
            document_factory: Source of the stored payloads
        """
        docs_per_thread = self.num_docs // self.config.num_threads
        self.logger.info(
            f"{self.id}: dispatching {self.config.num_threads} {kind.value} workloads "
            f"with {docs_per_thread} documents each"
        )

        try:
            for i in range(self.config.num_threads):
                workload = create_workload(kind, WorkloadParams(
                    store=self.store,
                    name=f"{self.id}/Workload-{i + 1}",
                    amount=docs_per_thread,
                    ratio=self.config.ratio,
                    sampling=self.config.sampling,
                    ramp=self.config.ramp,
                    document_factory=document_factory,
                    logger=self.logger,
                ))
                self.workloads.append(workload)
                self.pool.submit(workload.run)
        except Exception as e:
            self.logger.error(f"{self.id}: failed to dispatch workloads: {e}")
            try:
                self._drain()
            finally:
                self.close()
            raise

    def cleanup(self) -> None:
        """Wait for every unit, shut the pool down, merge the results and release the connection."""
        try:
            not_done = self._drain()
            if not_done:
                self.logger.warning(f"{self.id}: {len(not_done)} workloads did not drain in time")
            self.store_measures()
        finally:
            self.close()

    def _drain(self) -> List[Future]:
        """Wait up to shutdown_timeout for the units, then shut the pool down.

        Returns:
            Futures of units still running when the wait ended
        """
        deadline = time.monotonic() + self.shutdown_timeout
        self.pool.join(timeout=self.shutdown_timeout)
        return self.pool.shutdown(timeout=max(0.0, deadline - time.monotonic()))

    def store_measures(self) -> None:
        """Aggregate the results of every finished workload unit."""
        finished = []
        for workload in self.workloads:
            if workload.state is not WorkloadState.FINISHED:
                self.logger.warning(f"{self.id}: leaving unfinished workload {workload.name} out of the results")
                continue
            finished.append(workload)

        self.result = AggregatedResult(
            measures=merge_measures(w.measures for w in finished),
            total_ops=sum(w.total_ops for w in finished),
            measured_ops=sum(w.measured_ops for w in finished),
            thread_elapsed=[w.total_elapsed() for w in finished],
        )
        self.logger.debug(
            f"{self.id}: {self.result.total_ops} ops, {self.result.measured_ops} measured"
        )

    def close(self) -> None:
        """Release the store connection."""
        self.store.close()

    def get_result(self) -> AggregatedResult:
        if self.result is None:
            return AggregatedResult()
        return self.result

    def get_measures(self) -> Measures:
        return self.get_result().measures

    def get_total_ops(self) -> int:
        return self.get_result().total_ops

    def get_measured_ops(self) -> int:
        return self.get_result().measured_ops

    def get_thread_elapsed(self) -> List[float]:
        return self.get_result().thread_elapsed

    def __repr__(self) -> str:
        return f"ClientHandler(id={self.id!r}, num_docs={self.num_docs}, workloads={len(self.workloads)})"
