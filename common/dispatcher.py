"""
Workload dispatcher: owns the store cluster and the client handlers, merges their results.
"""

import logging
from typing import List, Optional

from common.client_handler import ClientHandler
from common.documents import create_document_factory
from common.metrics_utils import AggregatedResult, Measures, split_documents
from common.storage_factory import create_store_cluster
from workloads import WorkloadKind


class WorkloadDispatcher:
    """Initializes the client handlers, runs the workload on all of them and merges the results."""

    def __init__(self, config, cluster=None, logger: Optional[logging.Logger] = None):
        """Initialize the dispatcher.

        Args:
            config: Run configuration
            cluster: Store cluster to use (default: built from the configuration in init)
            logger: Logger passed down to every handler (default: module logger)
        """
        self.config = config
        self.cluster = cluster
        self.logger = logger or logging.getLogger(__name__)
        self.client_handlers: List[ClientHandler] = []
        self.result: Optional[AggregatedResult] = None

    def init(self) -> None:
        """Create the cluster resource and one client handler per configured client.

        Documents are split with floor division; the remainder is not run.

        Raises:
            StoreConnectionError: If a handler cannot connect; the cluster is released first
        """
        split = split_documents(self.config.num_docs, self.config.num_clients, self.config.num_threads)
        docs_per_handler = split['docs_per_handle']
        if split['dropped_docs']:
            self.logger.debug(
                f"Running {split['planned_docs']} of {self.config.num_docs} documents "
                f"({split['dropped_docs']} dropped by rounding)"
            )

        if self.cluster is None:
            self.cluster = create_store_cluster(self.config)

        try:
            for i in range(self.config.num_clients):
                self.client_handlers.append(ClientHandler(
                    self.config,
                    f"ClientHandler-{i + 1}",
                    docs_per_handler,
                    self.cluster,
                    logger=self.logger,
                ))
        except Exception as e:
            self.logger.error(f"Failed to initialize client handlers: {e}")
            self.cluster.close()
            raise

        self.logger.debug(f"Initialized {len(self.client_handlers)} client handlers")

    def dispatch_workload(self) -> None:
        """Run the configured workload on every handler and wait for all of them.

        The store cluster is released exactly once, whether or not the run succeeds.

        Raises:
            ValueError: If the workload name is unknown
            DocumentFactoryError: If the document file cannot be read
        """
        if self.cluster is None:
            raise RuntimeError("WorkloadDispatcher.init() must be called before dispatch_workload()")

        with self.cluster:
            kind = WorkloadKind.from_name(self.config.workload)
            document_factory = create_document_factory(self.config)
            self.logger.info(f"Dispatching {kind.value} workload with {document_factory!r}")

            started = []
            try:
                for handler in self.client_handlers:
                    handler.execute_workload(kind, document_factory)
                    started.append(handler)
            finally:
                for handler in started:
                    handler.cleanup()

    def prepare_measures(self) -> AggregatedResult:
        """Merge the current results of every handler."""
        result = AggregatedResult()
        for handler in self.client_handlers:
            result = result.merge(handler.get_result())
        self.result = result
        return result

    def get_result(self) -> AggregatedResult:
        return self.prepare_measures()

    def get_measures(self) -> Measures:
        return self.get_result().measures

    def get_total_ops(self) -> int:
        return self.get_result().total_ops

    def get_measured_ops(self) -> int:
        return self.get_result().measured_ops

    def get_thread_elapsed(self) -> List[float]:
        return self.get_result().thread_elapsed
