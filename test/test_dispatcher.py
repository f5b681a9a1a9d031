"""
Integration tests for the dispatcher and client handlers against the in-memory store.
"""

import unittest
import sys
import os
import threading
from unittest.mock import patch

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.client_handler import ClientHandler
from common.dispatcher import WorkloadDispatcher
from common.documents import DocumentFactoryError, RandomDocumentFactory
from common.run_config import RunConfig
from systems.base import StoreConnectionError
from systems.memory import InMemoryBackend, InMemoryCluster, InMemorySystem
from workloads import WorkloadKind
from workloads.factory import create_workload


class CountingCluster(InMemoryCluster):
    """In-memory cluster recording how often it is released."""

    def __init__(self, bucket="default", fail_on_connect=None):
        super().__init__(bucket)
        self.close_calls = 0
        self.connect_calls = 0
        self.fail_on_connect = fail_on_connect

    def _connect(self, name):
        self.connect_calls += 1
        if self.connect_calls == self.fail_on_connect:
            raise StoreConnectionError(f"node refused connection {name}")
        return super()._connect(name)

    def _close(self):
        self.close_calls += 1


class StallingSystem(InMemorySystem):
    """Blocks the first set until the gate opens."""

    def __init__(self, name, backend, bucket, gate):
        super().__init__(name, backend, bucket)
        self.gate = gate
        self._stalled = False
        self._lock = threading.Lock()

    def set(self, key, value):
        with self._lock:
            stall = not self._stalled
            self._stalled = True
        if stall:
            self.gate.wait(timeout=10)
        return super().set(key, value)


class StallingCluster(InMemoryCluster):

    def __init__(self, gate):
        super().__init__("default")
        self.gate = gate

    def _connect(self, name):
        return StallingSystem(name, self.backend, self.bucket, self.gate)


def make_config(**overrides):
    params = dict(storage="memory", num_clients=1, num_threads=2, num_docs=100, ratio=1, sampling=100)
    params.update(overrides)
    return RunConfig(**params)


class TestWorkloadDispatcher(unittest.TestCase):
    """End-to-end runs through init, dispatch and merge."""

    def test_get_set_run(self):
        cluster = CountingCluster()
        dispatcher = WorkloadDispatcher(make_config(), cluster=cluster)
        dispatcher.init()
        dispatcher.dispatch_workload()
        result = dispatcher.prepare_measures()

        self.assertEqual(result.total_ops, 200)
        self.assertEqual(result.measured_ops, 200)
        self.assertEqual(len(result.measures["set"]), 100)
        self.assertEqual(len(result.measures["get"]), 100)
        self.assertEqual(len(result.thread_elapsed), 2)
        self.assertEqual(len(cluster.backend), 100)

    def test_gets_cas_run(self):
        cluster = CountingCluster()
        config = make_config(workload="getscas", num_clients=2, num_threads=2, num_docs=40, ratio=2)
        dispatcher = WorkloadDispatcher(config, cluster=cluster)
        dispatcher.init()
        dispatcher.dispatch_workload()

        self.assertEqual(dispatcher.get_total_ops(), 40 * (1 + 2 * 2))
        self.assertEqual(sorted(dispatcher.get_measures()), ["cas", "gets"])
        self.assertEqual(dispatcher.get_measured_ops(), 40 * 4)
        self.assertEqual(len(dispatcher.get_thread_elapsed()), 4)

    def test_remainder_documents_are_dropped(self):
        config = make_config(num_docs=101, num_clients=2, num_threads=3, ratio=0)
        dispatcher = WorkloadDispatcher(config, cluster=CountingCluster())
        dispatcher.init()
        dispatcher.dispatch_workload()

        self.assertEqual(dispatcher.get_total_ops(), 96)
        self.assertEqual(len(dispatcher.get_thread_elapsed()), 6)

    def test_sampling_reduces_measures(self):
        config = make_config(num_docs=100, num_threads=1, ratio=0, sampling=10)
        dispatcher = WorkloadDispatcher(config, cluster=CountingCluster())
        dispatcher.init()
        dispatcher.dispatch_workload()

        self.assertEqual(dispatcher.get_total_ops(), 100)
        self.assertEqual(dispatcher.get_measured_ops(), 10)

    def test_cluster_released_exactly_once(self):
        cluster = CountingCluster()
        dispatcher = WorkloadDispatcher(make_config(num_clients=3), cluster=cluster)
        dispatcher.init()
        self.assertEqual(cluster.open_connections(), 3)

        dispatcher.dispatch_workload()

        self.assertEqual(cluster.close_calls, 1)
        self.assertTrue(cluster.closed)
        self.assertEqual(cluster.open_connections(), 0)

    def test_missing_document_file_releases_cluster(self):
        cluster = CountingCluster()
        config = make_config(filename="/nonexistent/roadrunner/doc.json")
        dispatcher = WorkloadDispatcher(config, cluster=cluster)
        dispatcher.init()

        with self.assertRaises(DocumentFactoryError):
            dispatcher.dispatch_workload()

        self.assertEqual(cluster.close_calls, 1)
        self.assertEqual(cluster.open_connections(), 0)

    def test_init_failure_releases_cluster(self):
        cluster = CountingCluster(fail_on_connect=2)
        dispatcher = WorkloadDispatcher(make_config(num_clients=3), cluster=cluster)

        with self.assertRaises(StoreConnectionError):
            dispatcher.init()

        self.assertEqual(cluster.close_calls, 1)
        self.assertEqual(cluster.open_connections(), 0)
        self.assertEqual(len(dispatcher.client_handlers), 1)

    def test_failing_handler_still_cleans_up_started_ones(self):
        cluster = CountingCluster()
        dispatcher = WorkloadDispatcher(make_config(num_clients=2), cluster=cluster)
        dispatcher.init()

        def flaky(kind, params):
            if params.name.startswith("ClientHandler-2"):
                raise RuntimeError("cannot build workload")
            return create_workload(kind, params)

        with patch("common.client_handler.create_workload", side_effect=flaky):
            with self.assertRaises(RuntimeError):
                dispatcher.dispatch_workload()

        first, second = dispatcher.client_handlers
        self.assertEqual(first.get_total_ops(), 100)
        self.assertEqual(second.get_total_ops(), 0)
        self.assertEqual(cluster.close_calls, 1)
        self.assertEqual(cluster.open_connections(), 0)

    def test_getters_reflect_finished_run(self):
        dispatcher = WorkloadDispatcher(make_config(), cluster=CountingCluster())
        dispatcher.init()
        self.assertEqual(dispatcher.get_total_ops(), 0)
        self.assertEqual(dispatcher.get_measures(), {})

        dispatcher.dispatch_workload()

        self.assertEqual(dispatcher.get_total_ops(), 200)
        self.assertEqual(dispatcher.get_measured_ops(), 200)
        self.assertEqual(sorted(dispatcher.get_measures()), ["get", "set"])
        self.assertEqual(len(dispatcher.get_thread_elapsed()), 2)

    def test_injected_backend_receives_documents(self):
        backend = InMemoryBackend()
        cluster = InMemoryCluster("default", backend=backend)
        self.assertIs(cluster.backend, backend)

        dispatcher = WorkloadDispatcher(make_config(num_docs=10), cluster=cluster)
        dispatcher.init()
        dispatcher.dispatch_workload()

        self.assertEqual(len(backend), 10)
        self.assertTrue(all(key.startswith("default:") for key in backend.data))

    def test_rounding_logged_at_debug(self):
        dispatcher = WorkloadDispatcher(make_config(num_docs=101, num_threads=2), cluster=CountingCluster())
        with self.assertLogs("common.dispatcher", level="DEBUG") as logs:
            dispatcher.init()
        dispatcher.cluster.close()

        rounding = [r for r in logs.records if "dropped by rounding" in r.getMessage()]
        self.assertEqual(len(rounding), 1)
        self.assertEqual(rounding[0].levelname, "DEBUG")

    def test_dispatch_before_init(self):
        dispatcher = WorkloadDispatcher(make_config())
        with self.assertRaises(RuntimeError):
            dispatcher.dispatch_workload()

    def test_cluster_built_from_config(self):
        dispatcher = WorkloadDispatcher(make_config(num_docs=10))
        dispatcher.init()
        self.assertIsInstance(dispatcher.cluster, InMemoryCluster)
        dispatcher.dispatch_workload()
        self.assertEqual(dispatcher.get_total_ops(), 20)


class TestClientHandler(unittest.TestCase):
    """Connection ownership and result aggregation of a single handler."""

    def test_run_and_cleanup(self):
        cluster = CountingCluster()
        handler = ClientHandler(make_config(num_threads=4), "ClientHandler-1", 40, cluster)
        handler.execute_workload(WorkloadKind.GET_SET, RandomDocumentFactory(8))
        handler.cleanup()

        self.assertEqual(handler.get_total_ops(), 80)
        self.assertEqual(len(handler.get_thread_elapsed()), 4)
        self.assertTrue(handler.store.closed)
        names = sorted(w.name for w in handler.workloads)
        self.assertEqual(names, [f"ClientHandler-1/Workload-{i}" for i in range(1, 5)])

    def test_result_empty_before_cleanup(self):
        handler = ClientHandler(make_config(), "ClientHandler-1", 10, CountingCluster())
        self.assertEqual(handler.get_total_ops(), 0)
        self.assertEqual(handler.get_measures(), {})
        handler.close()

    def test_cleanup_leaves_stalled_unit_out(self):
        gate = threading.Event()
        cluster = StallingCluster(gate)
        config = make_config(num_threads=2, ratio=0)
        handler = ClientHandler(config, "ClientHandler-1", 4, cluster, shutdown_timeout=0.2)
        try:
            handler.execute_workload(WorkloadKind.GET_SET, RandomDocumentFactory(8))
            with self.assertLogs("common.client_handler", level="WARNING") as logs:
                handler.cleanup()
        finally:
            gate.set()

        # Only the unit that was not stalled is merged
        self.assertEqual(handler.get_total_ops(), 2)
        self.assertEqual(len(handler.get_thread_elapsed()), 1)
        self.assertTrue(handler.store.closed)
        self.assertTrue(any("did not drain" in line for line in logs.output))
        cluster.close()

    def test_execute_failure_releases_connection(self):
        cluster = CountingCluster()
        handler = ClientHandler(make_config(), "ClientHandler-1", 10, cluster)

        with patch("common.client_handler.create_workload", side_effect=ValueError("bad params")):
            with self.assertRaises(ValueError):
                handler.execute_workload(WorkloadKind.GET_SET, RandomDocumentFactory(8))

        self.assertTrue(handler.store.closed)
        self.assertEqual(cluster.open_connections(), 0)

    def test_connect_on_closed_cluster(self):
        cluster = CountingCluster()
        cluster.close()
        with self.assertRaises(StoreConnectionError):
            ClientHandler(make_config(), "ClientHandler-1", 10, cluster)


if __name__ == '__main__':
    unittest.main()
