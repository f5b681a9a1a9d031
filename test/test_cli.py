"""
Tests for the command line interface, node parsing and run configuration.
"""

import unittest
import sys
import os
import tempfile

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cli import RoadRunnerCLI, run_load_test
from common.run_config import RunConfig, parse_nodes
from systems.memory import InMemoryCluster


class TestParseNodes(unittest.TestCase):

    def test_default_port(self):
        self.assertEqual(parse_nodes("127.0.0.1"), (("127.0.0.1", 11211),))

    def test_multiple_nodes(self):
        self.assertEqual(
            parse_nodes("10.0.0.1:11212, cache.local ,10.0.0.3"),
            (("10.0.0.1", 11212), ("cache.local", 11211), ("10.0.0.3", 11211)),
        )

    def test_invalid(self):
        for nodes in ("", " , ", "host:abc", "host:0", "host:70000", ":11211"):
            with self.subTest(nodes=nodes):
                with self.assertRaises(ValueError):
                    parse_nodes(nodes)


class TestRunConfig(unittest.TestCase):

    def test_defaults(self):
        config = RunConfig()
        self.assertEqual(config.bucket, "default")
        self.assertEqual(config.num_threads, 1)
        self.assertEqual(config.num_clients, 1)
        self.assertEqual(config.sampling, 100)
        self.assertEqual(config.workload, "getset")

    def test_validation(self):
        invalid = [
            dict(num_threads=0),
            dict(num_clients=0),
            dict(num_docs=-1),
            dict(ratio=-1),
            dict(sampling=0),
            dict(sampling=101),
            dict(ramp=-1),
            dict(storage="redis"),
        ]
        for overrides in invalid:
            with self.subTest(**overrides):
                with self.assertRaises(ValueError):
                    RunConfig(**overrides)

    def test_password_not_printed(self):
        config = RunConfig(password="hunter2")
        self.assertNotIn("hunter2", str(config))

    def test_from_args(self):
        args = RoadRunnerCLI().parser.parse_args(
            ["-n", "a:1,b", "-t", "3", "-c", "2", "-d", "60", "-r", "4", "-s", "25",
             "-w", "getscas", "--ramp", "2", "--storage", "memory"]
        )
        config = RunConfig.from_args(args)

        self.assertEqual(config.nodes, (("a", 1), ("b", 11211)))
        self.assertEqual(config.num_threads, 3)
        self.assertEqual(config.num_clients, 2)
        self.assertEqual(config.num_docs, 60)
        self.assertEqual(config.ratio, 4)
        self.assertEqual(config.sampling, 25)
        self.assertEqual(config.workload, "getscas")
        self.assertEqual(config.ramp, 2)


class TestRunLoadTest(unittest.TestCase):

    def test_summary(self):
        config = RunConfig(storage="memory", num_docs=50, num_threads=2, ratio=3)
        summary = run_load_test(config, cluster=InMemoryCluster("default"))

        self.assertEqual(summary["total_ops"], 50 * 4)
        self.assertEqual(summary["measured_ops"], 50 * 4)
        self.assertEqual(sorted(summary["latency"]), ["get", "set"])
        self.assertEqual(summary["latency"]["get"]["count"], 150)
        self.assertGreater(summary["ops_per_second"], 0)
        self.assertLessEqual(summary["shortest_thread_ms"], summary["longest_thread_ms"])
        self.assertEqual(summary["result"].total_ops, 200)


class TestRoadRunnerCLI(unittest.TestCase):

    def setUp(self):
        self.cli = RoadRunnerCLI()

    def test_memory_run(self):
        args = ["--storage", "memory", "-d", "40", "-t", "2", "-c", "2", "-r", "1", "--log-level", "warning"]
        self.assertEqual(self.cli.run(args), 0)

    def test_invalid_sampling(self):
        self.assertEqual(self.cli.run(["--storage", "memory", "-s", "0", "--log-level", "ERROR"]), 1)

    def test_invalid_nodes(self):
        self.assertEqual(self.cli.run(["--nodes", "host:port", "--log-level", "ERROR"]), 1)

    def test_unknown_workload(self):
        with self.assertRaises(SystemExit) as ctx:
            self.cli.run(["--workload", "scan"])
        self.assertEqual(ctx.exception.code, 2)

    def test_missing_document_file(self):
        args = ["--storage", "memory", "-d", "10", "-f", "/nonexistent/roadrunner/doc.json", "--log-level", "ERROR"]
        self.assertEqual(self.cli.run(args), 1)

    def test_results_and_plots_saved(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            output_dir = os.path.join(tmpdir, "results")
            plots_dir = os.path.join(tmpdir, "plots")
            args = ["--storage", "memory", "-d", "100", "-r", "2", "-s", "50",
                    "--output-dir", output_dir, "--plots-dir", plots_dir, "--log-level", "WARNING"]

            self.assertEqual(self.cli.run(args), 0)

            parquet_files = [f for f in os.listdir(output_dir) if f.endswith(".parquet")]
            self.assertEqual(len(parquet_files), 1)
            self.assertTrue(parquet_files[0].startswith("roadrunner_"))
            self.assertEqual(sorted(os.listdir(plots_dir)), ["latency_cdf.png", "latency_histogram.png"])


if __name__ == '__main__':
    unittest.main()
