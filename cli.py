#!/usr/bin/env python3
"""
RoadRunner: a load tester for memcached-protocol key-value stores.

It runs a number of client handles, each with its own store connection and
worker threads, executes a workload against the connected nodes and reports
latency percentiles and throughput. By default it connects to 127.0.0.1 with
the "default" bucket, one client and one worker thread.
"""

import os
import sys
import time
import logging
import argparse
from typing import Any, Dict, Optional

# Add the current directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from configuration import (
    DEFAULT_NODES, DEFAULT_BUCKET, DEFAULT_PASSWORD, DEFAULT_NUM_THREADS,
    DEFAULT_NUM_CLIENTS, DEFAULT_NUM_DOCS, DEFAULT_RATIO, DEFAULT_SAMPLING,
    DEFAULT_WORKLOAD, DEFAULT_RAMP_SECONDS, DEFAULT_DOC_SIZE, DEFAULT_STORAGE,
    STORAGE_TYPES, DEFAULT_LOG_LEVEL, DEFAULT_OUTPUT_PREFIX,
)
from common.run_config import RunConfig
from common.dispatcher import WorkloadDispatcher
from common.reporter import summarize, log_report
from workloads import WorkloadKind

# Set up logging (only if not already configured)
if not logging.root.handlers:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(threadName)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def run_load_test(config: RunConfig, cluster=None, log: Optional[logging.Logger] = None) -> Dict[str, Any]:
    """Initialize the client handles, run the workload and summarize the result.

    Args:
        config: Run configuration
        cluster: Store cluster to use (default: built from the configuration)
        log: Logger for the dispatcher and its components

    Returns:
        Run summary, see common.reporter.summarize; the aggregated result is
        included under 'result'
    """
    log = log or logger
    dispatcher = WorkloadDispatcher(config, cluster=cluster, logger=log)

    log.debug("Initializing client handlers")
    dispatcher.init()

    start = time.perf_counter()
    log.info("Running workload")
    dispatcher.dispatch_workload()
    elapsed = time.perf_counter() - start
    log.debug("Finished workload")

    result = dispatcher.prepare_measures()
    summary = summarize(result, elapsed)
    summary['result'] = result
    return summary


class RoadRunnerCLI:
    """Command line interface for the load tester."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self):
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog='roadrunner',
            description='Load tester for memcached-protocol key-value stores',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # 2 clients with 4 threads each, 100k documents, 1 set to 10 gets
  python cli.py --nodes 10.0.0.1,10.0.0.2 --num-clients 2 --num-threads 4 --num-docs 100000 --ratio 10

  # add/gets/cas cycles, sampling 10% of the iterations, ignoring the first 5 seconds
  python cli.py --workload getscas --sampling 10 --ramp 5

  # Smoke run against the in-process store, saving samples and plots
  python cli.py --storage memory --output-dir results --plots-dir plots
            """
        )

        parser.add_argument('-n', '--nodes', type=str, default=DEFAULT_NODES,
                            help=f'List of nodes to connect, separated with "," (default: {DEFAULT_NODES})')
        parser.add_argument('-b', '--bucket', type=str, default=DEFAULT_BUCKET,
                            help=f'Name of the bucket (default: {DEFAULT_BUCKET})')
        parser.add_argument('-p', '--password', type=str, default=DEFAULT_PASSWORD,
                            help='Password of the bucket (default: empty)')
        parser.add_argument('-t', '--num-threads', type=int, default=DEFAULT_NUM_THREADS,
                            help=f'Number of worker threads per client (default: {DEFAULT_NUM_THREADS})')
        parser.add_argument('-c', '--num-clients', type=int, default=DEFAULT_NUM_CLIENTS,
                            help=f'Number of clients, each with its own connection (default: {DEFAULT_NUM_CLIENTS})')
        parser.add_argument('-d', '--num-docs', type=int, default=DEFAULT_NUM_DOCS,
                            help=f'Number of documents to work with (default: {DEFAULT_NUM_DOCS})')
        parser.add_argument('-r', '--ratio', type=int, default=DEFAULT_RATIO,
                            help=f'Ratio, depending on the workload (default: {DEFAULT_RATIO})')
        parser.add_argument('-s', '--sampling', type=int, default=DEFAULT_SAMPLING,
                            help=f'Percent of iterations to measure (default: {DEFAULT_SAMPLING})')
        parser.add_argument('-w', '--workload', type=str, default=DEFAULT_WORKLOAD,
                            choices=[kind.value for kind in WorkloadKind],
                            help=f'Name of the workload (default: {DEFAULT_WORKLOAD})')
        parser.add_argument('--ramp', type=int, default=DEFAULT_RAMP_SECONDS,
                            help=f'Ramp-up time in seconds, operations are not measured (default: {DEFAULT_RAMP_SECONDS})')
        parser.add_argument('--doc-size', type=int, default=DEFAULT_DOC_SIZE,
                            help=f'Size of the random documents in bytes (default: {DEFAULT_DOC_SIZE})')
        parser.add_argument('-f', '--filename', type=str, default=None,
                            help='Use the content of this file as document instead of random bytes')
        parser.add_argument('--storage', choices=STORAGE_TYPES, default=DEFAULT_STORAGE,
                            help=f'Storage backend to use (default: {DEFAULT_STORAGE})')
        parser.add_argument('--output-dir', type=str, default=None,
                            help='Save the latency samples as Parquet in this directory')
        parser.add_argument('--plots-dir', type=str, default=None,
                            help='Write latency plots to this directory')
        parser.add_argument('--log-level', type=str.upper, default=DEFAULT_LOG_LEVEL,
                            choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                            help=f'Log level (default: {DEFAULT_LOG_LEVEL})')

        return parser

    def save_results(self, config: RunConfig, summary: Dict[str, Any]) -> None:
        """Write the Parquet samples and plots requested on the command line."""
        if not config.output_dir and not config.plots_dir:
            return

        from common.metrics_utils import measures_to_dataframe
        from persistence.parquet import ParquetPersistence
        from visualizations import LatencyPlotter

        result = summary['result']
        if config.output_dir:
            parquet_file = ParquetPersistence(config.output_dir).save_measures(result, DEFAULT_OUTPUT_PREFIX)
            if parquet_file:
                logger.info(f"Detailed results saved to: {parquet_file}")

        if config.plots_dir:
            plots = LatencyPlotter(measures_to_dataframe(result.measures), config.plots_dir).create_all_plots()
            for plot in plots:
                logger.info(f"  - {plot}")

    def run(self, args=None) -> int:
        """Run the CLI with the given arguments and return the exit status."""
        if args is None:
            args = sys.argv[1:]

        parsed_args = self.parser.parse_args(args)
        logging.getLogger().setLevel(parsed_args.log_level)

        try:
            config = RunConfig.from_args(parsed_args)
        except ValueError as e:
            logger.error(f"Invalid configuration: {e}")
            return 1

        logger.info(f"Running with config: {config}")

        try:
            summary = run_load_test(config)
        except KeyboardInterrupt:
            logger.info("Load test interrupted by user")
            return 1
        except Exception as e:
            logger.error(f"Error while running the workload: {e}")
            return 1

        log_report(summary)

        try:
            self.save_results(config, summary)
        except Exception as e:
            logger.error(f"Failed to save results: {e}")
            return 1

        return 0


def main():
    """Main entry point."""
    cli = RoadRunnerCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
