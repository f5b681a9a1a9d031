"""
Turns an aggregated result into percentile, throughput and thread statistics.
"""

import logging
from typing import Any, Dict, Optional

from common.metrics_utils import (
    AggregatedResult,
    calculate_latency_stats,
    calculate_ops_per_second,
)
from configuration import REPORT_PERCENTILES, MILLISECONDS_PER_SECOND

logger = logging.getLogger(__name__)


def summarize(result: AggregatedResult, elapsed_seconds: float) -> Dict[str, Any]:
    """Build the run summary.

    Args:
        result: Aggregated result of the run
        elapsed_seconds: Wall-clock duration of the whole dispatch

    Returns:
        Dictionary with totals, throughput, per-kind latency stats (microseconds)
        and the shortest/longest workload unit (milliseconds)
    """
    thread_ms = [t * MILLISECONDS_PER_SECOND for t in result.thread_elapsed]

    return {
        'total_ops': result.total_ops,
        'measured_ops': result.measured_ops,
        'elapsed_ms': elapsed_seconds * MILLISECONDS_PER_SECOND,
        'ops_per_second': calculate_ops_per_second(result.total_ops, elapsed_seconds),
        'latency': {
            kind: calculate_latency_stats(samples)
            for kind, samples in sorted(result.measures.items())
        },
        'shortest_thread_ms': min(thread_ms) if thread_ms else 0.0,
        'longest_thread_ms': max(thread_ms) if thread_ms else 0.0,
    }


def log_report(summary: Dict[str, Any], log: Optional[logging.Logger] = None) -> None:
    """Log the run summary."""
    log = log or logger

    log.info("==== RESULTS ====")
    log.info(
        f"Operations: measured {summary['measured_ops']} ops out of total {summary['total_ops']} ops."
    )
    for kind, stats in summary['latency'].items():
        log.info(f"Percentile (microseconds) for \"{kind}\" workload ({stats['count']} samples):")
        log.info("   " + "   ".join(f"{p}%: {stats[f'p{p}']:.2f}" for p in REPORT_PERCENTILES))
    log.info(f"Elapsed: {summary['elapsed_ms']:.0f}ms")
    log.info(f"Throughput: {summary['ops_per_second']:.1f} ops/s")
    log.info(f"Shortest Thread: {summary['shortest_thread_ms']:.0f}ms")
    log.info(f"Longest Thread: {summary['longest_thread_ms']:.0f}ms")
