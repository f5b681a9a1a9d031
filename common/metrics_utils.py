"""
Shared utilities for benchmark metrics: merging latency samples, percentiles, throughput.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

import pandas as pd

from configuration import (
    REPORT_PERCENTILES,
    MICROSECONDS_PER_SECOND,
)


Measures = Dict[str, List[float]]


@dataclass
class AggregatedResult:
    """Process-wide merge of every client handle's results.

    Attributes:
        measures: Operation kind -> latency samples in seconds
        total_ops: Operations executed, sampled or not
        measured_ops: Latency samples retained after ramp-up
        thread_elapsed: Lifetime in seconds of every workload unit
    """

    measures: Measures = field(default_factory=dict)
    total_ops: int = 0
    measured_ops: int = 0
    thread_elapsed: List[float] = field(default_factory=list)

    def merge(self, other: "AggregatedResult") -> "AggregatedResult":
        """Return a new result combining this one with ``other``."""
        measures = merge_measures([self.measures, other.measures])
        return AggregatedResult(
            measures=measures,
            total_ops=self.total_ops + other.total_ops,
            measured_ops=self.measured_ops + other.measured_ops,
            thread_elapsed=list(self.thread_elapsed) + list(other.thread_elapsed),
        )


def merge_measures(measures_list: Iterable[Measures]) -> Measures:
    """
    Merge per-kind latency samples by concatenating them in the given order.

    Every kind present in any input appears in the result. The inputs are not
    modified and the result shares no list with them.

    Args:
        measures_list: Measure maps to merge

    Returns:
        New map of kind -> concatenated samples
    """
    merged: Measures = {}
    for measures in measures_list:
        for kind, samples in measures.items():
            merged.setdefault(kind, []).extend(samples)
    return merged


def measures_to_dataframe(measures: Measures) -> pd.DataFrame:
    """
    Flatten a measure map into one row per sample.

    Args:
        measures: Operation kind -> latency samples in seconds

    Returns:
        DataFrame with 'kind' and 'latency_us' columns
    """
    rows = [
        {'kind': kind, 'latency_us': sample * MICROSECONDS_PER_SECOND}
        for kind, samples in measures.items()
        for sample in samples
    ]
    return pd.DataFrame(rows, columns=['kind', 'latency_us'])


def calculate_latency_stats(
    latencies: Sequence[float],
    percentiles: Sequence[int] = REPORT_PERCENTILES,
) -> dict:
    """
    Calculate latency statistics (count, mean and percentiles) in microseconds.

    Args:
        latencies: Latency samples in seconds
        percentiles: Percentiles to compute, 0-100

    Returns:
        Dictionary with count, avg, min, max and one 'p<N>' entry per percentile
    """
    if len(latencies) == 0:
        stats = {'count': 0, 'avg': 0.0, 'min': 0.0, 'max': 0.0}
        stats.update({f'p{p}': 0.0 for p in percentiles})
        return stats

    series = pd.Series(latencies, dtype='float64') * MICROSECONDS_PER_SECOND

    stats = {
        'count': int(series.count()),
        'avg': float(series.mean()),
        'min': float(series.min()),
        'max': float(series.max()),
    }
    for p in percentiles:
        stats[f'p{p}'] = float(series.quantile(p / 100))
    return stats


def calculate_ops_per_second(op_count: int, duration_seconds: float) -> float:
    """
    Calculate operations per second from an operation count and duration.

    Args:
        op_count: Number of operations
        duration_seconds: Duration in seconds

    Returns:
        Operations per second, 0 for a non-positive duration
    """
    if duration_seconds <= 0:
        return 0.0
    return op_count / duration_seconds


def split_documents(num_docs: int, num_clients: int, num_threads: int) -> dict:
    """
    Work out how documents are spread over client handles and their workload units.

    The split uses floor division at both levels; the remainder is dropped.

    Args:
        num_docs: Total documents configured
        num_clients: Number of client handles
        num_threads: Workload units per client handle

    Returns:
        Dictionary with docs_per_handle, docs_per_unit, planned_docs and dropped_docs
    """
    docs_per_handle = num_docs // num_clients
    docs_per_unit = docs_per_handle // num_threads
    planned_docs = docs_per_unit * num_threads * num_clients
    return {
        'docs_per_handle': docs_per_handle,
        'docs_per_unit': docs_per_unit,
        'planned_docs': planned_docs,
        'dropped_docs': num_docs - planned_docs,
    }
