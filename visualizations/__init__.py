"""
Plot visualization modules for load test results.
"""

from .base import BasePlotter
from .latency_plots import LatencyPlotter

__all__ = ['BasePlotter', 'LatencyPlotter']
