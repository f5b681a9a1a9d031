"""
Latency visualization plots.
"""

import matplotlib
matplotlib.use('Agg')

import matplotlib.pyplot as plt
import numpy as np
import logging
import os

from .base import BasePlotter
from configuration import REPORT_PERCENTILES

logger = logging.getLogger(__name__)


class LatencyPlotter(BasePlotter):
    """Plotter for per-operation latency distributions."""

    def create_latency_histogram(self):
        """Create latency histograms (linear and log scale) per operation kind."""
        if not self.has_data():
            logger.warning("No data available for latency histogram")
            return None

        try:
            colors = self.get_kind_colors()

            fig, axes = plt.subplots(1, 2, figsize=(16, 6))
            fig.suptitle('Latency Distribution by Operation', fontsize=16, fontweight='bold')

            for kind in self.get_operation_kinds():
                latencies = self.data[self.data['kind'] == kind]['latency_us']
                axes[0].hist(latencies, bins=50, alpha=0.6, label=kind, color=colors[kind])
                axes[1].hist(latencies, bins=50, alpha=0.6, label=kind, color=colors[kind])

            axes[0].set_title('Latency Distribution', fontsize=12)
            axes[1].set_title('Latency Distribution (Log Scale)', fontsize=12)
            axes[1].set_yscale('log')
            for ax in axes:
                ax.set_xlabel('Latency (µs)')
                ax.set_ylabel('Frequency')
                ax.grid(True, alpha=0.3)
                ax.legend()

            plt.tight_layout()

            output_file = os.path.join(self.output_dir, 'latency_histogram.png')
            plt.savefig(output_file, dpi=150, bbox_inches='tight')
            plt.close(fig)

            logger.info(f"Created latency histogram: {output_file}")
            return output_file

        except Exception as e:
            logger.error(f"Failed to create latency histogram: {e}")
            plt.close('all')
            return None

    def create_latency_cdf(self):
        """Create a cumulative distribution plot per operation kind with percentile markers."""
        if not self.has_data():
            logger.warning("No data available for latency CDF")
            return None

        try:
            colors = self.get_kind_colors()

            fig, ax = plt.subplots(figsize=(12, 8))
            for kind in self.get_operation_kinds():
                sorted_latencies = np.sort(self.data[self.data['kind'] == kind]['latency_us'].values)
                y = np.arange(1, len(sorted_latencies) + 1) / len(sorted_latencies)
                ax.plot(sorted_latencies, y, linewidth=2, label=kind, color=colors[kind])

            for p in REPORT_PERCENTILES:
                ax.axhline(p / 100, color='gray', linestyle='--', alpha=0.5)
                ax.text(ax.get_xlim()[1], p / 100, f' p{p}', va='center', fontsize=9)

            ax.set_title('Cumulative Latency Distribution', fontsize=14, fontweight='bold')
            ax.set_xlabel('Latency (µs)')
            ax.set_ylabel('Cumulative Probability')
            ax.grid(True, alpha=0.3)
            ax.legend()

            output_file = os.path.join(self.output_dir, 'latency_cdf.png')
            plt.savefig(output_file, dpi=150, bbox_inches='tight')
            plt.close(fig)

            logger.info(f"Created latency CDF: {output_file}")
            return output_file

        except Exception as e:
            logger.error(f"Failed to create latency CDF: {e}")
            plt.close('all')
            return None

    def create_all_plots(self):
        """Create every latency plot and return the written file paths."""
        os.makedirs(self.output_dir, exist_ok=True)
        files = [self.create_latency_histogram(), self.create_latency_cdf()]
        return [f for f in files if f]
