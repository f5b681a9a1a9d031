"""
Base classes for plot visualization.
"""

import pandas as pd
import logging

logger = logging.getLogger(__name__)


class BasePlotter:
    """Base class for all plotters; data holds one row per latency sample ('kind', 'latency_us')."""

    def __init__(self, data: pd.DataFrame, output_dir: str):
        self.data = data
        self.output_dir = output_dir

    def has_data(self) -> bool:
        return self.data is not None and len(self.data) > 0

    def get_operation_kinds(self):
        """Get operation kinds present in the data, sorted."""
        if not self.has_data():
            return []
        return sorted(self.data['kind'].unique())

    def get_kind_colors(self):
        """Generate color map for operation kinds."""
        import matplotlib.pyplot as plt
        kinds = self.get_operation_kinds()
        kind_colors = plt.cm.Set1(range(len(kinds)))
        return dict(zip(kinds, kind_colors))
