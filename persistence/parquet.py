"""
Parquet persistence for retained latency samples.
"""

import os
import logging
from typing import Optional
from datetime import datetime

from common.metrics_utils import AggregatedResult, measures_to_dataframe

logger = logging.getLogger(__name__)


class ParquetPersistence:
    """Saves the latency samples of a run to Parquet files for later analysis.

    Attributes:
        output_dir: Directory where Parquet files will be saved
    """

    def __init__(self, output_dir: str = "results"):
        """Initialize Parquet persistence.

        Args:
            output_dir: Directory for saving Parquet files (default: 'results')
        """
        self.output_dir: str = output_dir

        # Ensure output directory exists
        os.makedirs(output_dir, exist_ok=True)

    def save_measures(self, result: AggregatedResult, filename_prefix: str = "roadrunner") -> Optional[str]:
        """Save every retained sample of a run, one row per sample.

        Args:
            result: Aggregated result of the run
            filename_prefix: Prefix for the generated filename (default: 'roadrunner')

        Returns:
            Path to the saved file, or None if there are no samples
        """
        df = measures_to_dataframe(result.measures)
        if df.empty:
            logger.info("No latency samples to save")
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"{filename_prefix}_{timestamp}.parquet"
        filepath = os.path.join(self.output_dir, filename)

        logger.info(f"Saving {len(df)} samples to {filepath}")
        df.to_parquet(filepath, index=False)

        return filepath
