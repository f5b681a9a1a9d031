"""
Common utilities for the RoadRunner load tester.
"""

from .run_config import RunConfig
from .slot_semaphore import SlotSemaphore
from .worker_pool import WorkerPool

__all__ = ['RunConfig', 'SlotSemaphore', 'WorkerPool']
