"""
Workload units and operation-mix algorithms.
"""

from .base import Workload, WorkloadParams, WorkloadState
from .factory import WorkloadKind, create_workload
from .get_set import GetSetWorkload
from .gets_cas import GetsCasWorkload

__all__ = [
    'Workload', 'WorkloadParams', 'WorkloadState', 'WorkloadKind', 'create_workload',
    'GetSetWorkload', 'GetsCasWorkload',
]
