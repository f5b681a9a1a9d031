"""
Workload selection by name and construction per variant.
"""

import enum

from workloads.base import Workload, WorkloadParams
from workloads.get_set import GetSetWorkload
from workloads.gets_cas import GetsCasWorkload


class WorkloadKind(enum.Enum):
    GET_SET = "getset"
    GETS_CAS = "getscas"

    @classmethod
    def from_name(cls, name: str) -> "WorkloadKind":
        """Resolve a workload name given on the command line.

        Raises:
            ValueError: If no workload has that name
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            known = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown workload '{name}'. Available workloads: {known}") from None


def create_get_set_workload(params: WorkloadParams) -> GetSetWorkload:
    return GetSetWorkload(params)


def create_gets_cas_workload(params: WorkloadParams) -> GetsCasWorkload:
    return GetsCasWorkload(params)


_FACTORIES = {
    WorkloadKind.GET_SET: create_get_set_workload,
    WorkloadKind.GETS_CAS: create_gets_cas_workload,
}


def create_workload(kind: WorkloadKind, params: WorkloadParams) -> Workload:
    """Build one workload unit of the given kind."""
    return _FACTORIES[kind](params)
