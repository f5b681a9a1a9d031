"""
Read/write mix: one set followed by ``ratio`` gets of the same key.
"""

from workloads.base import Workload


class GetSetWorkload(Workload):
    """Stores a fresh document under each key, then reads it back ``ratio`` times."""

    kind = "getset"

    def run_iteration(self, key: str, sampled: bool) -> None:
        if sampled:
            self.timed("set", self.set_key, key)
            for _ in range(self.ratio):
                self.timed("get", self.get_key, key)
        else:
            self.set_key(key)
            for _ in range(self.ratio):
                self.get_key(key)

    def set_key(self, key: str) -> None:
        self.store.set(key, self.get_document())
        self.incr_total_ops()

    def get_key(self, key: str) -> None:
        self.store.get(key)
        self.incr_total_ops()
