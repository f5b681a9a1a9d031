"""
Add/compare-and-swap mix.

A document is added under a fresh key, then loaded with its version token
("gets") and written back conditionally ("cas"), ``ratio`` times. Only gets
and cas are timed.
"""

from typing import Any

from workloads.base import Workload


class GetsCasWorkload(Workload):
    """Add once, then ``ratio`` rounds of gets + cas on the same key."""

    kind = "getscas"

    def run_iteration(self, key: str, sampled: bool) -> None:
        self.add_document(key)
        for _ in range(self.ratio):
            if sampled:
                token = self.timed("gets", self.gets_document, key)
                self.timed("cas", self.cas_document, key, token)
            else:
                token = self.gets_document(key)
                self.cas_document(key, token)

    def add_document(self, key: str) -> None:
        if not self.store.add(key, self.get_document()):
            self.logger.info(f"Workload {self.name}: key {key} already existed on add")
        self.incr_total_ops()

    def gets_document(self, key: str) -> Any:
        _, token = self.store.gets(key)
        self.incr_total_ops()
        return token

    def cas_document(self, key: str, token: Any) -> None:
        # A conflict still counts as an operation
        if not self.store.cas(key, self.get_document(), token):
            self.logger.info(f"Workload {self.name}: could not store with cas for key {key}")
        self.incr_total_ops()
