"""
Deduplication registry for type declarations.
"""

from __future__ import annotations

import threading


class DeduplicationRegistry:
    """Tracks the type names already claimed for emission within one scope.

    The registry is only mutated while sections are planned. It is safe to
    share between services generated in parallel: claims are serialized by a
    single lock.

    A registry staged from another one sees the claims of its parent but
    records its own claims separately until they are committed.
    """

    def __init__(self, scope: str = "service", parent: DeduplicationRegistry | None = None):
        self.scope = scope
        self._parent = parent
        self._claimed: set[str] = set()
        self._lock = threading.Lock()

    def claim_or_skip(self, name: str) -> bool:
        """
        Claim a qualified type name.

        Args:
            name: Qualified type name

        Returns:
            True the first time the name is claimed within the scope,
            False for every later claim of the same name
        """
        with self._lock:
            if name in self._claimed or (self._parent is not None and self._parent.is_claimed(name)):
                return False
            self._claimed.add(name)
            return True

    def is_claimed(self, name: str) -> bool:
        with self._lock:
            if name in self._claimed:
                return True
        return self._parent is not None and self._parent.is_claimed(name)

    def stage(self) -> DeduplicationRegistry:
        """Registry whose claims only count in this one once committed."""
        return DeduplicationRegistry(self.scope, parent=self)

    def commit(self) -> None:
        """Record the claims of a staged registry in its parent."""
        if self._parent is None:
            raise RuntimeError("Only a staged registry can be committed")
        with self._lock:
            names = sorted(self._claimed)
        self._parent._claim_all(names)

    def _claim_all(self, names: list[str]) -> None:
        with self._lock:
            self._claimed.update(names)

    def __len__(self) -> int:
        with self._lock:
            return len(self._claimed)
