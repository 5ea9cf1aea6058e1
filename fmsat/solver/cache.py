from collections import deque
from typing import Deque, Iterator

from fmsat.core.types import Assignment

class BoundedModelCache:
    """
    Ring of recently found satisfying assignments. Capacity is fixed at
    construction; adding to a full cache evicts the oldest entry.
    Lookups are heuristics only: a hit proves satisfiability of what it
    witnesses, a miss proves nothing.
    """
    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._models: Deque[frozenset] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def add(self, assignment: Assignment):
        # Stored as sets for O(1) literal lookups; iteration hands back tuples
        self._models.append(frozenset(assignment))

    def contains_literal(self, value: int) -> bool:
        return any(value in m for m in self._models)

    def refutes(self, forcing: int, forced: int) -> bool:
        """True if a cached assignment has `forcing` without `forced`."""
        return any(forcing in m and -forced in m for m in self._models)

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self) -> Iterator[Assignment]:
        for m in self._models:
            yield tuple(sorted(m, key=abs))
