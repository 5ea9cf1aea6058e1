from collections import deque
from itertools import combinations
from typing import Deque, List, Optional, Set, Tuple

import numpy as np

from fmsat.core.logging import get_logger
from fmsat.core.monitor import Monitor
from fmsat.core.types import OrderingPolicy
from fmsat.generator.types import BuilderConfiguration
from fmsat.model.feature_model import FeatureModel

logger = get_logger(__name__)

class ConfigurationSorter:
    """
    Buffer of configurations waiting to be built, handed out in insertion
    order. Subclasses choose the next configuration greedily from the whole
    buffer on every `take`; after `sort` the order is fixed.
    Not synchronized; the scheduler serializes access.
    """
    def __init__(self):
        self._buffer: Deque[BuilderConfiguration] = deque()
        self.sorted = False

    def add(self, cfg: BuilderConfiguration):
        self._buffer.append(cfg)

    def take(self) -> Optional[BuilderConfiguration]:
        if not self._buffer:
            return None
        if self.sorted:
            return self._buffer.popleft()
        return self._take_next()

    def _take_next(self) -> BuilderConfiguration:
        return self._buffer.popleft()

    def sort(self, monitor: Optional[Monitor] = None):
        """Orders the whole buffer once. A cancelled sort keeps the remaining items in insertion order."""
        ordered: List[BuilderConfiguration] = []
        while self._buffer:
            if monitor is not None and monitor.cancelled:
                break
            ordered.append(self._take_next())
        ordered.extend(self._buffer)
        self._buffer = deque(ordered)
        self.sorted = True

    def __len__(self) -> int:
        return len(self._buffer)

class DifferenceSorter(ConfigurationSorter):
    """
    Picks the configuration that differs most from everything handed out so
    far: largest minimum Hamming distance over +1/-1 vectors of the concrete
    features. The first pick is the configuration with the most features.
    """
    def __init__(self, model: FeatureModel):
        super().__init__()
        self._index = {n: i for i, n in enumerate(model.concrete_features())}
        self._taken: List[np.ndarray] = []

    def _vector(self, cfg: BuilderConfiguration) -> np.ndarray:
        v = -np.ones(len(self._index), dtype=np.int32)
        for name in cfg.features:
            i = self._index.get(name)
            if i is not None:
                v[i] = 1
        return v

    def _take_next(self) -> BuilderConfiguration:
        items = list(self._buffer)
        vectors = np.stack([self._vector(c) for c in items])
        if not self._taken:
            # argmax returns the first index on ties
            best = int(np.argmax((vectors > 0).sum(axis=1)))
        else:
            taken = np.stack(self._taken)
            # For +1/-1 vectors: hamming = (d - dot) / 2
            distances = (len(self._index) - vectors @ taken.T) // 2
            best = int(np.argmax(distances.min(axis=1)))
        del self._buffer[best]
        self._taken.append(vectors[best])
        return items[best]

class InteractionSorter(ConfigurationSorter):
    """
    Picks the configuration covering the most t-wise interactions (signed
    combinations of t concrete features) that no earlier pick covered.
    """
    def __init__(self, model: FeatureModel, t: int = 2):
        super().__init__()
        self.t = t
        self._features = model.concrete_features()
        self._covered: Set[Tuple[str, ...]] = set()

    def _interactions(self, cfg: BuilderConfiguration) -> Set[Tuple[str, ...]]:
        chosen = set(cfg.features)
        signed = [f if f in chosen else f"-{f}" for f in self._features]
        return set(combinations(signed, min(self.t, len(signed))))

    def _take_next(self) -> BuilderConfiguration:
        best, best_new, best_gain = 0, None, -1
        for i, cfg in enumerate(self._buffer):
            new = self._interactions(cfg) - self._covered
            if len(new) > best_gain:
                best, best_new, best_gain = i, new, len(new)
        cfg = self._buffer[best]
        del self._buffer[best]
        self._covered |= best_new
        return cfg

def create_sorter(policy: OrderingPolicy, model: FeatureModel, t: int = 2) -> ConfigurationSorter:
    if policy == OrderingPolicy.DIFFERENCE:
        return DifferenceSorter(model)
    if policy == OrderingPolicy.INTERACTION:
        return InteractionSorter(model, t)
    return ConfigurationSorter()
