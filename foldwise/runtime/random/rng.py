from __future__ import annotations
import hashlib
import numpy as np
from numpy.random import Generator

class RngManager:
    """
    Single source of truth for randomness.
    Creates named, order-independent child seeds/streams by hashing:
      child_seed(name)       -> stable int seed
      child_generator(name)  -> np.random.Generator seeded from that int

    Nothing here touches numpy's global random state, so the seed a fold or
    stratum receives depends only on the root seed and its name, never on
    which thread asks first.
    """
    def __init__(self, seed: int | None):
        self._root = 0 if seed is None else int(seed) & 0xFFFFFFFF

    @property
    def root(self) -> int:
        return self._root

    def _mix(self, name: str) -> int:
        h = hashlib.sha256(f"{self._root}:{name}".encode("utf-8")).digest()
        # 32 bits: sklearn estimators reject random_state >= 2**32
        return int.from_bytes(h[:4], "little", signed=False)

    def child_seed(self, name: str) -> int:
        return self._mix(name)

    def child_generator(self, name: str) -> Generator:
        return np.random.default_rng(self._mix(name))

    def child(self, name: str) -> "RngManager":
        """Return a manager rooted at ``child_seed(name)`` (for nested streams)."""
        return RngManager(self._mix(name))

    def fold_seed(self, fold_id: int, repeat: int = 1) -> int:
        name = f"fold{fold_id}" if repeat == 1 else f"repeat{repeat}/fold{fold_id}"
        return self._mix(name)
