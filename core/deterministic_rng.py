"""Seeded random sources that never touch the global ``random`` state."""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass


def derive_seed(seed: int, name: str) -> int:
    """Stable 32-bit seed for stream ``name`` under a root ``seed``."""
    # built-in hash() is salted per process, sha256 is not
    digest = hashlib.sha256(f"{seed}:{name}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False) & 0xFFFFFFFF


@dataclass(frozen=True)
class DeterministicRNG:
    """Hands out independent, reproducible ``random.Random`` streams per trial.

    Each trial of a batch draws from its own stream, so trials running in
    parallel never interfere and a batch is reproducible from one seed.
    """

    seed: int

    def trial_stream(self, trial_index: int) -> random.Random:
        """Return a fresh, unshared stream for one trial of a batch."""
        return random.Random(derive_seed(self.seed, f"trial-{trial_index}"))
