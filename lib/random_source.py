"""Random sources consumed by the Gibbs sampling kernel.

A random source is any object with a ``random(shape)`` method returning an array of independent
uniform draws in [0, 1). ``numpy.random.Generator`` satisfies this directly.
"""
from typing import Optional, Protocol
import numpy as np


class RandomSource(Protocol):
    def random(self, size) -> np.ndarray:
        ...


def make_random_source(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(seed)
