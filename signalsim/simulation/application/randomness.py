"""
Seeded random source for the stochastic arrival/service processes.
"""
from typing import Optional

import numpy as np


def clamp_probability(rate: float) -> float:
    """Rates are per-tick probabilities; anything >= 1 is a guaranteed event."""
    return min(1.0, max(0.0, float(rate)))


class NumpyBernoulliSource:
    """
    Bernoulli trials backed by a numpy Generator.
    Two sources created with the same seed produce the same sequence.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def trial(self, probability: float) -> int:
        p = clamp_probability(probability)
        # random() lies in [0, 1): p == 1.0 always fires, p == 0.0 never does
        return 1 if self._rng.random() < p else 0
