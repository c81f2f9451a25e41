"""Weights and biases of a Bernoulli-Bernoulli RBM."""
from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
import threading
from typing import Optional
import numpy as np
import h5py
from rbm_cd.errors import DimensionMismatch

LOG = logging.getLogger('rbm_cd')


@dataclass(eq=False)
class ParameterSet:
    """Weight matrix (n_visible x n_hidden) and the two bias vectors.

    The arrays are mutated in place by training; their shapes are fixed at construction.
    """
    weights: np.ndarray
    hidden_bias: np.ndarray
    visible_bias: np.ndarray
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def __post_init__(self):
        self.weights = np.array(self.weights, dtype=np.float64, order='C')
        self.hidden_bias = np.array(self.hidden_bias, dtype=np.float64).reshape(-1)
        self.visible_bias = np.array(self.visible_bias, dtype=np.float64).reshape(-1)

        if self.weights.ndim != 2:
            raise DimensionMismatch(f'weights must be a matrix, got shape {self.weights.shape}')
        if self.weights.shape != (self.visible_bias.shape[0], self.hidden_bias.shape[0]):
            raise DimensionMismatch(
                f'weights shape {self.weights.shape} does not match biases '
                f'(visible {self.visible_bias.shape[0]}, hidden {self.hidden_bias.shape[0]})'
            )

    @property
    def n_visible(self) -> int:
        return self.weights.shape[0]

    @property
    def n_hidden(self) -> int:
        return self.weights.shape[1]

    @classmethod
    def zeros(cls, n_visible: int, n_hidden: int) -> 'ParameterSet':
        return cls(np.zeros((n_visible, n_hidden)), np.zeros(n_hidden), np.zeros(n_visible))

    @classmethod
    def initialize(
        cls,
        n_visible: int,
        n_hidden: int,
        rng: Optional[np.random.Generator] = None
    ) -> 'ParameterSet':
        """Uniform weights in [-1/n_visible, 1/n_visible] and zero biases."""
        if rng is None:
            rng = np.random.default_rng()
        scale = 1. / n_visible
        weights = rng.uniform(-scale, scale, size=(n_visible, n_hidden))
        return cls(weights, np.zeros(n_hidden), np.zeros(n_visible))

    def copy(self) -> 'ParameterSet':
        with self._lock:
            return ParameterSet(self.weights.copy(), self.hidden_bias.copy(),
                                self.visible_bias.copy())

    @contextmanager
    def update_window(self):
        """Hold exclusive access to the arrays for the duration of a multi-field update."""
        with self._lock:
            yield self

    def save(self, group: h5py.Group):
        with self._lock:
            group.create_dataset('weights', data=self.weights)
            group.create_dataset('hidden_bias', data=self.hidden_bias)
            group.create_dataset('visible_bias', data=self.visible_bias)

    @classmethod
    def load(cls, group: h5py.Group) -> 'ParameterSet':
        params = cls(group['weights'][()], group['hidden_bias'][()], group['visible_bias'][()])
        LOG.debug('Loaded parameters with %d visible and %d hidden units',
                  params.n_visible, params.n_hidden)
        return params
