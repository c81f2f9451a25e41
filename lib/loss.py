"""Monitoring losses."""
import numpy as np
from scipy.special import xlogy


def reconstruction_cross_entropy(visible, reconstruction) -> float:
    """Mean over the batch of the per-example binary cross-entropy between v and its
    reconstruction."""
    visible = np.asarray(visible, dtype=np.float64)
    reconstruction = np.asarray(reconstruction, dtype=np.float64)
    entropy = xlogy(visible, reconstruction) + xlogy(1. - visible, 1. - reconstruction)
    return float(-np.mean(np.sum(entropy, axis=1)))
