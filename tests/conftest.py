import numpy as np
import pytest
from rbm_cd.parameter_set import ParameterSet


class ThresholdSource:
    """Uniform draws fixed just below 0.5: an entry samples to 1 exactly when its mean is >= 0.5."""
    def random(self, size):
        return np.full(size, np.nextafter(0.5, 0.))


@pytest.fixture
def threshold_source():
    return ThresholdSource()


@pytest.fixture
def zero_params():
    return ParameterSet.zeros(3, 2)


@pytest.fixture
def random_params():
    return ParameterSet.initialize(6, 4, np.random.default_rng(12))


@pytest.fixture
def binary_batch():
    rng = np.random.default_rng(3)
    return (rng.random((8, 6)) < 0.5).astype(np.float64)
