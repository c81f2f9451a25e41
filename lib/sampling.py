"""Block Gibbs sampling between the visible and hidden layers of an RBM.

The arithmetic is offloaded to numba (CPU); uniform draws come from the caller's random source so
that the chain is reproducible and mockable.
"""
from typing import NamedTuple
import numpy as np
from numba import njit
from rbm_cd.errors import DimensionMismatch
from rbm_cd.parameter_set import ParameterSet
from rbm_cd.random_source import RandomSource


@njit
def sigmoid(x):
    # Only exp of non-positive arguments is evaluated
    z = np.exp(-np.abs(x))
    return np.where(x >= 0., 1. / (1. + z), z / (1. + z))


@njit
def bernoulli(uniforms, probs):
    return (uniforms < probs).astype(np.float64)


@njit
def h_activation(weights, bias_h, v_states):
    delta_e = v_states @ weights
    delta_e += bias_h[None, :]
    return sigmoid(delta_e)


@njit
def v_activation(weights, bias_v, h_states):
    delta_e = h_states @ weights.T
    delta_e += bias_v[None, :]
    return sigmoid(delta_e)


class MeanSamplePair(NamedTuple):
    """Activation probabilities of a layer and one Bernoulli draw from them."""
    mean: np.ndarray
    sample: np.ndarray


class GibbsTransition(NamedTuple):
    """One hidden -> visible -> hidden Markov step."""
    visible: MeanSamplePair
    hidden: MeanSamplePair

    @property
    def visible_mean(self) -> np.ndarray:
        return self.visible.mean

    @property
    def visible_sample(self) -> np.ndarray:
        return self.visible.sample

    @property
    def hidden_mean(self) -> np.ndarray:
        return self.hidden.mean

    @property
    def hidden_sample(self) -> np.ndarray:
        return self.hidden.sample


def as_layer_states(states, num_units: int, layer: str) -> np.ndarray:
    """Convert a batch to a C-contiguous float64 matrix with num_units columns."""
    states = np.asarray(states, dtype=np.float64)
    if states.ndim == 1:
        states = states[None, :]
    if states.ndim != 2 or states.shape[1] != num_units:
        raise DimensionMismatch(
            f'{layer} states of shape {states.shape} do not match the {num_units} {layer} units'
        )
    if states.shape[0] == 0:
        raise DimensionMismatch(f'Empty batch of {layer} states')
    return np.ascontiguousarray(states)


def draw_binary(random_source: RandomSource, probs: np.ndarray) -> np.ndarray:
    """One uniform draw per entry; each entry is 1 with probability equal to its mean."""
    uniforms = np.asarray(random_source.random(probs.shape), dtype=np.float64)
    return bernoulli(uniforms, probs)


def propagate_up(params: ParameterSet, visible) -> np.ndarray:
    """sigmoid(v W + b_h)."""
    visible = as_layer_states(visible, params.n_visible, 'visible')
    return h_activation(params.weights, params.hidden_bias, visible)


def propagate_down(params: ParameterSet, hidden) -> np.ndarray:
    """sigmoid(h W^T + b_v)."""
    hidden = as_layer_states(hidden, params.n_hidden, 'hidden')
    return v_activation(params.weights, params.visible_bias, hidden)


def sample_hidden_given_visible(
    params: ParameterSet,
    visible,
    random_source: RandomSource
) -> MeanSamplePair:
    h_mean = propagate_up(params, visible)
    h_sample = draw_binary(random_source, h_mean)
    return MeanSamplePair(h_mean, h_sample)


def sample_visible_given_hidden(
    params: ParameterSet,
    hidden,
    random_source: RandomSource
) -> MeanSamplePair:
    v_mean = propagate_down(params, hidden)
    v_sample = draw_binary(random_source, v_mean)
    return MeanSamplePair(v_mean, v_sample)


def gibbs_step(params: ParameterSet, hidden_sample, random_source: RandomSource) -> GibbsTransition:
    """Sample the visible layer from the hidden sample, then the hidden layer from that visible
    sample."""
    visible = sample_visible_given_hidden(params, hidden_sample, random_source)
    hidden = sample_hidden_given_visible(params, visible.sample, random_source)
    return GibbsTransition(visible, hidden)


def reconstruct(params: ParameterSet, visible) -> np.ndarray:
    """Deterministic mean-field reconstruction of the visible layer."""
    return propagate_down(params, propagate_up(params, visible))
