"""CD-k chain and gradient estimation.

Everything here is a pure function of the parameter set, the batch and the random source; the
parameters are mutated only by rbm_cd.update.apply_update.
"""
from dataclasses import dataclass
import logging
import numbers
import numpy as np
from rbm_cd.errors import InvalidArgument
from rbm_cd.parameter_set import ParameterSet
from rbm_cd.random_source import RandomSource
from rbm_cd.sampling import as_layer_states, sample_hidden_given_visible, gibbs_step

LOG = logging.getLogger('rbm_cd')


@dataclass(frozen=True)
class ChainStatistics:
    """Positive-phase and negative-phase statistics of one CD-k run."""
    input: np.ndarray
    pos_hidden_mean: np.ndarray
    pos_hidden_sample: np.ndarray
    neg_visible_mean: np.ndarray
    neg_visible_sample: np.ndarray
    neg_hidden_mean: np.ndarray
    neg_hidden_sample: np.ndarray

    @property
    def batch_size(self) -> int:
        return self.input.shape[0]


@dataclass(frozen=True)
class Gradients:
    """Additive parameter deltas, already scaled by the learning rate (and momentum for W)."""
    weights: np.ndarray
    visible_bias: np.ndarray
    hidden_bias: np.ndarray

    def norms(self) -> tuple[float, float, float]:
        return (float(np.linalg.norm(self.weights)), float(np.linalg.norm(self.visible_bias)),
                float(np.linalg.norm(self.hidden_bias)))


def validate_chain_length(k):
    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise InvalidArgument(f'Chain length k must be an integer, got {k!r}')
    if k < 1:
        raise InvalidArgument(f'Chain length k must be at least 1, got {k}')


def validate_learning_rate(learning_rate):
    if not np.isfinite(learning_rate) or learning_rate <= 0.:
        raise InvalidArgument(f'Learning rate must be positive, got {learning_rate}')


def run_chain(
    params: ParameterSet,
    batch,
    k: int,
    random_source: RandomSource
) -> ChainStatistics:
    """Positive phase followed by k Gibbs transitions started from the positive hidden sample."""
    validate_chain_length(k)
    batch = as_layer_states(batch, params.n_visible, 'visible')

    positive = sample_hidden_given_visible(params, batch, random_source)
    chain_state = positive.sample
    transition = None
    for _ in range(k):
        transition = gibbs_step(params, chain_state, random_source)
        chain_state = transition.hidden_sample

    LOG.debug('Ran CD-%d chain on a batch of %d', k, batch.shape[0])
    return ChainStatistics(
        input=batch,
        pos_hidden_mean=positive.mean,
        pos_hidden_sample=positive.sample,
        neg_visible_mean=transition.visible_mean,
        neg_visible_sample=transition.visible_sample,
        neg_hidden_mean=transition.hidden_mean,
        neg_hidden_sample=transition.hidden_sample
    )


def compute_gradients(
    stats: ChainStatistics,
    learning_rate: float,
    momentum: float = 1.
) -> Gradients:
    """Parameter deltas from the chain statistics.

    The positive weight term pairs the data with the sampled hidden states while the negative term
    pairs the chain's visible sample with the hidden means.
    """
    validate_learning_rate(learning_rate)
    positive = stats.input.T @ stats.pos_hidden_sample
    negative = stats.neg_visible_sample.T @ stats.neg_hidden_mean
    d_weights = (positive - negative) * learning_rate * momentum
    d_visible = np.mean(stats.input - stats.neg_visible_sample, axis=0) * learning_rate
    d_hidden = np.mean(stats.pos_hidden_sample - stats.neg_hidden_mean, axis=0) * learning_rate
    return Gradients(d_weights, d_visible, d_hidden)
