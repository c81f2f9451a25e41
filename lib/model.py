"""RBM model: a parameter set together with the training state that drives CD-k on it."""
import logging
import threading
from typing import Optional
import numpy as np
from rbm_cd.contrastive_divergence import (Gradients, run_chain, compute_gradients,
                                           validate_chain_length, validate_learning_rate)
from rbm_cd.errors import InvalidArgument, MissingInput
from rbm_cd.loss import reconstruction_cross_entropy
from rbm_cd.parameter_set import ParameterSet
from rbm_cd.random_source import RandomSource, make_random_source
from rbm_cd import sampling
from rbm_cd.update import Regularizer, apply_update, l2_weight_decay, no_regularization

LOG = logging.getLogger('rbm_cd')


class RBM:
    """Bernoulli-Bernoulli restricted Boltzmann machine trained with k-step contrastive divergence.

    Training calls on one instance are serialized with an internal lock; the random source and
    the parameter arrays are shared by all of them.
    """
    def __init__(
        self,
        params: ParameterSet,
        random_source: Optional[RandomSource] = None,
        momentum: float = 1.,
        l2: float = 0.,
        use_regularization: bool = False,
        check_finite: bool = True
    ):
        if l2 < 0.:
            raise InvalidArgument(f'L2 coefficient must be non-negative, got {l2}')

        self.params = params
        self.random_source = make_random_source() if random_source is None else random_source
        self.momentum = momentum
        self.l2 = l2
        self.use_regularization = use_regularization
        self.check_finite = check_finite
        self.input: Optional[np.ndarray] = None
        self._lock = threading.RLock()

    @classmethod
    def create(cls, n_visible: int, n_hidden: int, seed: Optional[int] = None, **kwargs) -> 'RBM':
        rng = make_random_source(seed)
        return cls(ParameterSet.initialize(n_visible, n_hidden, rng), random_source=rng, **kwargs)

    @property
    def n_visible(self) -> int:
        return self.params.n_visible

    @property
    def n_hidden(self) -> int:
        return self.params.n_hidden

    @property
    def regularizer(self) -> Regularizer:
        if self.use_regularization:
            return l2_weight_decay(self.l2)
        return no_regularization

    def propagate_up(self, visible):
        return sampling.propagate_up(self.params, visible)

    def propagate_down(self, hidden):
        return sampling.propagate_down(self.params, hidden)

    def sample_hidden_given_visible(self, visible):
        return sampling.sample_hidden_given_visible(self.params, visible, self.random_source)

    def sample_visible_given_hidden(self, hidden):
        return sampling.sample_visible_given_hidden(self.params, hidden, self.random_source)

    def gibbs_step(self, hidden_sample):
        return sampling.gibbs_step(self.params, hidden_sample, self.random_source)

    def reconstruct(self, visible):
        return sampling.reconstruct(self.params, visible)

    def contrastive_divergence(self, learning_rate: float, k: int = 1, input=None) -> Gradients:
        """Run one CD-k step on the batch (or on the cached batch) and update the parameters.

        Args:
            learning_rate: Step size.
            k: Number of Gibbs transitions in the negative phase.
            input: Batch of visible states, one example per row. When None, the batch of the
                previous call is reused.

        Returns:
            The gradients that were added to the parameters.
        """
        validate_chain_length(k)
        validate_learning_rate(learning_rate)

        with self._lock:
            if input is None:
                if self.input is None:
                    raise MissingInput('No input given and no batch cached from a previous call')
                batch = self.input
            else:
                batch = sampling.as_layer_states(input, self.n_visible, 'visible')

            stats = run_chain(self.params, batch, k, self.random_source)
            gradients = compute_gradients(stats, learning_rate, self.momentum)
            apply_update(self.params, gradients, learning_rate, stats.batch_size,
                         regularizer=self.regularizer, check_finite=self.check_finite)
            self.input = stats.input

        if LOG.isEnabledFor(logging.DEBUG):
            LOG.debug('CD-%d update norms (W, vbias, hbias): %.3e %.3e %.3e', k,
                      *gradients.norms())
        return gradients

    def train(self, input, learning_rate: float, k: int = 1) -> Gradients:
        return self.contrastive_divergence(learning_rate, k, input)

    def loss_function(self) -> float:
        """Reconstruction cross-entropy of the cached batch."""
        if self.input is None:
            raise MissingInput('No batch cached; call train first')
        return reconstruction_cross_entropy(self.input, self.reconstruct(self.input))

    def train_till_convergence(self, learning_rate: float, k: int, input=None, **kwargs):
        # pylint: disable-next=import-outside-toplevel
        from rbm_cd.optimizer import ConvergenceOptimizer
        optimizer = ConvergenceOptimizer(self, learning_rate, k, **kwargs)
        return optimizer.optimize(input)
