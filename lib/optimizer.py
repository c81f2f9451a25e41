"""Training loop that repeats CD-k updates until the reconstruction loss stops improving."""
from dataclasses import dataclass, field
import logging
from typing import Optional
import numpy as np
from rbm_cd.contrastive_divergence import validate_chain_length, validate_learning_rate
from rbm_cd.errors import InvalidArgument, MissingInput, RBMError
from rbm_cd.loss import reconstruction_cross_entropy
from rbm_cd.sampling import as_layer_states

LOG = logging.getLogger('rbm_cd')


@dataclass
class OptimizationResult:
    iterations: int = 0
    losses: list[float] = field(default_factory=list)
    converged: bool = False

    @property
    def best_loss(self) -> float:
        return min(self.losses) if self.losses else np.inf


class ConvergenceOptimizer:
    """Drives RBM.train over the data set until the loss improvement falls below tolerance.

    One iteration is a pass over the data, batch by batch in order when batch_size is set. The
    loop stops after `patience` consecutive iterations without an improvement of at least
    `tolerance` over the best loss so far, or after max_iterations.
    """
    def __init__(
        self,
        model,
        learning_rate: float,
        k: int = 1,
        tolerance: float = 1.e-4,
        max_iterations: int = 1000,
        patience: int = 1,
        batch_size: Optional[int] = None
    ):
        validate_learning_rate(learning_rate)
        validate_chain_length(k)
        if max_iterations < 1:
            raise InvalidArgument(f'max_iterations must be positive, got {max_iterations}')
        if patience < 1:
            raise InvalidArgument(f'patience must be positive, got {patience}')
        if batch_size is not None and batch_size < 1:
            raise InvalidArgument(f'batch_size must be positive, got {batch_size}')

        self.model = model
        self.learning_rate = learning_rate
        self.k = k
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.patience = patience
        self.batch_size = batch_size

    def batches(self, data: np.ndarray):
        if self.batch_size is None:
            yield data
            return
        for start in range(0, data.shape[0], self.batch_size):
            yield data[start:start + self.batch_size]

    def loss(self, data: np.ndarray) -> float:
        if self.batch_size is None:
            return self.model.loss_function()
        return reconstruction_cross_entropy(data, self.model.reconstruct(data))

    def optimize(self, data=None) -> OptimizationResult:
        if data is None:
            if self.model.input is None:
                raise MissingInput('No training data given and no batch cached in the model')
            data = self.model.input
        data = as_layer_states(data, self.model.n_visible, 'visible')

        result = OptimizationResult()
        best = np.inf
        stale = 0
        for iteration in range(self.max_iterations):
            try:
                for batch in self.batches(data):
                    self.model.train(batch, self.learning_rate, self.k)
            except RBMError:
                LOG.error('Training failed at iteration %d', iteration)
                raise

            loss = self.loss(data)
            result.iterations = iteration + 1
            result.losses.append(loss)
            LOG.debug('Iteration %d: reconstruction cross-entropy %f', iteration, loss)

            if best - loss < self.tolerance:
                stale += 1
            else:
                stale = 0
            best = min(best, loss)

            if stale >= self.patience:
                result.converged = True
                break

        if result.converged:
            LOG.info('Converged after %d iterations, loss %f', result.iterations, best)
        else:
            LOG.info('Stopped after %d iterations without converging, loss %f',
                     result.iterations, best)
        return result
