"""In-place application of CD-k gradients to a parameter set."""
from collections.abc import Callable
import logging
import numpy as np
from rbm_cd.contrastive_divergence import Gradients
from rbm_cd.errors import DimensionMismatch, InvalidArgument, NumericInstability
from rbm_cd.parameter_set import ParameterSet

LOG = logging.getLogger('rbm_cd')

Regularizer = Callable[[np.ndarray, float, int], np.ndarray]


def no_regularization(weights, learning_rate, batch_size):
    # pylint: disable=unused-argument
    return weights


def l2_weight_decay(l2: float) -> Regularizer:
    """W -> W - W * l2 * learning_rate / batch_size."""
    if l2 < 0.:
        raise InvalidArgument(f'L2 coefficient must be non-negative, got {l2}')

    def regularize(weights, learning_rate, batch_size):
        return weights - weights * (l2 * learning_rate / batch_size)

    return regularize


def apply_update(
    params: ParameterSet,
    gradients: Gradients,
    learning_rate: float,
    batch_size: int,
    regularizer: Regularizer = no_regularization,
    check_finite: bool = True
):
    """Add the gradients to the parameters, regularizing W after the CD update.

    New values are computed and validated before anything is written, so either all three arrays
    change or none does.
    """
    with params.update_window():
        if (gradients.weights.shape != params.weights.shape
                or gradients.visible_bias.shape != params.visible_bias.shape
                or gradients.hidden_bias.shape != params.hidden_bias.shape):
            raise DimensionMismatch('Gradient shapes do not match the parameter set')

        weights = regularizer(params.weights + gradients.weights, learning_rate, batch_size)
        visible_bias = params.visible_bias + gradients.visible_bias
        hidden_bias = params.hidden_bias + gradients.hidden_bias

        if check_finite:
            for name, value in [('weights', weights), ('visible_bias', visible_bias),
                                ('hidden_bias', hidden_bias)]:
                if not np.all(np.isfinite(value)):
                    LOG.error('Non-finite %s after update; parameters left unchanged', name)
                    raise NumericInstability(f'Update produced non-finite values in {name}')

        np.copyto(params.weights, weights)
        np.copyto(params.visible_bias, visible_bias)
        np.copyto(params.hidden_bias, hidden_bias)
