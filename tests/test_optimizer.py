import logging
import numpy as np
import pytest
from rbm_cd.errors import InvalidArgument, MissingInput
from rbm_cd.model import RBM
from rbm_cd.optimizer import ConvergenceOptimizer


def test_runs_until_max_iterations(binary_batch):
    model = RBM.create(6, 4, seed=0)
    result = model.train_till_convergence(0.1, 1, binary_batch, tolerance=-np.inf,
                                          max_iterations=7)
    assert result.iterations == 7
    assert len(result.losses) == 7
    assert not result.converged


def test_converges_with_loose_tolerance(binary_batch):
    model = RBM.create(6, 4, seed=0)
    result = model.train_till_convergence(0.1, 1, binary_batch, tolerance=np.inf,
                                          max_iterations=50)
    assert result.converged
    assert result.iterations == 2


def test_batched_pass(binary_batch):
    model = RBM.create(6, 4, seed=0)
    optimizer = ConvergenceOptimizer(model, 0.1, 1, tolerance=-np.inf, max_iterations=3,
                                     batch_size=3)
    result = optimizer.optimize(binary_batch)
    assert result.iterations == 3
    # last batch of the pass is cached
    np.testing.assert_array_equal(model.input, binary_batch[6:])
    assert np.isfinite(result.best_loss)


def test_requires_data():
    model = RBM.create(6, 4, seed=0)
    with pytest.raises(MissingInput):
        ConvergenceOptimizer(model, 0.1).optimize()


@pytest.mark.parametrize('options', [{'k': 0}, {'max_iterations': 0}, {'patience': 0},
                                     {'batch_size': 0}])
def test_invalid_options(options):
    model = RBM.create(6, 4, seed=0)
    with pytest.raises(InvalidArgument):
        ConvergenceOptimizer(model, 0.1, **options)


def test_progress_logged_on_package_logger(binary_batch, caplog):
    model = RBM.create(6, 4, seed=0)
    with caplog.at_level(logging.INFO, logger='rbm_cd'):
        model.train_till_convergence(0.1, 1, binary_batch, tolerance=-np.inf, max_iterations=2)
    messages = [record.getMessage() for record in caplog.records if record.name == 'rbm_cd']
    assert any(message.startswith('Stopped after 2 iterations') for message in messages)
