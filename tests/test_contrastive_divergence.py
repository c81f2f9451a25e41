import numpy as np
import pytest
from rbm_cd.contrastive_divergence import ChainStatistics, run_chain, compute_gradients
from rbm_cd.errors import DimensionMismatch, InvalidArgument
from rbm_cd.sampling import propagate_up, sample_hidden_given_visible, gibbs_step


def test_worked_example(zero_params, threshold_source):
    batch = [[1., 0., 1.]]
    np.testing.assert_array_equal(propagate_up(zero_params, batch), [[0.5, 0.5]])

    stats = run_chain(zero_params, batch, 1, threshold_source)
    np.testing.assert_array_equal(stats.pos_hidden_sample, [[1., 1.]])
    np.testing.assert_array_equal(stats.neg_visible_sample, [[1., 1., 1.]])
    np.testing.assert_array_equal(stats.neg_hidden_mean, [[0.5, 0.5]])
    assert stats.batch_size == 1

    gradients = compute_gradients(stats, 0.1, momentum=1.)
    np.testing.assert_allclose(gradients.weights, [[0.05, 0.05], [-0.05, -0.05], [0.05, 0.05]])
    np.testing.assert_allclose(gradients.visible_bias, [0., -0.1, 0.])
    np.testing.assert_allclose(gradients.hidden_bias, [0.05, 0.05])


def test_chain_uses_last_transition(random_params, binary_batch):
    stats = run_chain(random_params, binary_batch, 3, np.random.default_rng(1))
    rng = np.random.default_rng(1)
    # Replay the same draws by hand
    state = sample_hidden_given_visible(random_params, binary_batch, rng).sample
    for _ in range(3):
        transition = gibbs_step(random_params, state, rng)
        state = transition.hidden_sample
    np.testing.assert_array_equal(stats.neg_visible_sample, transition.visible_sample)
    np.testing.assert_array_equal(stats.neg_hidden_mean, transition.hidden_mean)
    np.testing.assert_array_equal(stats.neg_hidden_sample, transition.hidden_sample)


@pytest.mark.parametrize('k', [0, -1, 1.5, True])
def test_invalid_chain_length(zero_params, threshold_source, k):
    with pytest.raises(InvalidArgument):
        run_chain(zero_params, [[1., 0., 1.]], k, threshold_source)


def test_invalid_learning_rate(zero_params, threshold_source):
    stats = run_chain(zero_params, [[1., 0., 1.]], 1, threshold_source)
    with pytest.raises(InvalidArgument):
        compute_gradients(stats, 0.)


def test_input_width_checked(zero_params, threshold_source):
    with pytest.raises(DimensionMismatch):
        run_chain(zero_params, [[1., 0.]], 1, threshold_source)


def test_visible_gradient_zero_when_chain_reproduces_input():
    batch = np.array([[1., 0., 1.], [0., 1., 1.]])
    hidden = np.array([[1., 0.], [0., 1.]])
    stats = ChainStatistics(input=batch, pos_hidden_mean=hidden, pos_hidden_sample=hidden,
                            neg_visible_mean=batch, neg_visible_sample=batch.copy(),
                            neg_hidden_mean=hidden * 0.5, neg_hidden_sample=hidden)
    gradients = compute_gradients(stats, 0.3)
    np.testing.assert_array_equal(gradients.visible_bias, np.zeros(3))


def test_weight_gradient_mixes_sample_and_mean():
    batch = np.array([[1., 1.]])
    stats = ChainStatistics(input=batch,
                            pos_hidden_mean=np.array([[0.2]]),
                            pos_hidden_sample=np.array([[1.]]),
                            neg_visible_mean=np.array([[0.5, 0.5]]),
                            neg_visible_sample=np.array([[1., 0.]]),
                            neg_hidden_mean=np.array([[0.7]]),
                            neg_hidden_sample=np.array([[0.]]))
    gradients = compute_gradients(stats, 1., momentum=0.5)
    # positive term from the hidden sample (1), negative from the hidden mean (0.7)
    np.testing.assert_allclose(gradients.weights, [[0.15], [0.5]])
    np.testing.assert_allclose(gradients.hidden_bias, [0.3])
