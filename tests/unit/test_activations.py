import math

import numpy as np
import pytest

from neuralnet.core.activations import Activation


def test_parse_accepts_names_and_members():
    assert Activation.parse("ReLU") is Activation.RELU
    assert Activation.parse(Activation.TANH) is Activation.TANH
    with pytest.raises(ValueError):
        Activation.parse("softmax")


@pytest.mark.parametrize("activation", list(Activation))
def test_derivative_matches_finite_difference(activation):
    z = np.array([[-1.5, -0.3, 0.4, 2.0]])
    eps = 1e-6
    numeric = (activation.apply(z + eps) - activation.apply(z - eps)) / (2 * eps)
    np.testing.assert_allclose(activation.derivative(z), numeric, atol=1e-6)


def test_relu_clips_negatives():
    out = Activation.RELU.apply(np.array([[-2.0, 0.0, 3.0]]))
    assert out.tolist() == [[0.0, 0.0, 3.0]]


def test_sigmoid_stays_bounded_for_large_inputs():
    out = Activation.SIGMOID.apply(np.array([[-800.0, 0.0, 800.0]]))
    assert np.all(np.isfinite(out))
    assert out[0, 1] == 0.5


def test_init_scale_depends_on_activation():
    assert Activation.RELU.init_scale(8) == pytest.approx(math.sqrt(2 / 8))
    assert Activation.TANH.init_scale(8) == pytest.approx(math.sqrt(1 / 8))
    assert Activation.SIGMOID.init_scale(4) == pytest.approx(0.5)
    with pytest.raises(ValueError):
        Activation.RELU.init_scale(0)
