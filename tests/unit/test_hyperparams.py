import pytest

from neuralnet.core.activations import Activation
from neuralnet.core.errors import ConstructionError
from neuralnet.training.hyperparams import HyperParameters, HyperParametersBuilder


def _base() -> HyperParametersBuilder:
    return HyperParametersBuilder().add_layers("relu", 5, 4).add_layers("sigmoid", 1)


def test_builder_defaults():
    params = _base().build()
    assert params.learning_rate == 0.01
    assert params.iterations == 1000
    assert params.depth == 3
    assert params.layer(1).neurons == 5
    assert params.layer(3).activation is Activation.SIGMOID
    assert not params.regularization_enabled
    assert not params.dropout_enabled
    assert not params.momentum_enabled
    assert params.mini_batch_size == 0


def test_builder_is_immutable():
    base = HyperParametersBuilder().add_layers("tanh", 3)
    branched = base.add_layers("sigmoid", 1).set_learning_rate(0.5)
    assert len(base.pending_layers) == 1
    assert base.learning_rate == 0.01
    assert branched.build().learning_rate == 0.5


def test_add_n_layers_repeats_width():
    params = HyperParametersBuilder().add_n_layers("relu", 4, 3).add_layers("sigmoid", 1).build()
    assert [layer.neurons for layer in params.layers] == [4, 4, 4, 1]


@pytest.mark.parametrize(
    "builder, message",
    [
        (HyperParametersBuilder(), "no layers defined"),
        (HyperParametersBuilder().add_layers("relu", 3, 1), "sigmoid"),
        (HyperParametersBuilder().add_layers("sigmoid", 2), "1 neuron"),
        (_base().set_learning_rate(0), "learning rate"),
        (_base().set_learning_rate(-0.1), "learning rate"),
        (_base().set_iterations(0), "iterations"),
        (HyperParametersBuilder().add_layers("relu", 0).add_layers("sigmoid", 1), "0 neurons"),
        (_base().set_dropout_keep_probability(1.5), "keep probability"),
        (_base().set_momentum_beta(1.0), "momentum"),
        (_base().set_regularization_factor(-1), "regularization"),
        (_base().set_regularization_factor(float("nan")), "regularization"),
        (_base().set_regularization_factor(float("inf")), "regularization"),
        (_base().set_mini_batch_size(-2), "mini-batch"),
        (HyperParametersBuilder().add_layers("softmax", 1), "softmax"),
    ],
)
def test_invalid_configurations_fail_to_build(builder, message):
    with pytest.raises(ConstructionError, match=message):
        builder.build()


def test_construction_error_is_a_value_error():
    with pytest.raises(ValueError):
        HyperParametersBuilder().build()


def test_direct_construction_is_validated():
    with pytest.raises(ConstructionError):
        HyperParameters(layers=())


def test_keep_probability_of_one_disables_dropout():
    params = _base().set_dropout_keep_probability(1.0).build()
    assert not params.dropout_enabled
    assert _base().set_dropout_keep_probability(0.8).build().dropout_enabled


def test_layer_index_is_one_based():
    params = _base().build()
    with pytest.raises(IndexError):
        params.layer(0)
    with pytest.raises(IndexError):
        params.layer(4)


def test_layer_dims_and_description():
    params = _base().build()
    assert params.layer_dims(2) == [2, 5, 4, 1]
    assert params.describe(2).parameter_count == (2 * 5 + 5) + (5 * 4 + 4) + (4 + 1)


def test_config_round_trip():
    params = (
        _base()
        .set_learning_rate(0.2)
        .set_iterations(50)
        .set_regularization_factor(0.1)
        .set_dropout_keep_probability(0.9)
        .set_mini_batch_size(16)
        .set_momentum_beta(0.5)
        .set_seed(4)
        .set_report_every(10)
        .build()
    )
    config = params.to_config()
    assert HyperParameters.from_config(config["model"], config["train"]) == params


def test_from_config_supports_repeat():
    params = HyperParameters.from_config(
        {
            "layers": [
                {"neurons": 3, "activation": "tanh", "repeat": 2},
                {"neurons": 1, "activation": "sigmoid"},
            ]
        },
        {"learning_rate": 0.3},
    )
    assert [layer.neurons for layer in params.layers] == [3, 3, 1]
    assert params.learning_rate == 0.3


def test_str_lists_every_layer():
    text = str(_base().set_momentum_beta(0.9).build())
    assert "number of layers: 3" in text
    assert "layer 2 - 4 neuron(s), relu activation function" in text
    assert "momentum beta: 0.9" in text
