import json
from pathlib import Path

import numpy as np
import pytest

from neuralnet.core.errors import NumericalError, TrainingError
from neuralnet.data import DataSet
from neuralnet.data.synthetic import TOY_FEATURES, TOY_LABELS
from neuralnet.training import pipelines
from neuralnet.training.hyperparams import HyperParametersBuilder
from neuralnet.training.trainer import predict, train_model


def _toy() -> DataSet:
    return DataSet.from_vectors(TOY_FEATURES.tolist(), TOY_LABELS.tolist(), name="toy")


def _toy_params(**overrides):
    builder = (
        HyperParametersBuilder()
        .add_layers("relu", 2)
        .add_layers("sigmoid", 1)
        .set_learning_rate(0.1)
        .set_iterations(1000)
        .set_seed(7)
    )
    for name, value in overrides.items():
        builder = getattr(builder, f"set_{name}")(value)
    return builder.build()


def test_toy_network_learns_separable_data():
    data = _toy()
    model = train_model(_toy_params(), data.features, data.labels)
    report = predict(model, data.features, data.labels)
    assert report.total == 4
    assert report.accuracy >= 0.75
    assert report.correct + report.incorrect == 4


def test_cost_is_reported_on_schedule():
    data = _toy()
    seen = []
    model = train_model(
        _toy_params(iterations=250, report_every=100),
        data.features,
        data.labels,
        callbacks=[lambda iteration, metrics: seen.append(iteration)],
    )
    assert seen == [100, 200, 250]
    assert [it for it, _ in model.cost_history] == seen
    assert model.cost_history[-1][1] < model.cost_history[0][1]


def test_training_is_reproducible_for_a_seed():
    data = _toy()
    first = train_model(_toy_params(iterations=50), data.features, data.labels)
    second = train_model(_toy_params(iterations=50), data.features, data.labels)
    for key, value in first.parameters.state_dict().items():
        assert np.array_equal(value, second.parameters.state_dict()[key])


def test_prediction_is_idempotent_and_leaves_parameters_untouched():
    data = _toy()
    model = train_model(
        _toy_params(iterations=100, dropout_keep_probability=0.5), data.features, data.labels
    )
    assert model.hyperparameters.dropout_enabled
    before = model.parameters.state_dict()
    assert predict(model, data.features, data.labels) == predict(
        model, data.features, data.labels
    )
    first = model.predict_proba(data.features)
    second = model.predict_proba(data.features)
    assert np.array_equal(first, second)
    for key, value in model.parameters.state_dict().items():
        assert np.array_equal(value, before[key])
    assert set(model.predict_labels(data.features).reshape(-1)) <= {0, 1}


def test_divergent_training_aborts_without_a_model():
    data = DataSet.from_arrays(TOY_FEATURES * 50, TOY_LABELS)
    seen = []
    with pytest.raises(NumericalError):
        seen.append(
            train_model(
                _toy_params(learning_rate=1e6, iterations=50), data.features, data.labels
            )
        )
    assert seen == []


def test_trained_weights_are_exposed_read_only():
    data = _toy()
    model = train_model(_toy_params(iterations=10), data.features, data.labels)
    assert model.weights(1).dims() == (2, 2)
    assert model.bias(2).dims() == (1, 1)
    with pytest.raises(ValueError):
        model.weights(1).values[0, 0] = 0.0
    state = model.parameters.state_dict()
    state["W1"][0, 0] = 123.0
    assert model.weights(1).at(0, 0) != 123.0


def test_mini_batches_dropout_and_momentum_train_together():
    data = DataSet.from_arrays(
        np.vstack([np.random.default_rng(0).normal(loc, 0.5, size=(30, 2)) for loc in (-2, 2)]),
        np.concatenate([np.zeros(30), np.ones(30)]),
    )
    params = (
        HyperParametersBuilder()
        .add_layers("relu", 6, 4)
        .add_layers("sigmoid", 1)
        .set_learning_rate(0.1)
        .set_iterations(200)
        .set_mini_batch_size(16)
        .set_dropout_keep_probability(0.9)
        .set_momentum_beta(0.9)
        .set_regularization_factor(0.01)
        .set_seed(3)
        .build()
    )
    model = train_model(params, data.features, data.labels)
    assert predict(model, data.features, data.labels).accuracy >= 0.9


def test_training_rejects_mismatched_labels():
    data = _toy()
    with pytest.raises(TrainingError):
        train_model(_toy_params(), data.features, np.array([[1.0, 0.0]]))
    with pytest.raises(TrainingError):
        train_model(_toy_params(), data.features, np.array([[1.0, 0.0, 2.0, 0.0]]))


def test_prediction_rejects_wrong_feature_count():
    data = _toy()
    model = train_model(_toy_params(iterations=10), data.features, data.labels)
    with pytest.raises(TrainingError):
        model.predict_proba(np.ones((3, 2)))


def _toy_config(run_dir: Path) -> dict:
    return {
        "data": {"name": "toy", "options": {}},
        "model": {
            "layers": [
                {"neurons": 2, "activation": "relu"},
                {"neurons": 1, "activation": "sigmoid"},
            ]
        },
        "train": {
            "learning_rate": 0.1,
            "iterations": 200,
            "seed": 11,
            "report_every": 20,
            "run_dir": str(run_dir),
            "enable_plots": False,
        },
    }


def test_trainer_pipeline_produces_artifacts(tmp_path):
    config = _toy_config(tmp_path / "run")
    result = pipelines.run_pipeline(config)
    assert result.iterations == 200
    assert Path(result.metrics_path).exists()
    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 11
    assert manifest["dataset"]["name"] == "toy"

    metrics = [
        json.loads(line)
        for line in Path(result.metrics_path).read_text().splitlines()
        if line
    ]
    assert len(metrics) == 10
    first = metrics[0]
    assert first["split"] == "train"
    assert "sha" in first
    assert first["seed"] == 11
    assert all("cost" in entry for entry in metrics)

    run_dir = Path(config["train"]["run_dir"])
    assert (run_dir / "metrics.csv").exists()
    assert (run_dir / "config.json").exists()
    evaluation = json.loads((run_dir / "metrics_eval.json").read_text())
    assert set(evaluation) == {"train"}
    assert {"accuracy", "correct", "incorrect", "f1"} <= set(evaluation["train"])
    assert result.evaluation == evaluation


def test_pipeline_determinism(tmp_path):
    config = _toy_config(tmp_path / "run1")
    first = pipelines.run_pipeline(config)
    metrics_1 = Path(first.metrics_path).read_text()

    config["train"]["run_dir"] = str(tmp_path / "run2")
    second = pipelines.run_pipeline(config)
    metrics_2 = Path(second.metrics_path).read_text()

    assert metrics_1 == metrics_2


def test_presets_include_builtin_and_file_presets():
    names = set(pipelines.presets())
    assert {"toy-relu", "blobs-momentum", "xor-tanh", "breast-cancer-dropout"} <= names
    assert "blobs-deep-tanh" in names
    with pytest.raises(KeyError):
        pipelines.load_preset("missing")


def test_load_preset_returns_independent_copies():
    first = pipelines.load_preset("toy-relu")
    first["train"]["iterations"] = 1
    assert pipelines.load_preset("toy-relu")["train"]["iterations"] == 1000


def test_hyperparameters_train_dataset_directly():
    data = _toy()
    model = _toy_params(iterations=200).train_model(data)
    assert model.final_cost == model.cost_history[-1][1]
    assert model.describe().layer_dims == [2, 2, 1]
    assert model.feature_count == 2


@pytest.mark.parametrize("name", sorted(pipelines.presets()))
def test_every_preset_runs(name, tmp_path):
    config = pipelines.load_preset(name)
    config["train"].update({"iterations": 5, "run_dir": str(tmp_path / name)})
    result = pipelines.run_pipeline(config)
    assert result.iterations == 5
    assert Path(result.metrics_path).read_text().strip()
    for scores in result.evaluation.values():
        assert 0.0 <= scores["accuracy"] <= 1.0


def test_breast_cancer_preset_learns(tmp_path):
    config = pipelines.load_preset("breast-cancer-dropout")
    config["train"]["run_dir"] = str(tmp_path / "run")
    result = pipelines.run_pipeline(config)
    assert result.evaluation["test"]["accuracy"] >= 0.9
