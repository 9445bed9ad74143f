"""Config-driven runs: resolve a preset, build the dataset, train, write artifacts.

A config is a mapping with three sections::

    {"data": {"name": ..., "options": {...}},
     "model": {"layers": [{"neurons": ..., "activation": ...}, ...]},
     "train": {"learning_rate": ..., "iterations": ..., "run_dir": ..., ...}}

Presets are either built in (below) or ``.yaml``/``.json`` files under
``configs/presets``; a file preset with the same name wins.
"""

from __future__ import annotations

import json
from copy import deepcopy
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Mapping, Tuple

import yaml

from ..core.types import RunResult
from ..data import get_dataset
from ..data.dataset import DataSet
from ..data.registry import DatasetSpec
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CostPrinter, CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .hyperparams import HyperParameters
from .metrics import compute_metrics, default_metrics
from .trainer import TrainedModel, Trainer

_PRESETS: Dict[str, Dict[str, object]] = {
    "toy-relu": {
        "data": {"name": "toy", "options": {}},
        "model": {
            "layers": [
                {"neurons": 2, "activation": "relu"},
                {"neurons": 1, "activation": "sigmoid"},
            ]
        },
        "train": {
            "learning_rate": 0.1,
            "iterations": 1000,
            "seed": 7,
            "report_every": 100,
            "run_dir": "runs/toy-relu",
            "enable_plots": False,
        },
    },
    "blobs-momentum": {
        "data": {"name": "blobs", "options": {"n_samples": 200, "n_features": 4}},
        "model": {
            "layers": [
                {"neurons": 8, "activation": "relu"},
                {"neurons": 4, "activation": "relu"},
                {"neurons": 1, "activation": "sigmoid"},
            ]
        },
        "train": {
            "learning_rate": 0.05,
            "iterations": 300,
            "mini_batch_size": 32,
            "momentum_beta": 0.9,
            "seed": 11,
            "report_every": 25,
            "run_dir": "runs/blobs-momentum",
            "enable_plots": False,
        },
    },
    "xor-tanh": {
        "data": {"name": "xor", "options": {"n_samples": 200, "noise": 0.1}},
        "model": {
            "layers": [
                {"neurons": 8, "activation": "tanh"},
                {"neurons": 1, "activation": "sigmoid"},
            ]
        },
        "train": {
            "learning_rate": 0.5,
            "iterations": 2000,
            "seed": 3,
            "report_every": 100,
            "run_dir": "runs/xor-tanh",
            "enable_plots": False,
        },
    },
    "breast-cancer-dropout": {
        "data": {"name": "breast_cancer", "options": {"test_split": 0.2}},
        "model": {
            "layers": [
                {"neurons": 16, "activation": "tanh"},
                {"neurons": 8, "activation": "tanh"},
                {"neurons": 1, "activation": "sigmoid"},
            ]
        },
        "train": {
            "learning_rate": 0.05,
            "iterations": 500,
            "regularization_factor": 0.01,
            "dropout_keep_probability": 0.9,
            "mini_batch_size": 64,
            "momentum_beta": 0.9,
            "seed": 42,
            "report_every": 50,
            "run_dir": "runs/breast-cancer-dropout",
            "enable_plots": False,
        },
    },
}


_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_CONFIG_SUFFIXES = (".yaml", ".yml", ".json")
SECTIONS = ("data", "model", "train")


def load_config_file(path: str | Path) -> Dict[str, object]:
    """Decode a YAML or JSON config file into a plain dict."""

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in _CONFIG_SUFFIXES:
        raise ValueError(f"Unsupported config file type {path.suffix!r} ({path.name})")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) if suffix != ".json" else json.load(handle)
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping, got {type(data).__name__}")
    return dict(data)


def check_sections(config: Mapping[str, object], source: str = "Config") -> None:
    missing = [section for section in SECTIONS if section not in config]
    if missing:
        raise KeyError(f"{source} is missing required sections: {', '.join(missing)}")


@lru_cache(maxsize=None)
def _file_presets() -> Tuple[Tuple[str, str], ...]:
    """``(name, json)`` pairs for every preset file; cached for the process."""

    if not _PRESET_DIR.is_dir():
        return ()
    found = []
    for path in sorted(_PRESET_DIR.iterdir()):
        if path.suffix.lower() not in _CONFIG_SUFFIXES:
            continue
        config = load_config_file(path)
        check_sections(config, source=f"Preset {path.name}")
        found.append((path.stem, json.dumps(config)))
    return tuple(found)


def presets() -> Dict[str, Dict[str, object]]:
    """Every preset by name, as independent copies."""

    combined = {name: deepcopy(config) for name, config in _PRESETS.items()}
    combined.update({name: json.loads(text) for name, text in _file_presets()})
    return combined


def load_preset(name: str) -> Dict[str, object]:
    available = presets()
    if name not in available:
        raise KeyError(f"Unknown preset {name!r}; available presets: {', '.join(sorted(available))}")
    return available[name]


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train and evaluate one configuration, writing artifacts to ``run_dir``.

    ``run_dir`` receives ``metrics.jsonl``/``metrics.csv`` (one row per cost
    report), ``metrics_eval.json`` (per-split prediction scores),
    ``summary.json``, ``manifest.json``, ``config.json`` and, with
    ``enable_plots``, ``cost.png``.
    """

    check_sections(config)
    config = json.loads(json.dumps(config))
    data_cfg: Dict[str, object] = dict(config["data"])
    train_cfg: Dict[str, object] = dict(config["train"])

    seed = train_cfg.get("seed")
    options = dict(data_cfg.get("options") or {})  # type: ignore[call-overload]
    if seed is not None:
        options.setdefault("seed", int(seed))  # type: ignore[call-overload]
    dataset = get_dataset(str(data_cfg["name"]), **options)
    hyperparameters = HyperParameters.from_config(config["model"], train_cfg)
    description = hyperparameters.describe(dataset.feature_count)

    run_dir = _run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)
    _print_startup_summary(dataset, hyperparameters, description.layer_dims)

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="train", seed=seed)  # type: ignore[arg-type]
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    callbacks: List[object] = [jsonl, CsvSink(run_dir / "metrics.csv"), plots]
    if train_cfg.get("print_cost", False):
        callbacks.append(CostPrinter())

    model = Trainer(hyperparameters, callbacks=callbacks).run(
        dataset.train.features, dataset.train.labels
    )
    plots.close()

    metric_names = [str(name) for name in train_cfg.get("metrics", default_metrics())]  # type: ignore[union-attr]
    evaluation = {"train": _evaluate(model, dataset.train, metric_names)}
    if dataset.test is not None:
        evaluation["test"] = _evaluate(model, dataset.test, metric_names)
    _write_json(run_dir / "metrics_eval.json", evaluation)
    _write_json(run_dir / "config.json", config)

    manifest = write_manifest(
        run_dir / "manifest.json",
        config=config,
        dataset_provenance={"name": dataset.name, "splits": dataset.splits, **dataset.provenance},
        evaluation=evaluation,
        model={
            "layer_dims": description.layer_dims,
            "parameter_count": description.parameter_count,
            "final_cost": model.final_cost,
        },
    )
    summary = write_summary(
        jsonl.path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32))  # type: ignore[arg-type]
    )
    return RunResult(
        iterations=hyperparameters.iterations,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary,
        evaluation=evaluation,
    )


def _evaluate(model: TrainedModel, data: DataSet, metric_names: List[str]) -> Dict[str, float]:
    probabilities = model.predict_proba(data.features)
    scores = dict(compute_metrics(metric_names, probabilities, data.labels.values))
    scores.update(model.evaluate(data.features, data.labels).as_dict())
    return scores


def _run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    return Path("runs") / dataset / datetime.now().strftime("%Y%m%d-%H%M%S")


def _write_json(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload, indent=2, sort_keys=True))


def _print_startup_summary(
    dataset: DatasetSpec, hyperparameters: HyperParameters, layer_dims: List[int]
) -> None:
    splits = dataset.splits
    print(f"[neuralnet] dataset={dataset.name} train={splits['train']} test={splits['test']}")
    print(f"[neuralnet] layer widths {layer_dims}")
    print(str(hyperparameters), end="")


__all__ = ["SECTIONS", "check_sections", "load_config_file", "load_preset", "presets", "run_pipeline"]
