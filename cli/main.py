"""Train a binary classifier from a preset, optionally overridden on the command line."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Dict, Iterable

from neuralnet.data import available_datasets
from neuralnet.training import pipelines


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="neuralnet", description=__doc__)
    parser.add_argument(
        "--preset",
        choices=sorted(pipelines.presets()),
        default="toy-relu",
        help="Preset configuration to run (default: %(default)s)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML/JSON file; a full data/model/train config replaces the preset, "
        "anything else is merged into it",
    )

    data = parser.add_argument_group("dataset")
    data.add_argument("--dataset", choices=available_datasets(), help="Dataset to train on")
    data.add_argument("--csv-path", help="CSV file for --dataset csv")
    data.add_argument("--target-col", help="Label column for --dataset csv")
    data.add_argument("--test-split", type=float, help="Fraction of examples held out")

    run = parser.add_argument_group("run")
    run.add_argument("--seed", type=int, help="Seed for data splits, initialisation and dropout")
    run.add_argument("--run-dir", type=Path, help="Directory receiving the run artifacts")
    run.add_argument("--enable-plots", action="store_true", help="Also write cost.png")
    run.add_argument("--print-cost", action="store_true", help="Print the cost at every report")

    info = parser.add_argument_group("information")
    info.add_argument("--list-presets", action="store_true", help="Print preset names and exit")
    info.add_argument("--list-datasets", action="store_true", help="Print dataset names and exit")
    info.add_argument("--dump-config", type=Path, help="Write the resolved config as JSON")
    return parser


def _deep_merge(base: Dict[str, object], override: Dict[str, object]) -> Dict[str, object]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def resolve_config(args: argparse.Namespace) -> Dict[str, object]:
    """Preset, then ``--config``, then the individual flags, later winning."""

    config = pipelines.load_preset(args.preset)
    if args.config is not None:
        override = pipelines.load_config_file(args.config)
        if all(section in override for section in pipelines.SECTIONS):
            config = override
        else:
            config = _deep_merge(config, override)

    data_cfg = dict(config.get("data") or {})  # type: ignore[call-overload]
    if args.dataset:
        data_cfg = {"name": args.dataset, "options": {}}
    options = dict(data_cfg.get("options") or {})
    for key, value in (
        ("csv_path", args.csv_path),
        ("target_col", args.target_col),
        ("test_split", args.test_split),
    ):
        if value is not None:
            options[key] = value
    data_cfg["options"] = options
    config["data"] = data_cfg

    train_cfg = dict(config.get("train") or {})  # type: ignore[call-overload]
    if args.seed is not None:
        train_cfg["seed"] = args.seed
    if args.run_dir is not None:
        train_cfg["run_dir"] = str(args.run_dir)
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    if args.print_cost:
        train_cfg["print_cost"] = True
    config["train"] = train_cfg
    return config


def _format_result(result) -> str:
    payload: Dict[str, object] = {
        "iterations": result.iterations,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
    }
    for split, scores in result.evaluation.items():
        payload[f"{split}_accuracy"] = scores.get("accuracy")
    return json.dumps(payload, sort_keys=True)


def main(argv: Iterable[str] | None = None) -> None:
    args = build_parser().parse_args(None if argv is None else list(argv))

    if args.list_presets or args.list_datasets:
        names = sorted(pipelines.presets()) if args.list_presets else available_datasets()
        print("\n".join(names))
        raise SystemExit(0)

    config = resolve_config(args)
    if args.dump_config is not None:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    print(_format_result(pipelines.run_pipeline(config)))


if __name__ == "__main__":
    main()
