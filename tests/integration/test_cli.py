import json
from pathlib import Path

import pytest

from cli.main import main


def test_cli_toy_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "toy-relu"])
    run_dir = Path("runs/toy-relu")
    assert (run_dir / "metrics.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    assert (run_dir / "summary.json").exists()
    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["iterations"] == 1000
    assert payload["train_accuracy"] >= 0.75


def test_cli_overrides_and_dump_config(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"train": {"iterations": 20, "report_every": 5}}))
    main(
        [
            "--preset",
            "blobs-momentum",
            "--config",
            str(override),
            "--seed",
            "9",
            "--run-dir",
            "out",
            "--print-cost",
            "--dump-config",
            "resolved.json",
        ]
    )
    resolved = json.loads(Path("resolved.json").read_text())
    assert resolved["train"]["iterations"] == 20
    assert resolved["train"]["seed"] == 9
    assert resolved["train"]["momentum_beta"] == 0.9
    out = capsys.readouterr().out
    assert "iter: 5, cost" in out
    payload = json.loads(out.strip().splitlines()[-1])
    assert payload["metrics"] == str(Path("out") / "metrics.jsonl")
    assert "test_accuracy" in payload


def test_cli_lists_presets_and_datasets(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--list-presets"])
    assert exc.value.code == 0
    assert "toy-relu" in capsys.readouterr().out.split()
    with pytest.raises(SystemExit):
        main(["--list-datasets"])
    assert "breast_cancer" in capsys.readouterr().out.split()
