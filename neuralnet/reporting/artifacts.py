"""Run manifest: everything needed to reproduce or audit a training run."""

from __future__ import annotations

import json
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Mapping

import numpy as np

from .metrics import _git_sha


def _environment() -> Dict[str, str]:
    versions = {"python": platform.python_version(), "numpy": np.__version__}
    for module in ("sklearn", "pandas", "yaml"):
        loaded = sys.modules.get(module)
        version = getattr(loaded, "__version__", None)
        if version:
            versions[module] = str(version)
    return versions


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
    evaluation: Mapping[str, object] | None = None,
    model: Mapping[str, object] | None = None,
) -> str:
    """Write ``manifest.json`` and return its path as a string.

    ``model`` carries the layer widths and parameter count of the trained
    network; ``evaluation`` the per-split prediction scores.
    """

    manifest = {
        "git_sha": _git_sha(),
        "generated_at": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "config": dict(config),
        "dataset": dict(dataset_provenance),
        "model": dict(model or {}),
        "evaluation": dict(evaluation or {}),
        "environment": _environment(),
    }
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(manifest, indent=2, sort_keys=True))
    return str(out)


__all__ = ["write_manifest"]
