# flowmigrate/utils/io.py
"""File helpers for the CLI and the bulk converter. The engine itself never touches disk."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Union

import pandas as pd

PathLike = Union[str, Path]

CONVERTED_SUFFIX = ".lamatic.json"


def to_path(p: PathLike) -> Path:
    return p if isinstance(p, Path) else Path(p)


def ensure_dir(p: PathLike) -> Path:
    d = to_path(p)
    d.mkdir(parents=True, exist_ok=True)
    return d


def ensure_parent(path: PathLike) -> Path:
    p = to_path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def list_workflow_files(folder: PathLike, pattern: str = "*.json") -> List[Path]:
    """Exported workflows in a folder (non-recursive, sorted), skipping our own outputs."""
    return sorted(
        p for p in to_path(folder).glob(pattern)
        if p.is_file() and not p.name.endswith(CONVERTED_SUFFIX)
    )


def converted_path(out_dir: PathLike, workflow_id: str) -> Path:
    """<out_dir>/<id>.lamatic.json"""
    return to_path(out_dir) / f"{workflow_id}{CONVERTED_SUFFIX}"


# -------- JSON / CSV --------
def read_json(path: PathLike) -> Any:
    with to_path(path).open("r", encoding="utf-8") as f:
        return json.load(f)


def _atomic(path: PathLike) -> tuple:
    p = ensure_parent(path)
    return p, p.with_suffix(p.suffix + ".tmp")


def write_json(path: PathLike, data: Any, indent: int = 2) -> Path:
    """Pretty JSON, written to a temp file then moved into place."""
    p, tmp = _atomic(path)
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=indent)
    tmp.replace(p)
    return p


def write_csv(path: PathLike, df: pd.DataFrame) -> Path:
    """DataFrame -> CSV (no index), same temp-then-replace dance as write_json."""
    p, tmp = _atomic(path)
    df.to_csv(tmp, index=False)
    tmp.replace(p)
    return p
