#!/usr/bin/env python3
# flowmigrate/cli.py

import json
import os
import sys
from pathlib import Path
from typing import Any, Optional

import typer

from flowmigrate.bulk import bulk_convert_files, results_frame
from flowmigrate.config import (
    DEFAULT_ID_STRATEGY,
    ID_STRATEGIES,
    ID_STRATEGY_ENV,
    SEED_ENV,
    ConversionOptions,
    parse_seed,
)
from flowmigrate.engine import analyze, convert, validate
from flowmigrate.errors import FlowMigrateError
from flowmigrate.report import build_migration_report
from flowmigrate.utils.io import converted_path, ensure_dir, read_json, write_csv, write_json
from flowmigrate.utils.logger import set_level

app = typer.Typer(help="FlowMigrate CLI - Convert n8n workflows to Lamatic")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG | INFO | WARNING | ERROR (default: LOG_LEVEL env or INFO)"),
):
    if log_level:
        set_level(log_level)


def _options(id_strategy: Optional[str], seed: Optional[int]) -> ConversionOptions:
    """CLI flags win over FLOWMIGRATE_* env vars; bad values from either are usage errors."""
    strategy = (id_strategy or os.getenv(ID_STRATEGY_ENV) or DEFAULT_ID_STRATEGY).strip().lower()
    if strategy not in ID_STRATEGIES:
        raise typer.BadParameter(f"Invalid id strategy '{strategy}'. Choose one of: {', '.join(ID_STRATEGIES)}")
    if seed is None:
        try:
            seed = parse_seed(os.getenv(SEED_ENV))
        except ValueError as e:
            raise typer.BadParameter(f"{SEED_ENV}: {e}")
    return ConversionOptions(id_strategy=strategy, seed=seed)


def _load(input: Path) -> Any:
    try:
        return read_json(input)
    except json.JSONDecodeError as e:
        print(f"[error] {input}: Invalid JSON format ({e})")
        raise typer.Exit(code=1)


def _emit(payload: Any, out: Optional[Path]) -> None:
    if out is None:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        write_json(out, payload)
        print(f"[ok] wrote {out}")


@app.command("convert")
def convert_cmd(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Path to n8n workflow JSON"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the Lamatic workflow here (stdout if omitted)"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write a JSON migration report to this path"),
    id_strategy: Optional[str] = typer.Option(None, "--id-strategy", help="deterministic | random"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for the random id strategy"),
):
    """
    Validate and convert one exported n8n workflow.
    """
    options = _options(id_strategy, seed)
    wf = _load(input)

    validation = validate(wf)
    if not validation["valid"]:
        print(f"[error] {validation['error']}")
        raise typer.Exit(code=1)

    try:
        converted = convert(wf, options)
    except FlowMigrateError as e:
        print(f"[error] {e}")
        raise typer.Exit(code=1)

    _emit(converted, out)

    if report is not None:
        # stdout already holds the JSON document when -o is omitted
        stream = sys.stderr if out is None else sys.stdout
        payload = build_migration_report(wf, converted, file_name=input.name)
        write_json(report, payload)
        print(f"[ok] wrote report to {report}", file=stream)
        for rec in payload["migrationReport"]["recommendations"]:
            print(f"- [{rec['priority']}] {rec['title']}: {rec['description']}", file=stream)


@app.command("analyze")
def analyze_cmd(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Path to n8n workflow JSON"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write statistics JSON here (stdout if omitted)"),
):
    """
    Category / auth statistics for one workflow, without converting it.
    """
    wf = _load(input)
    try:
        stats = analyze(wf)
    except FlowMigrateError as e:
        print(f"[error] {e}")
        raise typer.Exit(code=1)
    _emit(stats.to_dict(), out)


@app.command("validate")
def validate_cmd(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Path to n8n workflow JSON"),
):
    """
    Check that a file is a convertible n8n workflow.
    """
    result = validate(_load(input))
    if not result["valid"]:
        print(f"[error] {result['error']}")
        raise typer.Exit(code=1)
    print(f"[ok] {input} is a valid n8n workflow")


@app.command("bulk")
def bulk_cmd(
    input_dir: Path = typer.Option(..., "--input-dir", exists=True, file_okay=False, help="Folder of exported workflows"),
    pattern: str = typer.Option("*.json", "--pattern", help="Glob for workflow files inside the folder"),
    out_dir: Path = typer.Option(Path("experiments/migrated"), "--out-dir", help="Where converted workflows are written"),
    csv: Optional[Path] = typer.Option(None, "--csv", help="CSV summary path (default: <out-dir>/summary.csv)"),
    id_strategy: Optional[str] = typer.Option(None, "--id-strategy", help="deterministic | random"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for the random id strategy"),
):
    """
    Convert every workflow in a folder and export a CSV summary.
    """
    options = _options(id_strategy, seed)
    batch = bulk_convert_files(input_dir, pattern=pattern, options=options)

    ensure_dir(out_dir)
    for r in batch["results"]:
        if r["success"]:
            write_json(converted_path(out_dir, r["id"]), r["workflow"])
        else:
            print(f"[fail] {r['id']}: {r['error']}")

    csv_path = write_csv(csv or out_dir / "summary.csv", results_frame(batch["results"]))

    s = batch["summary"]
    print(f"Converted {s['successful']}/{s['total']} workflow(s), {s['failed']} failed")
    print(f"Nodes: {s['convertedNodes']}/{s['totalNodes']} converted, {s['authRequired']} need credentials")
    print(f"[ok] wrote {csv_path}")


if __name__ == "__main__":
    app()
