# tests/test_cli.py

import json
from pathlib import Path

import pandas as pd
from typer.testing import CliRunner

from flowmigrate.cli import app, convert_cmd

runner = CliRunner()

BENCH = Path(__file__).resolve().parent.parent / "bench" / "conversion"
SWITCH_MERGE = BENCH / "C2_switch_merge" / "workflow.json"
UNSUPPORTED = BENCH / "C4_unsupported_only" / "workflow.json"


def test_convert_writes_workflow_and_report(tmp_path):
    out = tmp_path / "out" / "lamatic.json"
    report = tmp_path / "report.json"
    result = runner.invoke(app, ["convert", "-i", str(SWITCH_MERGE), "-o", str(out), "--report", str(report)])
    assert result.exit_code == 0, result.output

    converted = json.loads(out.read_text(encoding="utf-8"))
    assert converted["triggerNode"]["nodeName"] == "Webhook"
    assert converted["connections"]["_flowMetadata"]["flowType"] == "complex"

    payload = json.loads(report.read_text(encoding="utf-8"))
    assert payload["original"]["fileName"] == "workflow.json"
    assert payload["summary"]["complexity"] == "high"
    assert "High Complexity Workflow" in result.output


def test_convert_rejects_invalid_workflow(tmp_path):
    result = runner.invoke(app, ["convert", "-i", str(UNSUPPORTED), "-o", str(tmp_path / "x.json")])
    assert result.exit_code == 1
    assert "No supported node types found" in result.output
    assert not (tmp_path / "x.json").exists()


def test_convert_rejects_unknown_id_strategy():
    result = runner.invoke(app, ["convert", "-i", str(SWITCH_MERGE), "--id-strategy", "sequential"])
    assert result.exit_code != 0


def test_bad_env_options_are_usage_errors():
    bad_strategy = runner.invoke(app, ["convert", "-i", str(SWITCH_MERGE)], env={"FLOWMIGRATE_ID_STRATEGY": "bogus"})
    assert bad_strategy.exit_code == 2
    assert not isinstance(bad_strategy.exception, ValueError)
    assert "Invalid id strategy" in bad_strategy.output

    bad_seed = runner.invoke(app, ["convert", "-i", str(SWITCH_MERGE)], env={"FLOWMIGRATE_SEED": "abc"})
    assert bad_seed.exit_code == 2
    assert "FLOWMIGRATE_SEED" in bad_seed.output


def test_flag_overrides_bad_env_strategy(tmp_path):
    out = tmp_path / "x.json"
    result = runner.invoke(app, ["convert", "-i", str(SWITCH_MERGE), "-o", str(out), "--id-strategy", "random"],
                           env={"FLOWMIGRATE_ID_STRATEGY": "bogus"})
    assert result.exit_code == 0, result.output
    assert out.exists()


def test_report_notes_stay_off_stdout_json(tmp_path, capsys):
    report = tmp_path / "report.json"
    convert_cmd(input=SWITCH_MERGE, out=None, report=report, id_strategy=None, seed=None)
    captured = capsys.readouterr()

    converted = json.loads(captured.out)
    assert converted["triggerNode"]["nodeName"] == "Webhook"
    assert "[ok] wrote report" in captured.err
    assert "High Complexity Workflow" in captured.err
    assert report.exists()


def test_convert_reports_bad_json(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{nope", encoding="utf-8")
    result = runner.invoke(app, ["convert", "-i", str(bad)])
    assert result.exit_code == 1
    assert "Invalid JSON format" in result.output


def test_validate_command():
    ok = runner.invoke(app, ["validate", "-i", str(SWITCH_MERGE)])
    assert ok.exit_code == 0
    assert "[ok]" in ok.output

    bad = runner.invoke(app, ["validate", "-i", str(UNSUPPORTED)])
    assert bad.exit_code == 1


def test_analyze_command(tmp_path):
    out = tmp_path / "stats.json"
    result = runner.invoke(app, ["analyze", "-i", str(SWITCH_MERGE), "-o", str(out)])
    assert result.exit_code == 0, result.output
    stats = json.loads(out.read_text(encoding="utf-8"))
    assert stats["totalNodes"] == 5
    assert stats["logicNodes"] == 1
    assert stats["dataNodes"] == 3


def test_bulk_command(tmp_path):
    src = tmp_path / "exports"
    src.mkdir()
    (src / "ok.json").write_text(SWITCH_MERGE.read_text(encoding="utf-8"), encoding="utf-8")
    (src / "nope.json").write_text(UNSUPPORTED.read_text(encoding="utf-8"), encoding="utf-8")
    out_dir = tmp_path / "migrated"

    result = runner.invoke(app, ["bulk", "--input-dir", str(src), "--out-dir", str(out_dir)])
    assert result.exit_code == 0, result.output
    assert (out_dir / "ok.lamatic.json").exists()
    assert not (out_dir / "nope.lamatic.json").exists()

    df = pd.read_csv(out_dir / "summary.csv")
    assert sorted(df["id"]) == ["nope", "ok"]
    assert df.set_index("id").loc["ok", "success"]
    assert "Converted 1/2" in result.output
