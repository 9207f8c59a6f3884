# tests/test_conversion_bench.py

import json
from pathlib import Path

import pytest

from flowmigrate.engine import convert, validate

BENCH = Path(__file__).resolve().parent.parent / "bench" / "conversion"


def _referenced_ids(converted: dict):
    """Every node ID used as a dependency, a connection source or an edge target."""
    refs = set()
    for rec in converted["nodes"]:
        refs.update(rec.get("needs", []))
    for key, entry in converted["connections"].items():
        if key == "_flowMetadata":
            continue
        refs.add(key)
        for slots in entry["connections"].values():
            for slot in slots:
                refs.update(edge["nodeId"] for edge in slot)
    return refs


@pytest.mark.parametrize("case_dir", sorted(BENCH.glob("C*")), ids=lambda p: p.name)
def test_conversion_bench(case_dir: Path):
    """
    Conversion benchmark:
    - load workflow.json
    - load expect.json
    - run validate (+ convert when valid)
    - check trigger, node types, flow analysis and conversion counts
    """
    wf_file = case_dir / "workflow.json"
    exp_file = case_dir / "expect.json"

    assert wf_file.exists(), f"Missing workflow.json in {case_dir}"
    assert exp_file.exists(), f"Missing expect.json in {case_dir}"

    with wf_file.open("r", encoding="utf-8") as f:
        workflow = json.load(f)

    with exp_file.open("r", encoding="utf-8") as f:
        expect = json.load(f)

    asserts = expect.get("assert") or {}

    # ---- validation ----
    result = validate(workflow)
    assert result["valid"] == asserts.get("valid", True), f"{case_dir.name}: validate={result}"
    if not result["valid"]:
        if "error_contains" in asserts:
            assert asserts["error_contains"] in result["error"]
        return

    converted = convert(workflow)
    stats = converted["conversionStats"]
    flow = converted["connections"]["_flowMetadata"]

    # ---- trigger singleton ----
    trigger = converted["triggerNode"]
    assert trigger["nodeId"] == "triggerNode_1"
    assert all(rec["nodeId"] != "triggerNode_1" for rec in converted["nodes"])
    if "trigger_type" in asserts:
        assert trigger["nodeType"] == asserts["trigger_type"], f"{case_dir.name}: trigger={trigger}"
    if "trigger_name" in asserts:
        assert trigger["nodeName"] == asserts["trigger_name"]

    # ---- action nodes ----
    if "node_types" in asserts:
        got = [rec["nodeType"] for rec in converted["nodes"]]
        assert got == asserts["node_types"], f"{case_dir.name}: node types={got}"

    # ---- flow analysis ----
    if "flow_type" in asserts:
        assert flow["flowType"] == asserts["flow_type"], f"{case_dir.name}: flow={flow}"
    if "branch_count" in asserts:
        assert flow["branchCount"] == asserts["branch_count"]
    if "merge_count" in asserts:
        assert flow["mergeCount"] == asserts["merge_count"]
    if "execution_order" in asserts:
        assert flow["executionOrder"] == asserts["execution_order"]

    # ---- counts ----
    for key, stat in (("converted", "convertedCount"), ("unsupported", "unsupportedCount"),
                      ("ignored", "ignoredCount"), ("folded", "foldedCount")):
        if key in asserts:
            assert stats[stat] == asserts[key], f"{case_dir.name}: {stat}={stats[stat]}, expected={asserts[key]}"

    analysis = converted["analysis"]
    if "trigger_nodes" in asserts:
        assert analysis["triggerNodes"] == asserts["trigger_nodes"]
    if "auth_providers" in asserts:
        assert analysis["authProviders"] == asserts["auth_providers"]
    assert analysis["convertedNodes"] + analysis["unsupportedNodes"] + analysis["ignoredNodes"] \
        == analysis["totalNodes"]

    # ---- every referenced ID was issued in this conversion ----
    emitted = {trigger["nodeId"]} | {rec["nodeId"] for rec in converted["nodes"]}
    dangling = _referenced_ids(converted) - emitted
    assert not dangling, f"{case_dir.name}: unknown ids referenced: {dangling}"
