# tests/test_accumulator.py

import pytest

from flowmigrate.analysis import accumulator
from flowmigrate.analysis.accumulator import AnalysisStats, analyze_workflow
from flowmigrate.errors import InternalConsistencyError

WORKFLOW = {
    "nodes": [
        {"name": "Hook", "type": "n8n-nodes-base.webhook"},
        {"name": "Agent", "type": "@n8n/n8n-nodes-langchain.agent"},
        {"name": "Mail", "type": "n8n-nodes-base.gmail"},
        {"name": "Mail again", "type": "n8n-nodes-base.gmailTool"},
        {"name": "Note", "type": "n8n-nodes-base.stickyNote"},
        {"name": "Mystery", "type": "n8n-nodes-base.unknownThing"},
        {"name": "Sheet", "type": "n8n-nodes-base.postgres"},
        "not-a-node",
    ],
    "connections": {},
}


def test_counts_and_categories():
    s = analyze_workflow(WORKFLOW).to_dict()
    assert s["totalNodes"] == 8
    assert s["convertedNodes"] == 5
    assert s["unsupportedNodes"] == 2
    assert s["ignoredNodes"] == 1
    assert s["triggerNodes"] == 1
    assert s["aiNodes"] == 1
    assert s["appNodes"] == 2
    assert s["integrationNodes"] == 1
    assert s["dataNodes"] == 0
    assert s["logicNodes"] == 0


def test_auth_accounting():
    s = analyze_workflow(WORKFLOW).to_dict()
    assert s["authRequiredCount"] == 3
    assert s["authProviders"] == ["LangChain", "Gmail"]
    assert s["authNodes"][1] == {"nodeName": "Mail", "provider": "Gmail", "category": "app"}


def test_single_auth_node_increments_by_one():
    base = {"nodes": [{"name": "Hook", "type": "n8n-nodes-base.webhook"}], "connections": {}}
    before = analyze_workflow(base)
    base["nodes"].append({"name": "Ask", "type": "n8n-nodes-base.openAi"})
    after = analyze_workflow(base)
    assert after.auth_required_count == before.auth_required_count + 1
    assert "OpenAI" in after.auth_providers
    assert {"nodeName": "Ask", "provider": "OpenAI", "category": "ai"} in after.auth_nodes


def test_analyze_is_idempotent():
    assert analyze_workflow(WORKFLOW).to_dict() == analyze_workflow(WORKFLOW).to_dict()


def test_to_dict_returns_copies():
    stats = analyze_workflow(WORKFLOW)
    d = stats.to_dict()
    d["authProviders"].append("Mutated")
    d["authNodes"][0]["provider"] = "Mutated"
    assert "Mutated" not in stats.auth_providers
    assert stats.auth_nodes[0]["provider"] != "Mutated"


def test_missing_nodes_is_empty_analysis():
    assert analyze_workflow({}).to_dict()["totalNodes"] == 0


def test_invariant_violation_is_fatal(monkeypatch):
    def broken(stats, node):
        stats.total_nodes += 1

    monkeypatch.setattr(accumulator, "_count_node", broken)
    with pytest.raises(InternalConsistencyError, match="Node count calculation mismatch"):
        analyze_workflow(WORKFLOW)


def test_check_passes_on_balanced_stats():
    AnalysisStats(total_nodes=3, converted_nodes=1, unsupported_nodes=1, ignored_nodes=1).check()
