# flowmigrate/report.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from flowmigrate.flow.diagnostics import graph_diagnostics
from flowmigrate.mapping.registry import is_trigger_rule, lookup
from flowmigrate.transform.connections import FLOW_METADATA_KEY


def _complexity(flow_type: str) -> str:
    if flow_type == "complex":
        return "high"
    if flow_type in ("branching", "merging"):
        return "medium"
    return "low"


def build_summary(source: Dict[str, Any], converted: Dict[str, Any]) -> Dict[str, Any]:
    analysis = converted.get("analysis") or {}
    flow = (converted.get("connections") or {}).get(FLOW_METADATA_KEY) or {}
    nodes = source.get("nodes") if isinstance(source.get("nodes"), list) else []
    return {
        "totalNodes": analysis.get("totalNodes", len(nodes)),
        "triggerNode": analysis.get("triggerNodes", 0),
        "supportedNodes": analysis.get("convertedNodes", 0),
        "unsupportedNodes": analysis.get("unsupportedNodes", 0),
        "ignoredNodes": analysis.get("ignoredNodes", 0),
        "aiNodes": analysis.get("aiNodes", 0),
        "appNodes": analysis.get("appNodes", 0),
        "dataNodes": analysis.get("dataNodes", 0),
        "logicNodes": analysis.get("logicNodes", 0),
        "integrationNodes": analysis.get("integrationNodes", 0),
        "authRequiredCount": analysis.get("authRequiredCount", 0),
        "authProviders": list(analysis.get("authProviders") or []),
        "authNodes": list(analysis.get("authNodes") or []),
        "complexity": _complexity(flow.get("flowType", "linear")),
    }


def node_mapping(source: Dict[str, Any], converted: Dict[str, Any]) -> Dict[str, List[dict]]:
    """Per source node outcome: successful / unsupported / ignored / folded."""
    mapping: Dict[str, List[dict]] = {"successful": [], "unsupported": [], "ignored": [], "folded": []}
    records = {r.get("nodeName"): r for r in converted.get("nodes") or []}
    stats = converted.get("conversionStats") or {}
    folded = stats.get("foldedNodes") or {}
    trigger_left = bool(stats.get("triggerCount"))
    seen = set()

    for node in source.get("nodes") or []:
        if not isinstance(node, dict):
            mapping["unsupported"].append({"name": None, "originalType": None, "parameters": 0,
                                           "reason": "Not a node object"})
            continue
        name = node.get("name")
        params = node.get("parameters")
        info = {
            "name": name,
            "originalType": node.get("type"),
            "parameters": len(params) if isinstance(params, dict) else 0,
        }
        rule = lookup(node.get("type"))

        if rule is not None and rule.ignore:
            mapping["ignored"].append({**info, "reason": "UI element - not functional node"})
        elif name in seen:
            mapping["unsupported"].append({**info, "reason": "Duplicate node name - only the first is converted"})
        elif name in folded:
            mapping["folded"].append({**info, "parent": folded[name]})
        elif trigger_left and is_trigger_rule(rule):
            trigger_left = False
            mapping["successful"].append({
                **info,
                "convertedType": (converted.get("triggerNode") or {}).get("nodeType"),
                "flowContext": "trigger",
            })
        elif name in records:
            rec = records[name]
            mapping["successful"].append({
                **info,
                "convertedType": rec.get("nodeType"),
                "flowContext": (rec.get("_flowMetadata") or {}).get("flowContext", "linear"),
            })
        else:
            mapping["unsupported"].append({
                **info,
                "reason": "No direct mapping available - requires manual implementation",
            })
        if isinstance(name, str):
            seen.add(name)
    return mapping


def recommendations(summary: Dict[str, Any]) -> List[dict]:
    recs: List[dict] = []
    if summary["unsupportedNodes"] > 0:
        recs.append({
            "type": "warning",
            "category": "Node Conversion",
            "title": "Manual Review Required",
            "description": f"{summary['unsupportedNodes']} node(s) require manual implementation "
                           "using Lamatic AI's LLM nodes or alternative approaches.",
            "priority": "high",
        })
    if summary["authRequiredCount"] > 0:
        recs.append({
            "type": "warning",
            "category": "Authentication",
            "title": "Re-authentication Required",
            "description": f"{summary['authRequiredCount']} node(s) require credential setup: "
                           f"{', '.join(summary['authProviders'])}",
            "priority": "high",
        })
    if summary["complexity"] == "high":
        recs.append({
            "type": "info",
            "category": "Flow Complexity",
            "title": "High Complexity Workflow",
            "description": "This workflow has high complexity. "
                           "Test thoroughly to ensure all execution paths work correctly.",
            "priority": "medium",
        })
    if summary["aiNodes"] > 0:
        recs.append({
            "type": "tip",
            "category": "AI Enhancement",
            "title": "AI Nodes Detected",
            "description": f"{summary['aiNodes']} AI node(s) provide intelligent processing capabilities. "
                           "Consider leveraging additional AI features.",
            "priority": "low",
        })
    if summary["appNodes"] > 0:
        recs.append({
            "type": "info",
            "category": "App Integrations",
            "title": "External App Integrations",
            "description": f"{summary['appNodes']} external app integration(s) detected. "
                           "Ensure all necessary permissions and credentials are configured.",
            "priority": "medium",
        })
    recs.append({
        "type": "tip",
        "category": "Migration",
        "title": "Test Thoroughly",
        "description": "Run comprehensive tests on your migrated workflow before deploying to production.",
        "priority": "high",
    })
    return recs


# ---------- Public API ----------

def build_migration_report(
    source: Dict[str, Any],
    converted: Dict[str, Any],
    file_name: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> Dict[str, Any]:
    summary = build_summary(source, converted)
    nodes = source.get("nodes") if isinstance(source.get("nodes"), list) else []
    return {
        "original": {
            "name": source.get("name") or "Unnamed Workflow",
            "nodeCount": len(nodes),
            "fileName": file_name or "workflow.json",
        },
        "summary": summary,
        "migrationReport": {
            "flowAnalysis": dict((converted.get("connections") or {}).get(FLOW_METADATA_KEY) or {}),
            "nodeMapping": node_mapping(source, converted),
            "recommendations": recommendations(summary),
            "diagnostics": graph_diagnostics(source),
            "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
        },
    }
