# flowmigrate/engine.py
"""
Entry points of the conversion engine: validate / convert / analyze.

Pure functions over in-memory dicts. File handling belongs to the CLI and the
bulk converter.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from flowmigrate.analysis.accumulator import AnalysisStats, analyze_workflow
from flowmigrate.config import ConversionOptions
from flowmigrate.errors import ConversionError
from flowmigrate.flow.analyzer import analyze_flows
from flowmigrate.graph.reader import GraphIndex, assign_ids
from flowmigrate.mapping.registry import WEBHOOK_TRIGGER_TYPE, is_convertible, lookup, supported_types
from flowmigrate.mapping.schema import connections_shape_ok, nodes_shape_ok
from flowmigrate.transform.connections import build_connections
from flowmigrate.transform.node import transform_all
from flowmigrate.utils.ids import TRIGGER_NODE_ID, IdFactory
from flowmigrate.utils.logger import get_logger

logger = get_logger("engine")

DEFAULT_NAME = "Converted Workflow"


def default_trigger() -> Dict[str, Any]:
    return {
        "nodeId": TRIGGER_NODE_ID,
        "nodeType": WEBHOOK_TRIGGER_TYPE,
        "nodeName": "Webhook",
        "values": {},
        "modes": {},
    }


# ---------- Public API ----------

def validate(workflow: Any) -> Dict[str, Any]:
    """Caller-facing shape check. Never raises; failures come back as {valid: False, error}."""
    if not isinstance(workflow, dict):
        return {"valid": False, "error": "Invalid JSON format"}
    if not nodes_shape_ok(workflow.get("nodes")):
        return {"valid": False, "error": "Missing or invalid nodes array"}
    if not connections_shape_ok(workflow.get("connections")):
        return {"valid": False, "error": "Missing or invalid connections object"}

    if not any(is_convertible(lookup(n.get("type"))) for n in workflow["nodes"]):
        return {
            "valid": False,
            "error": f"No supported node types found. Supported types: {', '.join(supported_types())}",
        }
    return {"valid": True}


def analyze(workflow: Dict[str, Any]) -> AnalysisStats:
    return analyze_workflow(workflow)


def convert(workflow: Dict[str, Any], options: Optional[ConversionOptions] = None) -> Dict[str, Any]:
    """
    Convert one n8n export into a Lamatic workflow dict.

    Any failure is raised once as ConversionError("Conversion failed: ...") with
    the original exception chained.
    """
    try:
        return _convert(workflow, options or ConversionOptions())
    except Exception as e:
        logger.error(f"Conversion failed: {e}")
        raise ConversionError(f"Conversion failed: {e}") from e


def _convert(workflow: Dict[str, Any], options: ConversionOptions) -> Dict[str, Any]:
    ids = IdFactory(options)
    raw_nodes = workflow.get("nodes")
    raw_nodes = raw_nodes if isinstance(raw_nodes, list) else []

    # 1) Graph index + stable IDs (computed once, reused by every later stage)
    graph = GraphIndex.from_workflow(raw_nodes, workflow.get("connections"))
    id_map = assign_ids(graph.nodes, ids)

    # 2) Flow analysis (read-only from here on)
    flow = analyze_flows(graph, id_map)

    # 3) Node records
    trigger, actions, folded = transform_all(graph, id_map, flow, ids)

    # 4) Connections keyed by stable ID
    connections = build_connections(graph.connections, id_map, flow, folded)

    # 5) Independent statistics pass
    stats = analyze_workflow(workflow)

    ignored = sum(1 for n in raw_nodes if isinstance(n, dict) and getattr(lookup(n.get("type")), "ignore", False))
    converted = (1 if trigger is not None else 0) + len(actions)
    conversion_stats = {
        "originalCount": len(raw_nodes),
        "ignoredCount": ignored,
        # no rule, duplicate name, or folded into a parent
        "unsupportedCount": len(raw_nodes) - ignored - converted,
        "foldedCount": len(folded),
        "convertedCount": converted,
        "triggerCount": 1 if trigger is not None else 0,
        "actionCount": len(actions),
        "foldedNodes": dict(folded),
    }

    if trigger is None:
        logger.info("No trigger node found, using default webhook trigger")

    name = workflow.get("name")
    logger.info(
        f"Converted '{name or DEFAULT_NAME}': {converted}/{len(raw_nodes)} node(s), "
        f"flow={flow.flow_type}"
    )
    return {
        "name": name or DEFAULT_NAME,
        "description": f"Migrated from n8n: {name or 'Unnamed Workflow'}",
        "triggerNode": trigger if trigger is not None else default_trigger(),
        "nodes": actions,
        "connections": connections,
        "analysis": stats.to_dict(),
        "conversionStats": conversion_stats,
    }
