# flowmigrate/transform/node.py
from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Tuple

from flowmigrate.flow.analyzer import FlowAnalysis
from flowmigrate.graph.reader import GraphIndex
from flowmigrate.mapping.registry import is_trigger_rule, lookup
from flowmigrate.transform.builders import (
    BUILDERS,
    CHAT_MODEL_TYPES,
    TRIGGER_BUILDERS,
    BuildContext,
    build_generic,
    build_passthrough_trigger,
    model_name,
)
from flowmigrate.utils.ids import TRIGGER_NODE_ID
from flowmigrate.utils.logger import get_logger

logger = get_logger("transform")

LANGUAGE_MODEL_KIND = "ai_languageModel"
# Subcategories a chat model can be folded into
MODEL_CONSUMERS = ("agent", "chain")


# ---------- dependencies ----------

def dependency_names(name: str, graph: GraphIndex) -> List[str]:
    """Sources of `main` edges into `name` that exist and have a non-ignored rule, in scan order, unique."""
    out: List[str] = []
    for src in graph.incoming.get(name, []):
        if src in out or src not in graph.by_name:
            continue
        rule = lookup(graph.node_type(src))
        if rule is None or rule.ignore:
            continue
        out.append(src)
    return out


def resolve_dependencies(name: str, graph: GraphIndex, id_map: Mapping[str, str]) -> List[str]:
    return [id_map[src] for src in dependency_names(name, graph) if src in id_map]


# ---------- folding ----------

def fold_parent(name: str, graph: GraphIndex) -> Optional[str]:
    """
    Parent a chat model folds into, or None.

    Folds only when the node is a chat model, has no `main` outputs and every
    AI output is an ai_languageModel edge into a known agent/chain node.
    """
    if graph.node_type(name) not in CHAT_MODEL_TYPES:
        return None
    if graph.outgoing.get(name):
        return None
    kinds = graph.ai_outgoing.get(name, {})
    targets = kinds.get(LANGUAGE_MODEL_KIND, [])
    if not targets or set(kinds) != {LANGUAGE_MODEL_KIND}:
        return None
    for tgt in targets:
        rule = lookup(graph.node_type(tgt))
        if rule is None or rule.subcategory not in MODEL_CONSUMERS:
            return None
    return targets[0]


def attached_models(name: str, graph: GraphIndex) -> Tuple[dict, ...]:
    """Chat models folded into `name`, in connection scan order."""
    models = []
    for src in graph.ai_incoming.get(name, {}).get(LANGUAGE_MODEL_KIND, []):
        if fold_parent(src, graph) is None or any(m["nodeName"] == src for m in models):
            continue
        node = graph.by_name[src]
        rule = lookup(node.get("type"))
        models.append({
            "nodeName": src,
            "provider": rule.auth_provider or "",
            "model": model_name(node),
            "originalType": node.get("type"),
        })
    return tuple(models)


# ---------- Public API ----------

def transform_node(
    node: dict,
    target_type: str,
    dependency_ids: List[str],
    flow: FlowAnalysis,
    context: BuildContext,
) -> Optional[dict]:
    """
    Build one Lamatic record for a recognised source node.

    Returns None when the node is folded into its parent; callers count that
    as unsupported (and folded), never as converted.
    """
    name = node.get("name")
    source_type = node.get("type")
    if context.fold_parent is not None:
        logger.debug(f"Folded '{name}' into '{context.fold_parent}'")
        return None

    rule = lookup(source_type)
    flow_metadata = {
        "executionOrder": flow.position(name),
        "flowContext": flow.node_context(name),
        "originalType": source_type,
    }

    if is_trigger_rule(rule):
        builder = TRIGGER_BUILDERS.get(source_type, build_passthrough_trigger)
        body = builder(node, context)
        record = {
            "nodeId": context.node_id,
            "nodeType": body.get("nodeType", target_type),
            "nodeName": body.get("nodeName") or name,
            "values": body["values"],
            "modes": {},
        }
        if context.node_id != TRIGGER_NODE_ID:
            # secondary trigger, emitted among the action nodes
            record["needs"] = list(dependency_ids)
            record["_flowMetadata"] = flow_metadata
        return record

    builder = BUILDERS.get(source_type, build_generic)
    body = builder(node, context)
    record = {
        "nodeId": context.node_id,
        "nodeType": target_type,
        "nodeName": name,
        "values": {},
        "modes": {},
        "needs": list(dependency_ids),
        "_flowMetadata": flow_metadata,
    }
    record.update(body)
    return record


def transform_all(
    graph: GraphIndex,
    id_map: Mapping[str, str],
    flow: FlowAnalysis,
    ids,
) -> Tuple[Optional[dict], List[dict], Dict[str, str]]:
    """
    Transform every node that received an ID, in declaration order.

    Returns (trigger record or None, action records, folded name -> parent name).
    """
    trigger: Optional[dict] = None
    actions: List[dict] = []
    folded: Dict[str, str] = {}

    for name in graph.names:
        node_id = id_map.get(name)
        if node_id is None:
            continue
        node = graph.by_name[name]
        rule = lookup(node.get("type"))
        context = BuildContext(
            node_id=node_id,
            ids=ids,
            models=attached_models(name, graph),
            fold_parent=fold_parent(name, graph),
        )
        record = transform_node(
            node, rule.target_type, resolve_dependencies(name, graph, id_map), flow, context
        )
        if record is None:
            folded[name] = context.fold_parent
        elif node_id == TRIGGER_NODE_ID:
            trigger = record
        else:
            actions.append(record)

    logger.info(f"Transformed {len(actions)} action node(s), folded {len(folded)}")
    return trigger, actions, folded
