# flowmigrate/transform/connections.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

from flowmigrate.flow.analyzer import FlowAnalysis
from flowmigrate.graph.reader import ERROR, MAIN, slot_hops, source_kinds
from flowmigrate.utils.logger import get_logger

logger = get_logger("transform")

AI_KINDS = ("ai_languageModel", "ai_outputParser", "ai_memory", "ai_vectorStore")
FLOW_METADATA_KEY = "_flowMetadata"


def _hop_index(hop: dict) -> int:
    idx = hop.get("index")
    return idx if isinstance(idx, int) else 0


def _main_edges(slots: Any, src: str, id_map: Mapping[str, str], flow: FlowAnalysis) -> List[List[dict]]:
    out: List[List[dict]] = []
    for out_idx, hops in enumerate(slot_hops(slots)):
        targets = [
            {
                "nodeId": id_map[hop["node"]],
                "type": hop.get("type") or MAIN,
                "index": _hop_index(hop),
                "outputIndex": out_idx,
                "flowContext": flow.edge_context(src, hop["node"]),
            }
            for hop in hops if hop["node"] in id_map
        ]
        # empty slots are dropped, so positions shift; outputIndex keeps the original slot
        if targets:
            out.append(targets)
    return out


def _tagged_edges(slots: Any, kind: str, tag: str, id_map: Mapping[str, str]) -> List[List[dict]]:
    out: List[List[dict]] = []
    for hops in slot_hops(slots):
        targets = [
            {"nodeId": id_map[hop["node"]], "type": kind, "index": _hop_index(hop), "flowContext": tag}
            for hop in hops if hop["node"] in id_map
        ]
        if targets:
            out.append(targets)
    return out


# ---------- Public API ----------

def build_connections(
    connections: Any,
    id_map: Mapping[str, str],
    flow: FlowAnalysis,
    folded: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Target connection map keyed by stable ID.

    Sources without an ID (unsupported / ignored) and targets without an ID are
    dropped. Folded nodes emit no record, so they are dropped on both ends;
    their parent carries them in `values.models`. AI kinds and `error` keep
    their kind name; empty kinds disappear.
    """
    skip = set(folded)
    id_map = {name: nid for name, nid in id_map.items() if name not in skip}
    result: Dict[str, Any] = {}
    for src, kinds in source_kinds(connections):
        src_id = id_map.get(src)
        if src_id is None:
            continue

        entry_conns: Dict[str, Any] = {}
        if isinstance(kinds.get(MAIN), list):
            entry_conns[MAIN] = _main_edges(kinds[MAIN], src, id_map, flow)

        for kind in AI_KINDS:
            edges = _tagged_edges(kinds.get(kind), kind, "ai_pipeline", id_map)
            if edges:
                entry_conns[kind] = edges

        errors = _tagged_edges(kinds.get(ERROR), ERROR, "error_handling", id_map)
        if errors:
            entry_conns[ERROR] = errors

        result[src_id] = {
            "flowType": flow.flow_type,
            "executionOrder": flow.position(src),
            "connections": entry_conns,
        }

    result[FLOW_METADATA_KEY] = flow.metadata()
    logger.debug(f"Built connections for {len(result) - 1} source node(s)")
    return result
