# flowmigrate/graph/reader.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Tuple

import networkx as nx

from flowmigrate.mapping.registry import is_convertible, is_trigger_rule, lookup
from flowmigrate.utils.ids import TRIGGER_NODE_ID, IdFactory
from flowmigrate.utils.logger import get_logger

logger = get_logger("graph")

MAIN = "main"
ERROR = "error"
AI_PREFIX = "ai_"


def slot_hops(slots: Any) -> List[List[dict]]:
    """
    Normalize one connection kind into a list of output slots, each a list of hops.

    n8n shape: connections[src][kind] = [ [ {node, type, index}, ... ], ... ]
    Slot positions are preserved (an unusable slot becomes []), so the list index
    is always the original output index.
    """
    if not isinstance(slots, list):
        return []
    out: List[List[dict]] = []
    for slot in slots:
        if isinstance(slot, dict):
            # Rare shape: a single hop object instead of a list
            slot = [slot]
        if not isinstance(slot, list):
            out.append([])
            continue
        out.append([h for h in slot if isinstance(h, dict) and isinstance(h.get("node"), str)])
    return out


def source_kinds(connections: Any) -> Iterator[Tuple[str, Dict[str, Any]]]:
    """(source name, {kind: slots}) for every well-formed source entry."""
    if not isinstance(connections, dict):
        return
    for src_name, kinds in connections.items():
        if isinstance(src_name, str) and isinstance(kinds, dict):
            yield src_name, kinds


def iter_edges(connections: Any, kind: str = MAIN) -> Iterator[Tuple[str, int, dict]]:
    """(source name, output index, hop) for every hop of the given kind."""
    for src_name, kinds in source_kinds(connections):
        for out_idx, hops in enumerate(slot_hops(kinds.get(kind))):
            for hop in hops:
                yield src_name, out_idx, hop


@dataclass
class GraphIndex:
    """Lookup structures over one raw source workflow. Built once, read many times."""
    nodes: List[dict]
    by_name: Dict[str, dict]
    names: List[str]
    connections: Dict[str, Any]
    outgoing: Dict[str, List[str]] = field(default_factory=dict)
    incoming: Dict[str, List[str]] = field(default_factory=dict)
    ai_outgoing: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)
    ai_incoming: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)

    @classmethod
    def from_workflow(cls, nodes: Any, connections: Any) -> "GraphIndex":
        node_list = [n for n in (nodes if isinstance(nodes, list) else []) if isinstance(n, dict)]
        by_name: Dict[str, dict] = {}
        names: List[str] = []
        for n in node_list:
            nm = n.get("name")
            if not isinstance(nm, str) or nm in by_name:
                continue
            by_name[nm] = n
            names.append(nm)

        conns = connections if isinstance(connections, dict) else {}
        index = cls(nodes=node_list, by_name=by_name, names=names, connections=conns)

        for src, _out_idx, hop in iter_edges(conns, MAIN):
            tgt = hop["node"]
            index.outgoing.setdefault(src, []).append(tgt)
            index.incoming.setdefault(tgt, []).append(src)

        for src, kinds in source_kinds(conns):
            for kind in kinds:
                if not isinstance(kind, str) or not kind.startswith(AI_PREFIX):
                    continue
                for hops in slot_hops(kinds[kind]):
                    for hop in hops:
                        tgt = hop["node"]
                        index.ai_outgoing.setdefault(src, {}).setdefault(kind, []).append(tgt)
                        index.ai_incoming.setdefault(tgt, {}).setdefault(kind, []).append(src)
        return index

    def node_type(self, name: str):
        node = self.by_name.get(name)
        return node.get("type") if node else None

    def main_graph(self) -> nx.MultiDiGraph:
        """
        `main` edges as a multigraph: parallel edges are kept so degrees count
        every hop. Dangling targets and undeclared sources become bare nodes.
        """
        G = nx.MultiDiGraph()
        G.add_nodes_from(self.names)
        for src, targets in self.outgoing.items():
            for tgt in targets:
                G.add_edge(src, tgt)
        return G


def assign_ids(nodes: Iterable[dict], ids: IdFactory) -> Dict[str, str]:
    """
    Single pass over the declared nodes:
      - ignored rules (sticky notes) and unsupported types get no ID
      - the first trigger-eligible node gets the reserved trigger ID
      - everything else gets a fresh ID scoped to its target type
    """
    id_map: Dict[str, str] = {}
    trigger_taken = False
    for node in nodes:
        if not isinstance(node, dict):
            continue
        name = node.get("name")
        if not isinstance(name, str) or name in id_map:
            continue
        rule = lookup(node.get("type"))
        if not is_convertible(rule):
            continue
        if is_trigger_rule(rule) and not trigger_taken:
            id_map[name] = TRIGGER_NODE_ID
            trigger_taken = True
        else:
            if is_trigger_rule(rule):
                logger.warning(f"Additional trigger '{name}' ({node.get('type')}) converted as a regular node")
            id_map[name] = ids.node_id(name, rule.target_type)
    logger.debug(f"Assigned {len(id_map)} stable ids")
    return id_map
