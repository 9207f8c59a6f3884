# flowmigrate/flow/diagnostics.py
"""
Structural diagnostics of a source workflow for the migration report.

Informational only: nothing here blocks a conversion.
"""
from typing import Any, Dict, List, Set

import networkx as nx

from flowmigrate.graph.reader import GraphIndex
from flowmigrate.mapping.registry import lookup
from flowmigrate.mapping.schema import schema_issues


def _dependency_graph(graph: GraphIndex) -> nx.DiGraph:
    """
    `main` edges as-is, AI edges reversed (parent -> sub-node), so a model or
    memory hanging off an agent is reachable through that agent.
    """
    G = graph.main_graph()
    D = nx.DiGraph(G)
    for src, kinds in graph.ai_outgoing.items():
        for targets in kinds.values():
            for tgt in targets:
                D.add_edge(tgt, src)
    return D


def _trigger_names(graph: GraphIndex) -> List[str]:
    out = []
    for name in graph.names:
        rule = lookup(graph.node_type(name))
        if rule is not None and rule.category == "trigger":
            out.append(name)
    return out


def find_unreachable_nodes(graph: GraphIndex) -> List[str]:
    """Declared nodes not reachable from any trigger (all of them when there is no trigger)."""
    D = _dependency_graph(graph)
    triggers = _trigger_names(graph)
    reachable: Set[str] = set(triggers)
    for t in triggers:
        reachable |= nx.descendants(D, t)
    return [n for n in graph.names if n not in reachable]


def graph_diagnostics(workflow: Dict[str, Any]) -> Dict[str, Any]:
    graph = GraphIndex.from_workflow(workflow.get("nodes"), workflow.get("connections"))
    G = graph.main_graph()
    D = _dependency_graph(graph)
    issues: List[str] = []

    # 1) Cycles on the main flow
    acyclic = nx.is_directed_acyclic_graph(nx.DiGraph(G))
    cycles = [sorted(c) for c in nx.strongly_connected_components(G) if len(c) > 1]
    cycles += [[n] for n in nx.nodes_with_selfloops(G)]
    if not acyclic:
        issues.append(f"[STRUCTURE] Workflow contains cycles: {cycles} (may cause repeated execution)")

    # 2) Isolated nodes, AI links included
    orphans = [n for n in graph.names if n in D and D.degree(n) == 0]
    if orphans and len(graph.names) > 1:
        issues.append(f"[STRUCTURE] Orphan nodes detected: {orphans} (no incoming and no outgoing edges)")

    # 3) Reachability from triggers
    unreachable = find_unreachable_nodes(graph)
    if unreachable:
        issues.append(f"[REACHABILITY] Unreachable nodes from any trigger: {unreachable}")

    # 4) Edges pointing at undeclared nodes
    dangling = sorted(n for n in G.nodes if n not in graph.by_name)
    if dangling:
        issues.append(f"[STRUCTURE] Connections reference unknown nodes: {dangling}")

    return {
        "nodeCount": len(graph.names),
        "edgeCount": G.number_of_edges(),
        "acyclic": acyclic,
        "cycles": cycles,
        "orphanNodes": orphans,
        "unreachableNodes": unreachable,
        "danglingTargets": dangling,
        "issues": issues,
        "schemaWarnings": schema_issues(workflow),
    }
