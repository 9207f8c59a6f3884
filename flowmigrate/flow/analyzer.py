# flowmigrate/flow/analyzer.py
"""
Flow pattern detection over the `main` connection graph.

The analysis is computed once per conversion and shared read-only by the node
transformer and the connection builder. It never raises: malformed connection
records were already reduced to "no edges" by the graph reader.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Tuple

from flowmigrate.graph.reader import GraphIndex
from flowmigrate.mapping.registry import ERROR_NODE_TYPE, lookup
from flowmigrate.utils.logger import get_logger

logger = get_logger("flow")

FLOW_TYPES = ("linear", "branching", "merging", "complex", "errorHandling")

_HANDLER_KEYWORDS = ("error", "catch")
_ERROR_FLOW_KEYWORDS = ("error", "catch", "retry")

_WHITE, _GREY, _BLACK = 0, 1, 2


@dataclass(frozen=True)
class FlowAnalysis:
    flow_type: str
    patterns: Tuple[str, ...]
    execution_order: Tuple[str, ...]
    branch_points: FrozenSet[str]
    merge_points: FrozenSet[str]
    error_handlers: FrozenSet[str]
    # name -> {"edges": n, "nodeId": id or None}, for reporting
    branches: Mapping[str, dict] = field(default_factory=dict)
    merges: Mapping[str, dict] = field(default_factory=dict)
    _positions: Mapping[str, int] = field(default_factory=dict, repr=False, compare=False)

    def position(self, name: str) -> int:
        """Index of `name` in the execution order, -1 when absent."""
        return self._positions.get(name, -1)

    def node_context(self, name: str) -> str:
        if name in self.branch_points:
            return "branch_point"
        if name in self.merge_points:
            return "merge_point"
        if name in self.error_handlers:
            return "error_handler"
        if _matches(name, _ERROR_FLOW_KEYWORDS):
            return "error_flow"
        return "linear"

    def edge_context(self, source: str, target: str) -> str:
        if source in self.branch_points:
            return "branch_output"
        if target in self.merge_points:
            return "merge_input"
        if target in self.error_handlers:
            return "error_handling"
        return "linear"

    def metadata(self) -> dict:
        return {
            "flowType": self.flow_type,
            "patterns": list(self.patterns),
            "executionOrder": list(self.execution_order),
            "branchCount": len(self.branch_points),
            "mergeCount": len(self.merge_points),
            "errorHandlers": len(self.error_handlers),
        }


def _matches(name, keywords: Iterable[str]) -> bool:
    low = str(name).lower()
    return any(k in low for k in keywords)


def _is_trigger_category(node_type) -> bool:
    rule = lookup(node_type)
    return rule is not None and not rule.ignore and rule.category == "trigger"


def classify(has_branches: bool, has_merges: bool, has_error_handlers: bool) -> str:
    if has_branches and has_merges:
        return "complex"
    if has_branches:
        return "branching"
    if has_merges:
        return "merging"
    if has_error_handlers:
        return "errorHandling"
    return "linear"


def execution_order(names: List[str], successors: Mapping[str, List[str]], roots: List[str]) -> List[str]:
    """
    Reverse post-order blocks, one per root, roots first then every unreached
    declared name, both in declaration order.

    Iterative DFS with an explicit colour table: a GREY successor is a back edge
    (cycle) and is treated as already ordered. Sibling successors are taken in
    declaration order, whatever order the output hops list them in. Names that
    are not declared nodes (dangling targets) are never ordered.
    """
    known = set(names)
    rank = {name: i for i, name in enumerate(names)}

    def children(node: str):
        # pushed in reverse so the earliest declared sibling comes first in the block
        succ = sorted({s for s in successors.get(node, []) if s in known}, key=rank.__getitem__)
        return iter(reversed(succ))

    color: Dict[str, int] = {}
    order: List[str] = []

    def walk(root: str) -> List[str]:
        post: List[str] = []
        color[root] = _GREY
        stack = [(root, children(root))]
        while stack:
            node, it = stack[-1]
            for nxt in it:
                if color.get(nxt, _WHITE) == _WHITE:
                    color[nxt] = _GREY
                    stack.append((nxt, children(nxt)))
                    break
            else:
                stack.pop()
                color[node] = _BLACK
                post.append(node)
        post.reverse()
        return post

    for root in list(roots) + list(names):
        if root in known and color.get(root, _WHITE) == _WHITE:
            order.extend(walk(root))
    return order


def analyze_flows(graph: GraphIndex, id_map: Mapping[str, str]) -> FlowAnalysis:
    G = graph.main_graph()

    # 1) Branch points: more than one outgoing main hop across all slots
    branches = {
        n: {"edges": G.out_degree(n), "nodeId": id_map.get(n)}
        for n in G.nodes if G.out_degree(n) > 1
    }
    # 2) Merge points: more than one incoming main hop
    merges = {
        n: {"edges": G.in_degree(n), "nodeId": id_map.get(n)}
        for n in G.nodes if G.in_degree(n) > 1
    }
    # 3) Error handlers: dedicated node type or an error/catch name
    error_handlers = frozenset(
        name for name in graph.names
        if graph.node_type(name) == ERROR_NODE_TYPE or _matches(name, _HANDLER_KEYWORDS)
    )

    patterns: List[str] = []
    if branches:
        patterns.append("branching")
    if merges:
        patterns.append("merging")
    if error_handlers:
        patterns.append("errorHandling")
    flow_type = classify(bool(branches), bool(merges), bool(error_handlers))

    # 4) Execution order from trigger-category nodes
    triggers = [name for name in graph.names if _is_trigger_category(graph.node_type(name))]
    order = execution_order(graph.names, graph.outgoing, triggers)

    logger.info(
        f"Detected {flow_type.upper()} workflow "
        f"(branches={len(branches)}, merges={len(merges)}, error_handlers={len(error_handlers)})"
    )

    return FlowAnalysis(
        flow_type=flow_type,
        patterns=tuple(patterns),
        execution_order=tuple(order),
        branch_points=frozenset(branches),
        merge_points=frozenset(merges),
        error_handlers=error_handlers,
        branches=branches,
        merges=merges,
        _positions={name: i for i, name in enumerate(order)},
    )
