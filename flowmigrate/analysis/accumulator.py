# flowmigrate/analysis/accumulator.py
"""
Category / outcome / auth statistics over a source workflow.

Runs independently of the conversion passes: every declared node is looked at
exactly once and lands in exactly one outcome bucket (converted, unsupported,
ignored). All state lives in the AnalysisStats built by one call.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from flowmigrate.errors import InternalConsistencyError
from flowmigrate.mapping.registry import lookup
from flowmigrate.utils.logger import get_logger

logger = get_logger("analysis")

# rule category -> counter attribute
_CATEGORY_FIELDS = {
    "trigger": "trigger_nodes",
    "ai": "ai_nodes",
    "app": "app_nodes",
    "data": "data_nodes",
    "logic": "logic_nodes",
    "integration": "integration_nodes",
}


@dataclass
class AnalysisStats:
    total_nodes: int = 0
    trigger_nodes: int = 0
    ai_nodes: int = 0
    app_nodes: int = 0
    data_nodes: int = 0
    logic_nodes: int = 0
    integration_nodes: int = 0
    converted_nodes: int = 0
    unsupported_nodes: int = 0
    ignored_nodes: int = 0
    auth_required_count: int = 0
    auth_providers: List[str] = field(default_factory=list)
    auth_nodes: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalNodes": self.total_nodes,
            "triggerNodes": self.trigger_nodes,
            "aiNodes": self.ai_nodes,
            "appNodes": self.app_nodes,
            "dataNodes": self.data_nodes,
            "logicNodes": self.logic_nodes,
            "integrationNodes": self.integration_nodes,
            "convertedNodes": self.converted_nodes,
            "unsupportedNodes": self.unsupported_nodes,
            "ignoredNodes": self.ignored_nodes,
            "authRequiredCount": self.auth_required_count,
            "authProviders": list(self.auth_providers),
            "authNodes": [dict(n) for n in self.auth_nodes],
        }

    def check(self) -> None:
        """converted + unsupported + ignored must equal total."""
        calculated = self.converted_nodes + self.unsupported_nodes + self.ignored_nodes
        if calculated != self.total_nodes:
            logger.error(
                f"Node count mismatch: converted={self.converted_nodes} unsupported={self.unsupported_nodes} "
                f"ignored={self.ignored_nodes} total={self.total_nodes}"
            )
            raise InternalConsistencyError("Node count calculation mismatch")


def _count_node(stats: AnalysisStats, node: Any) -> None:
    stats.total_nodes += 1
    node_type = node.get("type") if isinstance(node, dict) else None
    name = node.get("name") if isinstance(node, dict) else None
    rule = lookup(node_type)

    if rule is None:
        stats.unsupported_nodes += 1
        logger.warning(f"Unsupported node: {node_type} ({name})")
        return
    if rule.ignore:
        stats.ignored_nodes += 1
        return

    stats.converted_nodes += 1
    attr = _CATEGORY_FIELDS.get(rule.category)
    if attr:
        setattr(stats, attr, getattr(stats, attr) + 1)

    if rule.requires_auth:
        stats.auth_required_count += 1
        if rule.auth_provider not in stats.auth_providers:
            stats.auth_providers.append(rule.auth_provider)
        stats.auth_nodes.append({"nodeName": name, "provider": rule.auth_provider, "category": rule.category})


def _log_results(stats: AnalysisStats) -> None:
    logger.info(
        f"Analysis: total={stats.total_nodes} converted={stats.converted_nodes} "
        f"unsupported={stats.unsupported_nodes} ignored={stats.ignored_nodes}"
    )
    logger.debug(
        f"Categories: trigger={stats.trigger_nodes} ai={stats.ai_nodes} app={stats.app_nodes} "
        f"data={stats.data_nodes} logic={stats.logic_nodes} integration={stats.integration_nodes}"
    )
    if stats.auth_required_count:
        logger.info(
            f"Auth required on {stats.auth_required_count} node(s), providers: {', '.join(stats.auth_providers)}"
        )


# ---------- Public API ----------

def analyze_workflow(workflow: Dict[str, Any]) -> AnalysisStats:
    stats = AnalysisStats()
    nodes = workflow.get("nodes") if isinstance(workflow, dict) else None
    for node in nodes if isinstance(nodes, list) else []:
        _count_node(stats, node)
    stats.check()
    _log_results(stats)
    return stats
