# flowmigrate/mapping/registry.py
"""
Static n8n -> Lamatic node type table.

Keys are exact n8n type strings (no version suffix handling). The table is
wrapped in a MappingProxyType at import time and never mutated afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

CATEGORIES = ("trigger", "ai", "app", "data", "logic", "integration")

WEBHOOK_TRIGGER_TYPE = "webhookTriggerNode"
ERROR_NODE_TYPE = "n8n-nodes-base.error"
STICKY_NOTE_TYPE = "n8n-nodes-base.stickyNote"


@dataclass(frozen=True)
class NodeTypeRule:
    target_type: Optional[str]
    category: Optional[str]
    subcategory: Optional[str] = None
    requires_auth: bool = False
    auth_provider: Optional[str] = None
    ignore: bool = False
    description: str = ""


def _rule(target_type, category, subcategory, description, auth_provider=None) -> NodeTypeRule:
    return NodeTypeRule(
        target_type=target_type,
        category=category,
        subcategory=subcategory,
        requires_auth=auth_provider is not None,
        auth_provider=auth_provider,
        description=description,
    )


_RULES: Dict[str, NodeTypeRule] = {
    # ---------- triggers ----------
    "n8n-nodes-base.webhook": _rule(WEBHOOK_TRIGGER_TYPE, "trigger", "webhook", "HTTP webhook trigger"),
    "n8n-nodes-base.formTrigger": _rule(WEBHOOK_TRIGGER_TYPE, "trigger", "form", "Form trigger"),
    "n8n-nodes-base.manualTrigger": _rule(WEBHOOK_TRIGGER_TYPE, "trigger", "manual", "Manual trigger"),
    "n8n-nodes-base.scheduleTrigger": _rule(WEBHOOK_TRIGGER_TYPE, "trigger", "schedule", "Schedule trigger"),
    "n8n-nodes-base.gmailTrigger": _rule("gmailNode", "trigger", "email", "Gmail email trigger", "Gmail"),

    # ---------- AI & LLM ----------
    "n8n-nodes-base.openAi": _rule("LLMNode", "ai", "llm", "OpenAI LLM", "OpenAI"),
    "@n8n/n8n-nodes-langchain.agent": _rule("agentNode", "ai", "agent", "AI Agent", "LangChain"),
    "@n8n/n8n-nodes-langchain.chainLlm": _rule("LLMNode", "ai", "chain", "LLM Chain", "LangChain"),
    "@n8n/n8n-nodes-langchain.lmChatOpenRouter": _rule("LLMNode", "ai", "llm", "OpenRouter LLM", "OpenRouter"),
    "@n8n/n8n-nodes-langchain.lmChatGoogleGemini": _rule("LLMNode", "ai", "llm", "Google Gemini LLM", "Google Gemini"),
    "@n8n/n8n-nodes-langchain.lmChatOpenAi": _rule("LLMNode", "ai", "llm", "OpenAI LLM via LangChain", "OpenAI"),
    "@n8n/n8n-nodes-langchain.lmChatAnthropic": _rule("LLMNode", "ai", "llm", "Anthropic LLM", "Anthropic"),
    "@n8n/n8n-nodes-langchain.outputParserStructured": _rule("LLMNode", "ai", "parser", "AI output parser"),
    "@n8n/n8n-nodes-langchain.memoryBufferWindow": _rule("LLMNode", "ai", "memory", "Memory management for conversations"),
    "@n8n/n8n-nodes-langchain.vectorStoreSupabase": _rule("LLMNode", "ai", "vector_store", "Vector database operations"),
    "@n8n/n8n-nodes-langchain.vectorStorePinecone": _rule("LLMNode", "ai", "vector_store", "Pinecone vector database"),

    # ---------- data manipulation ----------
    "n8n-nodes-base.set": _rule("LLMNode", "data", "transformation", "Data transformation via AI"),
    "n8n-nodes-base.function": _rule("codeNode", "data", "code", "JavaScript function execution"),
    "n8n-nodes-base.functionItem": _rule("codeNode", "data", "code", "JavaScript function per item"),
    "n8n-nodes-base.code": _rule("codeNode", "data", "code", "Code execution"),
    "n8n-nodes-base.json": _rule("LLMNode", "data", "transformation", "JSON manipulation via AI"),
    "n8n-nodes-base.merge": _rule("LLMNode", "data", "transformation", "Data merging via AI"),
    "n8n-nodes-base.itemLists": _rule("LLMNode", "data", "transformation", "List operations via AI"),
    "n8n-nodes-base.split": _rule("LLMNode", "data", "transformation", "Data splitting via AI"),
    "n8n-nodes-base.splitOut": _rule("LLMNode", "data", "transformation", "Split output processing via AI"),
    "n8n-nodes-base.aggregate": _rule("LLMNode", "data", "aggregation", "Data aggregation via AI"),

    # ---------- logic & flow control ----------
    "n8n-nodes-base.switch": _rule("branchNode", "logic", "branch", "Conditional branching logic"),
    "n8n-nodes-base.if": _rule("branchNode", "logic", "branch", "Conditional logic"),
    "n8n-nodes-base.filter": _rule("LLMNode", "logic", "filter", "Data filtering via AI"),
    "n8n-nodes-base.wait": _rule("LLMNode", "logic", "delay", "Delay operations"),
    "n8n-nodes-base.noOp": _rule("LLMNode", "logic", "passthrough", "Pass-through node"),
    "n8n-nodes-base.executeWorkflow": _rule("LLMNode", "logic", "workflow", "Execute workflow via AI orchestration"),
    ERROR_NODE_TYPE: _rule("LLMNode", "logic", "error", "Error handling via AI"),

    # ---------- communication ----------
    "n8n-nodes-base.slack": _rule("slackNode", "app", "messaging", "Slack integration"),
    "n8n-nodes-base.gmail": _rule("gmailNode", "app", "email", "Gmail integration", "Gmail"),
    "n8n-nodes-base.gmailTool": _rule("gmailNode", "app", "email", "Gmail tool operations", "Gmail"),
    "n8n-nodes-base.microsoftTeams": _rule("teamsNode", "app", "messaging", "Microsoft Teams integration"),
    "n8n-nodes-base.discord": _rule("LLMNode", "app", "messaging", "Discord integration via AI"),
    "n8n-nodes-base.telegram": _rule("LLMNode", "app", "messaging", "Telegram integration via AI"),
    "n8n-nodes-base.whatsApp": _rule("LLMNode", "app", "messaging", "WhatsApp integration via AI"),

    # ---------- storage & files ----------
    "n8n-nodes-base.googleDrive": _rule("LLMNode", "app", "storage", "Google Drive operations via AI"),
    "n8n-nodes-base.dropbox": _rule("LLMNode", "app", "storage", "Dropbox operations via AI"),
    "n8n-nodes-base.oneDrive": _rule("LLMNode", "app", "storage", "OneDrive operations via AI"),
    "n8n-nodes-base.s3": _rule("LLMNode", "app", "storage", "AWS S3 operations via AI"),

    # ---------- databases ----------
    "n8n-nodes-base.airtable": _rule("LLMNode", "integration", "database", "Airtable operations via AI"),
    "n8n-nodes-base.postgres": _rule("LLMNode", "integration", "database", "PostgreSQL operations via AI"),
    "n8n-nodes-base.mysql": _rule("LLMNode", "integration", "database", "MySQL operations via AI"),
    "n8n-nodes-base.mongodb": _rule("LLMNode", "integration", "database", "MongoDB operations via AI"),
    "n8n-nodes-base.redis": _rule("LLMNode", "integration", "database", "Redis operations via AI"),

    # ---------- HTTP & API ----------
    "n8n-nodes-base.httpRequest": _rule("LLMNode", "integration", "api", "HTTP requests via AI"),
    "n8n-nodes-base.respondToWebhook": _rule("LLMNode", "integration", "webhook", "Webhook response via AI"),

    # ---------- UI only ----------
    STICKY_NOTE_TYPE: NodeTypeRule(
        target_type=None, category=None, ignore=True, description="UI annotation - ignored"
    ),
}

MAPPING_RULES: Mapping[str, NodeTypeRule] = MappingProxyType(_RULES)


def lookup(node_type) -> Optional[NodeTypeRule]:
    """Exact-match rule lookup; None means the type is unsupported."""
    if not isinstance(node_type, str):
        return None
    return MAPPING_RULES.get(node_type)


def is_convertible(rule: Optional[NodeTypeRule]) -> bool:
    return rule is not None and not rule.ignore and bool(rule.target_type)


def is_trigger_rule(rule: Optional[NodeTypeRule]) -> bool:
    """Eligible for the trigger slot: trigger category or a webhook-trigger target."""
    if not is_convertible(rule):
        return False
    return rule.category == "trigger" or rule.target_type == WEBHOOK_TRIGGER_TYPE


def supported_types() -> List[str]:
    """Non-ignored source types, in table order."""
    return [t for t, r in MAPPING_RULES.items() if not r.ignore]
