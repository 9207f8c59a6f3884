# flowmigrate/transform/builders.py
"""
Per-type output builders.

Each builder takes the raw n8n node and a BuildContext and returns the
type-specific part of the Lamatic record (at least `values`; optionally
`nodeType`, `nodeName`, `branches`). The transformer owns the common fields.
Adding a type means adding one function and one table entry.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from flowmigrate.utils.ids import IdFactory


@dataclass(frozen=True)
class BuildContext:
    node_id: str
    ids: IdFactory
    # chat models folded into this node: [{nodeName, provider, model, originalType}]
    models: Tuple[dict, ...] = field(default_factory=tuple)
    # name of the node this one is folded into, if any
    fold_parent: Optional[str] = None


Builder = Callable[[dict, BuildContext], Dict[str, Any]]


# ---------- helpers ----------

def _params(node: dict) -> dict:
    p = node.get("parameters")
    return p if isinstance(p, dict) else {}


def _get(d: Any, *path: str, default: Any = None) -> Any:
    cur = d
    for key in path:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(key)
    return default if cur is None else cur


def _rl_value(v: Any) -> Any:
    """Resource-locator params ({"__rl": true, "value": ...}) collapse to their value."""
    if isinstance(v, dict):
        return v.get("value") or v.get("cachedResultName") or ""
    return v if v is not None else ""


def model_name(node: dict) -> str:
    p = _params(node)
    return str(_rl_value(p.get("model")) or _get(p, "options", "model", default=""))


def _prompts(ctx: BuildContext, system: str, user: str) -> List[dict]:
    return [
        {"id": ctx.ids.prompt_id(ctx.node_id, 0), "content": system, "role": "system"},
        {"id": ctx.ids.prompt_id(ctx.node_id, 1), "content": user, "role": "user"},
    ]


def _prompt_values(ctx: BuildContext, system: str, user: str, tools: List[str]) -> Dict[str, Any]:
    return {
        "prompts": _prompts(ctx, system, user),
        "tools": tools,
        "credentials": "",
        "messages": "[]",
        "memories": "[]",
        "attachments": "",
    }


def _dump(params: dict) -> str:
    return json.dumps(params, indent=2, ensure_ascii=False, default=str)


# ---------- triggers ----------

def build_webhook_trigger(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    path = p.get("path") or ""
    return {
        "nodeType": "webhookTriggerNode",
        "values": {
            "path": path,
            "method": p.get("httpMethod") or "POST",
            "description": f"Webhook endpoint: {path or '/webhook'}",
        },
    }


def build_form_trigger(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    fields = _get(p, "formFields", "values", default=[])
    labels = [f.get("fieldLabel") for f in fields if isinstance(f, dict) and f.get("fieldLabel")] \
        if isinstance(fields, list) else []
    return {
        "nodeName": p.get("formTitle") or node.get("name"),
        "values": {
            "description": f"Form: {p.get('formDescription') or ''}",
            "expectedFields": labels,
        },
    }


def build_passthrough_trigger(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    return {
        "values": {
            "description": f"Converted from {node.get('type')}",
            "originalType": node.get("type"),
        },
    }


# ---------- AI ----------

def build_agent(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    system = _get(p, "options", "systemMessage") or p.get("systemMessage") \
        or "You are an AI Assistant specialized in creative content generation."
    user = p.get("text") or \
        "Generate creative assets based on the provided brand guidelines and product information."
    return {
        "nodeType": "agentNode",
        "values": {
            "prompts": _prompts(ctx, system, user),
            "agents": [
                {
                    "name": "Creative Director",
                    "description": "Generates multiple creative concepts for marketing assets",
                    "schema": {},
                }
            ],
            "tools": ["image_generation", "content_creation", "brand_guidelines"],
            "models": list(ctx.models),
            "messages": "[]",
            "stopWord": "",
            "maxIterations": _get(p, "options", "maxIterations", default=5),
            "connectedTo": "",
        },
    }


def build_chain(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    messages = _get(p, "messages", "messageValues", default=[])
    system = next(
        (m.get("message") for m in messages if isinstance(m, dict) and m.get("message")),
        "You are a helpful assistant running a prompt chain.",
    ) if isinstance(messages, list) else "You are a helpful assistant running a prompt chain."
    values = _prompt_values(
        ctx, system,
        p.get("text") or p.get("prompt") or "Process the input and provide helpful responses.",
        ["chat_completion", "prompt_chaining"],
    )
    values["models"] = list(ctx.models)
    return {"values": values}


def build_chat_model(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    return {
        "values": _prompt_values(
            ctx,
            "You are an AI assistant powered by " + (model_name(node) or "advanced language model"),
            "Process the input and provide helpful responses.",
            ["chat_completion", "text_generation"],
        )
    }


def build_memory(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    window = p.get("contextWindowLength") or p.get("maxTokenLimit") or "default"
    return {
        "values": _prompt_values(
            ctx,
            "You are a conversation memory manager. Maintain context and history of the conversation.",
            f"Manage conversation memory with window size: {window}",
            ["memory_management", "conversation_history"],
        )
    }


def build_vector_store(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    store = "Supabase" if "Supabase" in str(node.get("type")) else "Pinecone"
    return {
        "values": _prompt_values(
            ctx,
            "You are a vector database assistant. Handle document storage, retrieval, and similarity search.",
            f"Perform vector operations on the {store} database.",
            ["vector_search", "document_embedding", "similarity_search"],
        )
    }


def build_output_parser(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    return {
        "values": _prompt_values(
            ctx,
            "You are a structured data parser. Parse and format AI responses according to specific schemas.",
            f"Parse the output according to this schema: {p.get('jsonSchemaExample') or '{}'}",
            ["json_parsing", "schema_validation", "data_structuring"],
        )
    }


# ---------- data ----------

def build_set(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    return {
        "values": _prompt_values(
            ctx,
            "You are a data transformation assistant. "
            "Transform the input data according to the specified structure.",
            f"Transform the data to this structure: {p.get('jsonOutput') or _dump(p)}",
            ["data_transformation", "json_processing"],
        )
    }


def build_code(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    if p.get("language") == "python" and p.get("pythonCode"):
        return {"values": {"code": p["pythonCode"], "language": "python"}}
    code = p.get("jsCode") or p.get("functionCode") or "// Converted from n8n code node\nreturn items;"
    return {"values": {"code": code}}


# ---------- logic ----------

def build_switch(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    rules = _get(p, "rules", "values") or _get(p, "rules", "rules") or []
    if not isinstance(rules, list):
        rules = []
    labels = [f"Condition {i}" for i in range(1, len(rules) + 1)]
    return {
        "values": {
            "branches": [
                {"label": label, "value": f"{ctx.node_id}-branch_{i}"}
                for i, label in enumerate(labels, start=1)
            ]
        },
        "branches": [
            {"label": label, "value": ctx.ids.placeholder(ctx.node_id, i)}
            for i, label in enumerate(labels, start=1)
        ],
    }


def build_if(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    labels = ["True", "False"]
    return {
        "values": {
            "conditions": _params(node).get("conditions") or {},
            "branches": [
                {"label": label, "value": f"{ctx.node_id}-branch_{i}"}
                for i, label in enumerate(labels, start=1)
            ],
        },
        "branches": [
            {"label": label, "value": ctx.ids.placeholder(ctx.node_id, i)}
            for i, label in enumerate(labels, start=1)
        ],
    }


def build_execute_workflow(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    wf = _rl_value(_params(node).get("workflowId")) or "specified workflow"
    return {
        "values": _prompt_values(
            ctx,
            "You are a workflow orchestration assistant. Execute workflows and manage sub-workflow calls.",
            f"Execute workflow: {wf} with the provided parameters.",
            ["workflow_execution", "sub_workflow_calls", "process_orchestration"],
        )
    }


# ---------- integrations ----------

def build_http_request(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    method = p.get("method") or p.get("requestMethod") or "GET"
    return {
        "values": _prompt_values(
            ctx,
            "You are an API integration assistant. Make HTTP requests and process responses.",
            f"Make a {method} request to: {p.get('url') or ''} with the provided data.",
            ["http_requests", "api_calls", "image_generation_api"],
        )
    }


def build_respond_to_webhook(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    return {
        "values": _prompt_values(
            ctx,
            "You are a webhook response assistant. Generate appropriate responses for incoming webhook requests.",
            f"Generate webhook response with status: {p.get('responseCode') or 200} "
            f"and message: {p.get('responseData') or 'Success'}",
            ["webhook_response", "http_response_generation", "status_codes"],
        )
    }


def build_google_drive(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    return {
        "values": _prompt_values(
            ctx,
            "You are a file management assistant with Google Drive access.",
            f"Perform this operation: {p.get('resource') or 'file'} - {p.get('operation') or 'create'} "
            f"with name: {p.get('name') or ''}",
            ["google_drive_api", "file_operations", "folder_management"],
        )
    }


def build_gmail(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    return {
        "values": {
            "credentials": "",
            "action": p.get("operation") or "send",
            "recipient_email": p.get("toList") or p.get("sendTo") or p.get("to") or "",
            "cc": "",
            "bcc": "",
            "subject": p.get("subject") or "",
            "body": p.get("message") or p.get("body") or "",
            "is_html": p.get("emailType") == "html",
            "max_results": 10,
            "from_user": "",
            "to_user": "",
        }
    }


def build_slack(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    return {
        "values": {
            "credentials": "",
            "action": p.get("operation") or "postMessage",
            "channel": _rl_value(p.get("channel") or p.get("channelId")),
            "message": p.get("text") or p.get("message") or "",
            "thread_ts": "",
            "username": "",
            "icon_emoji": "",
            "icon_url": "",
        }
    }


def build_teams(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    p = _params(node)
    return {
        "values": {
            "credentials": "",
            "action": p.get("operation") or "create",
            "team": _rl_value(p.get("teamId")),
            "channel": _rl_value(p.get("channelId")),
            "message": p.get("message") or p.get("messageText") or "",
        }
    }


# ---------- fallback ----------

def build_generic(node: dict, ctx: BuildContext) -> Dict[str, Any]:
    return {
        "values": _prompt_values(
            ctx,
            f"You are an AI assistant handling {node.get('type')} functionality.",
            f"Process the input data according to the original node configuration: {_dump(_params(node))}",
            [],
        )
    }


TRIGGER_BUILDERS: Dict[str, Builder] = {
    "n8n-nodes-base.webhook": build_webhook_trigger,
    "n8n-nodes-base.formTrigger": build_form_trigger,
    "n8n-nodes-base.manualTrigger": build_passthrough_trigger,
    "n8n-nodes-base.scheduleTrigger": build_passthrough_trigger,
}

CHAT_MODEL_TYPES = (
    "@n8n/n8n-nodes-langchain.lmChatOpenRouter",
    "@n8n/n8n-nodes-langchain.lmChatGoogleGemini",
    "@n8n/n8n-nodes-langchain.lmChatOpenAi",
    "@n8n/n8n-nodes-langchain.lmChatAnthropic",
)

BUILDERS: Dict[str, Builder] = {
    "@n8n/n8n-nodes-langchain.agent": build_agent,
    "@n8n/n8n-nodes-langchain.chainLlm": build_chain,
    **{t: build_chat_model for t in CHAT_MODEL_TYPES},
    "@n8n/n8n-nodes-langchain.memoryBufferWindow": build_memory,
    "@n8n/n8n-nodes-langchain.vectorStoreSupabase": build_vector_store,
    "@n8n/n8n-nodes-langchain.vectorStorePinecone": build_vector_store,
    "@n8n/n8n-nodes-langchain.outputParserStructured": build_output_parser,
    "n8n-nodes-base.set": build_set,
    "n8n-nodes-base.code": build_code,
    "n8n-nodes-base.function": build_code,
    "n8n-nodes-base.functionItem": build_code,
    "n8n-nodes-base.switch": build_switch,
    "n8n-nodes-base.if": build_if,
    "n8n-nodes-base.executeWorkflow": build_execute_workflow,
    "n8n-nodes-base.httpRequest": build_http_request,
    "n8n-nodes-base.respondToWebhook": build_respond_to_webhook,
    "n8n-nodes-base.googleDrive": build_google_drive,
    "n8n-nodes-base.gmail": build_gmail,
    "n8n-nodes-base.gmailTool": build_gmail,
    "n8n-nodes-base.slack": build_slack,
    "n8n-nodes-base.microsoftTeams": build_teams,
}
