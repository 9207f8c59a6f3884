#flowmigrate/mapping/schema.py
from typing import Any, List

from jsonschema import Draft7Validator

# Shapes the converter itself depends on (checked by engine.validate)
NODES_SHAPE = {
    "type": "array",
    "items": {"type": "object"},
}

CONNECTIONS_SHAPE = {
    "type": "object",
}

_HOP = {
    "type": "object",
    "required": ["node"],
    "properties": {
        "node": {"type": "string"},
        # Optional hop kind (usually "main" or an ai_* kind)
        "type": {"type": "string"},
        "index": {
            "type": "integer",
            "minimum": 0
        }
    },
    "additionalProperties": True
}

# Full export shape; deviations are reported as warnings, never rejected
N8N_WORKFLOW_SCHEMA = {
    "type": "object",
    "required": ["nodes", "connections"],
    "properties": {
        "name": {"type": "string"},
        "nodes": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "type"],
                "properties": {
                    "id": {
                        "type": ["string", "number"]
                    },
                    "name": {
                        "type": "string",
                        "minLength": 1
                    },
                    "type": {
                        "type": "string",
                        # n8n-nodes-base.x or scoped packages such as @n8n/n8n-nodes-langchain.x
                        "pattern": "^(@[A-Za-z0-9_-]+/)?[A-Za-z0-9_-]+\\.[A-Za-z0-9_.-]+$"
                    },
                    "parameters": {
                        "type": "object"
                    },
                    "typeVersion": {
                        "type": ["integer", "number"]
                    },
                    "disabled": {
                        "type": "boolean"
                    },
                    # n8n exports [x, y]; some tools write {x, y}
                    "position": {
                        "anyOf": [
                            {
                                "type": "array",
                                "items": {"type": "number"},
                                "minItems": 2,
                                "maxItems": 2
                            },
                            {
                                "type": "object",
                                "properties": {
                                    "x": {"type": "number"},
                                    "y": {"type": "number"}
                                },
                                "required": ["x", "y"],
                                "additionalProperties": True
                            }
                        ]
                    }
                },
                "additionalProperties": True
            }
        },

        "connections": {
            "type": "object",

            # Top-level keys: source node names
            "patternProperties": {
                "^.+$": {
                    "type": "object",

                    # Inner keys: connection kinds ("main", "error", "ai_languageModel", ...)
                    "patternProperties": {
                        "^.+$": {
                            "type": "array",
                            "items": {
                                # One output slot: a list of hops (possibly empty),
                                # a single hop object, or null for an unused slot
                                "anyOf": [
                                    {"type": "array", "items": _HOP},
                                    _HOP,
                                    {"type": "null"}
                                ]
                            }
                        }
                    },

                    "additionalProperties": False
                }
            },

            "additionalProperties": False
        }
    }
}

_NODES_VALIDATOR = Draft7Validator(NODES_SHAPE)
_CONNECTIONS_VALIDATOR = Draft7Validator(CONNECTIONS_SHAPE)
_WORKFLOW_VALIDATOR = Draft7Validator(N8N_WORKFLOW_SCHEMA)


def nodes_shape_ok(value: Any) -> bool:
    return _NODES_VALIDATOR.is_valid(value)


def connections_shape_ok(value: Any) -> bool:
    return _CONNECTIONS_VALIDATOR.is_valid(value)


def schema_issues(workflow: Any, limit: int = 20) -> List[str]:
    """Human-readable schema deviations, sorted by location, at most `limit`."""
    errors = sorted(_WORKFLOW_VALIDATOR.iter_errors(workflow), key=lambda e: list(map(str, e.absolute_path)))
    issues: List[str] = []
    for e in errors[:limit]:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        issues.append(f"[SCHEMA] {where}: {e.message}")
    return issues
