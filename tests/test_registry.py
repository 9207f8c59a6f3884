# tests/test_registry.py

import pytest

from flowmigrate.mapping.registry import (
    CATEGORIES,
    MAPPING_RULES,
    STICKY_NOTE_TYPE,
    WEBHOOK_TRIGGER_TYPE,
    is_convertible,
    is_trigger_rule,
    lookup,
    supported_types,
)


def test_lookup_exact_match_only():
    rule = lookup("n8n-nodes-base.webhook")
    assert rule.target_type == WEBHOOK_TRIGGER_TYPE
    assert rule.category == "trigger"

    assert lookup("n8n-nodes-base.Webhook") is None
    assert lookup("n8n-nodes-base.webhook.v2") is None
    assert lookup(None) is None
    assert lookup(42) is None


def test_table_is_read_only():
    with pytest.raises(TypeError):
        MAPPING_RULES["n8n-nodes-base.custom"] = MAPPING_RULES["n8n-nodes-base.set"]


def test_every_convertible_rule_has_a_category():
    for node_type, rule in MAPPING_RULES.items():
        if rule.ignore:
            continue
        assert rule.category in CATEGORIES, node_type
        assert rule.target_type, node_type


def test_auth_flag_matches_provider():
    for node_type, rule in MAPPING_RULES.items():
        assert rule.requires_auth == (rule.auth_provider is not None), node_type


def test_sticky_note_is_ignored_and_not_listed():
    rule = lookup(STICKY_NOTE_TYPE)
    assert rule.ignore
    assert not is_convertible(rule)
    assert STICKY_NOTE_TYPE not in supported_types()
    assert supported_types()[0] == "n8n-nodes-base.webhook"


@pytest.mark.parametrize("node_type, expected", [
    ("n8n-nodes-base.webhook", True),
    ("n8n-nodes-base.formTrigger", True),
    ("n8n-nodes-base.scheduleTrigger", True),
    ("n8n-nodes-base.gmailTrigger", True),
    ("n8n-nodes-base.gmail", False),
    ("n8n-nodes-base.slack", False),
    (STICKY_NOTE_TYPE, False),
    ("n8n-nodes-base.unknown", False),
])
def test_trigger_eligibility(node_type, expected):
    assert is_trigger_rule(lookup(node_type)) is expected
