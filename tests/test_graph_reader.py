# tests/test_graph_reader.py

from flowmigrate.graph.reader import GraphIndex, assign_ids, iter_edges, slot_hops
from flowmigrate.utils.ids import TRIGGER_NODE_ID, IdFactory


def _node(name, node_type, **params):
    return {"name": name, "type": node_type, "parameters": params}


def test_slot_hops_keeps_slot_positions():
    hop = {"node": "B", "type": "main", "index": 0}
    slots = [[hop], None, {"node": "C"}, [{"type": "main"}, "junk"]]
    assert slot_hops(slots) == [[hop], [], [{"node": "C"}], []]
    assert slot_hops(None) == []
    assert slot_hops("main") == []


def test_iter_edges_ignores_malformed_sources():
    conns = {
        "A": {"main": [[{"node": "B"}], [{"node": "C"}]]},
        "Bad": "not-a-dict",
        "D": {"main": "not-a-list"},
    }
    assert list(iter_edges(conns)) == [("A", 0, {"node": "B"}), ("A", 1, {"node": "C"})]
    assert list(iter_edges(None)) == []


def test_index_first_declaration_wins_and_skips_junk():
    nodes = [
        _node("A", "n8n-nodes-base.set"),
        "junk",
        {"type": "n8n-nodes-base.set"},
        _node("A", "n8n-nodes-base.code"),
        _node("B", "n8n-nodes-base.set"),
    ]
    g = GraphIndex.from_workflow(nodes, {})
    assert g.names == ["A", "B"]
    assert g.node_type("A") == "n8n-nodes-base.set"
    assert g.node_type("missing") is None


def test_adjacency_keeps_multiplicity_and_ai_kinds():
    nodes = [_node("A", "n8n-nodes-base.set"), _node("B", "n8n-nodes-base.set"),
             _node("M", "@n8n/n8n-nodes-langchain.lmChatOpenAi")]
    conns = {
        "A": {"main": [[{"node": "B"}], [{"node": "B"}]]},
        "M": {"ai_languageModel": [[{"node": "A"}]]},
    }
    g = GraphIndex.from_workflow(nodes, conns)
    assert g.outgoing["A"] == ["B", "B"]
    assert g.incoming["B"] == ["A", "A"]
    assert g.ai_outgoing["M"] == {"ai_languageModel": ["A"]}
    assert g.ai_incoming["A"] == {"ai_languageModel": ["M"]}
    assert g.main_graph().out_degree("A") == 2


def test_assign_ids_single_trigger():
    nodes = [
        _node("Note", "n8n-nodes-base.stickyNote"),
        _node("Hook", "n8n-nodes-base.webhook"),
        _node("Manual", "n8n-nodes-base.manualTrigger"),
        _node("Mystery", "n8n-nodes-base.unknownThing"),
        _node("Code", "n8n-nodes-base.code"),
    ]
    id_map = assign_ids(nodes, IdFactory())
    assert set(id_map) == {"Hook", "Manual", "Code"}
    assert id_map["Hook"] == TRIGGER_NODE_ID
    assert id_map["Manual"].startswith("webhookTriggerNode_")
    assert id_map["Code"].startswith("codeNode_")
    assert list(id_map.values()).count(TRIGGER_NODE_ID) == 1


def test_assign_ids_without_trigger():
    id_map = assign_ids([_node("A", "n8n-nodes-base.slack")], IdFactory())
    assert TRIGGER_NODE_ID not in id_map.values()
