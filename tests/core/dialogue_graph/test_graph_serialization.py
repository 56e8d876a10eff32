"""대화 문서 직렬화 테스트"""

import json

import pytest

from src.core.dialogue_graph.enums import ConnectionKind
from src.core.dialogue_graph.errors import DialogueFormatError
from src.core.dialogue_graph.models import QuestOfferNode, create_dialogue
from src.core.dialogue_graph.mutations import connect_nodes, insert_node
from src.core.dialogue_graph.serialization import (
    dialogue_from_dict,
    dialogue_from_json,
    dialogue_to_dict,
    dialogue_to_json,
)


def _make_rich_dialogue():
    d = create_dialogue("Quartermaster", actor_id="npc_qm")
    d.expected_scenes = ["scene_fort"]
    speech = insert_node(
        d,
        {
            "type": "npc_speech",
            "text": "Need supplies?",
            "conditions": [{"type": "time", "from": 20, "to": 6, "inverted": True}],
            "effects": [{"type": "set_flag", "scope": "actor", "key": "met_qm"}],
        },
    )
    branch = insert_node(d, {"type": "branch"})
    offer = insert_node(d, {"type": "quest_offer", "questId": "q_supply"})
    reward = insert_node(
        d,
        {
            "type": "reward",
            "rewards": {"gold": 50, "items": [{"itemId": "rope", "quantity": 2}]},
        },
    )
    end = insert_node(d, {"type": "end", "endType": "trade"})
    connect_nodes(
        d,
        speech.id,
        branch.id,
        ConnectionKind.RESPONSE,
        {"text": "Yes", "skillCheck": {"skill": "per", "dc": 10}, "hidden": True},
    )
    connect_nodes(
        d,
        branch.id,
        offer.id,
        ConnectionKind.BRANCH,
        {"conditions": [{"type": "player_level", "value": 3, "comparison": "gte"}]},
    )
    connect_nodes(d, branch.id, end.id, ConnectionKind.DEFAULT)
    connect_nodes(d, offer.id, reward.id, ConnectionKind.ACCEPT)
    connect_nodes(d, reward.id, end.id)
    return d


class TestExport:
    def test_camel_case_keys(self):
        data = dialogue_to_dict(_make_rich_dialogue())
        assert {"id", "actorId", "name", "startNodeId", "nodes", "editorZoom"} <= set(data)
        node = data["nodes"][data["startNodeId"]]
        assert node["type"] == "npc_speech"
        assert node["responses"][0]["nextNodeId"]

    def test_tags_written(self):
        data = dialogue_to_dict(_make_rich_dialogue())
        speech = data["nodes"][data["startNodeId"]]
        assert speech["conditions"][0]["type"] == "time"
        assert speech["conditions"][0]["fromHour"] == 20
        assert speech["effects"][0]["type"] == "set_flag"
        assert speech["effects"][0]["scope"] == "actor"

    def test_json_is_valid(self):
        text = dialogue_to_json(_make_rich_dialogue())
        assert json.loads(text)["name"] == "Quartermaster"


class TestImport:
    def test_export_import_equality(self):
        original = _make_rich_dialogue()
        restored = dialogue_from_dict(dialogue_to_dict(original))
        assert restored == original

    def test_json_round_trip(self):
        original = _make_rich_dialogue()
        assert dialogue_from_json(dialogue_to_json(original)) == original

    def test_minimal_document(self):
        d = dialogue_from_dict(
            {"name": "Tiny", "nodes": {"n1": {"type": "end"}}, "startNodeId": "n1"}
        )
        assert d.name == "Tiny"
        assert d.nodes["n1"].id == "n1"
        assert len(d.id) == 16
        assert d.updated_at == d.created_at

    def test_snake_case_accepted(self):
        d = dialogue_from_dict(
            {
                "name": "Snake",
                "start_node_id": "a",
                "nodes": {"a": {"type": "quest_offer", "quest_id": "q1"}},
            }
        )
        assert d.start_node_id == "a"
        assert isinstance(d.nodes["a"], QuestOfferNode)
        assert d.nodes["a"].quest_id == "q1"

    def test_unknown_keys_ignored(self):
        d = dialogue_from_dict({"name": "X", "nodes": {}, "flavor": "ignored"})
        assert d.nodes == {}


class TestImportErrors:
    @pytest.mark.parametrize(
        "document",
        [
            [],
            {"nodes": {}},
            {"name": "No nodes"},
            {"name": "Bad nodes", "nodes": []},
            {"name": "Bad node", "nodes": {"a": "text"}},
            {"name": "Bad tag", "nodes": {"a": {"type": "portal"}}},
            {"name": "Bad cond", "nodes": {"a": {"conditions": [{"type": "moon"}]}}},
        ],
    )
    def test_rejected(self, document):
        with pytest.raises(DialogueFormatError):
            dialogue_from_dict(document)

    def test_invalid_json(self):
        with pytest.raises(DialogueFormatError):
            dialogue_from_json("{not json")

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            dialogue_from_json("[]")
