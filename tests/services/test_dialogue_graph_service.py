"""DialogueGraphService 통합 테스트 (인메모리 SQLite + EventBus)"""

import pytest

from src.core.dialogue_editor.editor import DialogueEditor
from src.core.dialogue_graph.enums import ConnectionKind
from src.core.dialogue_graph.errors import DialogueFormatError, DialogueValidationError
from src.core.dialogue_graph.models import create_dialogue
from src.core.dialogue_graph.mutations import connect_nodes, insert_node
from src.core.dialogue_graph.serialization import dialogue_to_dict
from src.core.dialogue_graph.validation import IssueCode
from src.core.event_types import EventTypes
from src.db.models import DialogueGraphModel


def _make_dialogue(name: str = "Smith", actor_id: str = "npc_smith"):
    d = create_dialogue(name, actor_id=actor_id)
    speech = insert_node(d, {"type": "npc_speech", "text": "Need a blade?"})
    end = insert_node(d, {"type": "end"})
    connect_nodes(d, speech.id, end.id, ConnectionKind.RESPONSE, {"text": "No"})
    return d


def _collect(event_bus, event_type):
    received = []
    event_bus.subscribe(event_type, received.append)
    return received


class TestSave:
    def test_save_and_get(self, service, db_session):
        d = _make_dialogue()
        report = service.save(d)
        assert report.valid

        row = db_session.get(DialogueGraphModel, d.id)
        assert row.name == "Smith"
        assert row.node_count == 2
        assert row.start_node_id == d.start_node_id
        assert service.get(d.id) == d

    def test_upsert(self, service):
        d = _make_dialogue()
        service.save(d)
        d.name = "Smith (revised)"
        service.save(d)
        summaries = service.list_dialogues()
        assert [s.name for s in summaries] == ["Smith (revised)"]

    def test_invalid_graph_rejected(self, service, db_session):
        d = create_dialogue("Empty")
        with pytest.raises(DialogueValidationError) as exc:
            service.save(d)
        assert exc.value.report.errors[0].code == IssueCode.MISSING_START_NODE
        assert db_session.get(DialogueGraphModel, d.id) is None

    def test_warnings_do_not_block(self, service):
        d = _make_dialogue()
        insert_node(d, {"type": "shop"})  # 도달 불가
        report = service.save(d)
        assert report.valid
        assert [w.code for w in report.warnings] == [IssueCode.UNREACHABLE_NODE]

    def test_saved_event(self, service, event_bus):
        received = _collect(event_bus, EventTypes.DIALOGUE_SAVED)
        d = _make_dialogue()
        service.save(d)
        service.save(d)
        assert [e.data["created"] for e in received] == [True, False]
        assert received[0].data["dialogue_id"] == d.id
        assert received[0].data["actor_id"] == "npc_smith"


class TestQuery:
    def test_get_missing(self, service):
        assert service.get("missing") is None
        assert service.export_document("missing") is None
        assert service.validate("missing") is None

    def test_list_filtered_by_actor(self, service):
        service.save(_make_dialogue("Smith", "npc_smith"))
        service.save(_make_dialogue("Guard", "npc_guard"))
        assert len(service.list_dialogues()) == 2
        assert [s.name for s in service.list_dialogues("npc_guard")] == ["Guard"]


class TestDelete:
    def test_delete(self, service, event_bus):
        received = _collect(event_bus, EventTypes.DIALOGUE_DELETED)
        d = _make_dialogue()
        service.save(d)
        assert service.delete(d.id) is True
        assert service.get(d.id) is None
        assert received[0].data == {"dialogue_id": d.id, "actor_id": "npc_smith"}

    def test_delete_missing(self, service, event_bus):
        received = _collect(event_bus, EventTypes.DIALOGUE_DELETED)
        assert service.delete("missing") is False
        assert received == []


class TestImportExport:
    def test_import_dict_and_export(self, service):
        document = dialogue_to_dict(_make_dialogue())
        dialogue, report = service.import_document(document)
        assert report.valid
        assert service.export_document(dialogue.id) == document

    def test_import_json_text(self, service):
        dialogue, _ = service.import_document(
            '{"name": "Tiny", "startNodeId": "a", "nodes": {"a": {"type": "end"}}}'
        )
        assert service.get(dialogue.id).name == "Tiny"

    def test_import_with_forced_id(self, service):
        document = dialogue_to_dict(_make_dialogue())
        dialogue, _ = service.import_document(document, dialogue_id="fixed")
        assert dialogue.id == "fixed"
        assert service.get("fixed") is not None

    def test_malformed_document(self, service):
        with pytest.raises(DialogueFormatError):
            service.import_document({"name": "No nodes"})
        assert service.list_dialogues() == []

    def test_validate_document(self, service):
        report = service.validate_document({"name": "X", "nodes": {}})
        assert not report.valid


class TestOpenEditor:
    def test_new_dialogue_session(self, service):
        editor = service.open_editor()
        assert isinstance(editor, DialogueEditor)
        assert editor.is_new
        assert editor.dialogue.name == "New Dialogue"
        assert editor.options.undo_depth == 50

    def test_editor_save_persists(self, service):
        d = _make_dialogue()
        service.save(d)
        editor = service.open_editor(d.id)
        assert not editor.is_new
        editor.zoom_in()
        assert editor.save().valid
        assert service.get(d.id).editor_zoom == pytest.approx(1.2)

    def test_missing_dialogue(self, service):
        assert service.open_editor("missing") is None
