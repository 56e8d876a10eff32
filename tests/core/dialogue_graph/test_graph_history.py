"""언두/리두 이력 테스트"""

from src.core.dialogue_graph.models import create_dialogue
from src.core.dialogue_graph.mutations import insert_node
from src.core.dialogue_graph.history import UndoRedoManager


class TestUndoRedo:
    def test_three_mutations_round_trip(self):
        """변경 3회 → 언두 2회 → 리두 2회면 마지막 상태로 복귀"""
        history = UndoRedoManager()
        d = create_dialogue()
        states = []
        for i in range(3):
            history.checkpoint(d)
            insert_node(d, {"type": "npc_speech", "text": f"line {i}"})
            states.append(set(d.nodes))

        d = history.undo(d)
        d = history.undo(d)
        assert set(d.nodes) == states[0]
        assert history.undo_depth == 1
        assert history.redo_depth == 2

        d = history.redo(d)
        d = history.redo(d)
        assert set(d.nodes) == states[2]
        assert not history.can_redo

    def test_snapshot_is_independent(self):
        history = UndoRedoManager()
        d = create_dialogue()
        node = insert_node(d, {"text": "before"})
        history.checkpoint(d)
        node.text = "after"
        restored = history.undo(d)
        assert restored.nodes[node.id].text == "before"

    def test_new_checkpoint_clears_redo(self):
        history = UndoRedoManager()
        d = create_dialogue()
        history.checkpoint(d)
        insert_node(d)
        d = history.undo(d)
        assert history.can_redo
        history.checkpoint(d)
        assert not history.can_redo

    def test_empty_history_returns_none(self):
        history = UndoRedoManager()
        d = create_dialogue()
        assert history.undo(d) is None
        assert history.redo(d) is None

    def test_depth_limit_drops_oldest(self):
        history = UndoRedoManager(max_depth=2)
        d = create_dialogue()
        for _ in range(5):
            history.checkpoint(d)
            insert_node(d)
        assert history.undo_depth == 2

    def test_discard_last_and_clear(self):
        history = UndoRedoManager()
        d = create_dialogue()
        history.checkpoint(d)
        history.checkpoint(d)
        history.discard_last()
        assert history.undo_depth == 1
        history.clear()
        assert not history.can_undo
