"""스냅샷 기반 언두/리두

변경 직전 Dialogue 전체를 구조적 깊은 복사로 보관한다.
선형 이력: 새 체크포인트는 리두 스택을 비운다.
용량 초과 시 가장 오래된 스냅샷부터 버린다.
"""

from __future__ import annotations

from collections import deque
from typing import Optional

from src.core.dialogue_graph.models import Dialogue, clone_dialogue
from src.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_UNDO_DEPTH = 50


class UndoRedoManager:
    def __init__(self, max_depth: int = DEFAULT_UNDO_DEPTH) -> None:
        self._max_depth = max_depth
        self._undo: deque[Dialogue] = deque(maxlen=max_depth)
        self._redo: deque[Dialogue] = deque(maxlen=max_depth)

    def checkpoint(self, dialogue: Dialogue) -> None:
        """변경 직전 호출. 현재 상태를 복사해 언두 스택에 쌓는다."""
        self.record(clone_dialogue(dialogue))

    def record(self, snapshot: Dialogue) -> None:
        """미리 떠둔 스냅샷을 그대로 쌓는다 (드래그처럼 커밋이 늦는 변경용)."""
        self._undo.append(snapshot)
        self._redo.clear()

    def discard_last(self) -> None:
        """적용되지 않은 변경의 체크포인트 제거"""
        if self._undo:
            self._undo.pop()

    def undo(self, current: Dialogue) -> Optional[Dialogue]:
        """직전 상태 반환. 현재 상태는 리두 스택으로. 이력이 없으면 None."""
        if not self._undo:
            return None
        self._redo.append(clone_dialogue(current))
        restored = self._undo.pop()
        logger.debug("Undo (remaining=%d)", len(self._undo))
        return restored

    def redo(self, current: Dialogue) -> Optional[Dialogue]:
        if not self._redo:
            return None
        self._undo.append(clone_dialogue(current))
        restored = self._redo.pop()
        logger.debug("Redo (remaining=%d)", len(self._redo))
        return restored

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
