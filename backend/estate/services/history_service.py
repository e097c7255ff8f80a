# Overview: Snapshot history of the state tree for multi-step undo/redo.

from __future__ import annotations

import copy
from dataclasses import dataclass, field


DEFAULT_HISTORY_LIMIT = 50


def restore_into(state: dict, snapshot: dict) -> None:
    """
    Full replacement of the tree's top-level keys.

    The tree object keeps its identity; keys missing from the snapshot are
    removed rather than left stale.
    """
    restored = copy.deepcopy(snapshot)
    state.clear()
    state.update(restored)


@dataclass
class HistoryManager:
    """
    Linear undo history over deep copies of the whole tree.

    index is -1 until the first record() and a valid position afterwards.
    Recording after an undo prunes the redo branch.
    """
    limit: int = DEFAULT_HISTORY_LIMIT
    stack: list[dict] = field(default_factory=list)
    index: int = -1

    def record(self, state: dict) -> None:
        self.stack = self.stack[: self.index + 1]
        self.stack.append(copy.deepcopy(state))
        if len(self.stack) > self.limit:
            del self.stack[: len(self.stack) - self.limit]
        self.index = len(self.stack) - 1

    @property
    def can_undo(self) -> bool:
        return self.index > 0

    @property
    def can_redo(self) -> bool:
        return self.index < len(self.stack) - 1

    def undo(self, state: dict) -> bool:
        if not self.can_undo:
            return False
        self.index -= 1
        restore_into(state, self.stack[self.index])
        return True

    def redo(self, state: dict) -> bool:
        if not self.can_redo:
            return False
        self.index += 1
        restore_into(state, self.stack[self.index])
        return True

    def clear(self) -> None:
        self.stack = []
        self.index = -1

    def summary(self) -> dict:
        return {
            "index": self.index,
            "size": len(self.stack),
            "limit": self.limit,
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
        }
