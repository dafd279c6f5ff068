# lume/core/History.py
"""History Module for the Lume Editor
====================================
This module provides the `History` class, the snapshot-based undo engine of the
Lume editor. Before each mutating operation the session captures a full copy of
the buffer rows together with the cursor position. Undo pops the most recent
snapshot and replaces the buffer and cursor wholesale.

Key Features:
-------------
- Capacity-bounded stack: pushing onto a full stack evicts the oldest snapshot.
- Snapshots are immutable; restoring one hands a fresh row list to the buffer.
- Undo marks the buffer dirty. There is no redo.

Classes:
--------
- UndoSnapshot: Frozen copy of rows and cursor.
- History: The bounded undo stack bound to one editor session.
"""
import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional


if TYPE_CHECKING:
    from lume.core.Lume import Lume


DEFAULT_UNDO_LIMIT = 100


@dataclass(frozen=True)
class UndoSnapshot:
    """Full copy of the buffer rows plus the cursor pair."""

    rows: tuple[str, ...]
    cursor_x: int
    cursor_y: int


## ==================== History Class (Undo) ====================
class History:
    """Class History
    ===================
    Manages the undo stack for one editor session.

    The stack is a bounded deque: new snapshots go on the right, and once
    `capacity` is reached each push silently drops the leftmost (oldest) entry.

    Attributes:
        editor (Lume): The editor session whose state is captured and restored.
        capacity (int): Maximum number of snapshots kept.
        _undo_stack (deque[UndoSnapshot]): The snapshots, oldest first.

    Methods:
        push(snapshot): Adds a snapshot, evicting the oldest when full.
        pop() -> Optional[UndoSnapshot]: Removes and returns the newest snapshot.
        push_undo(): Captures the editor's current rows and cursor.
        undo() -> bool: Restores the newest snapshot into the editor.
        clear(): Drops every snapshot.
    """

    def __init__(self, editor: "Lume", capacity: int = DEFAULT_UNDO_LIMIT):
        if capacity < 1:
            raise ValueError(f"Undo capacity must be positive, got {capacity}")
        self.editor = editor
        self.capacity = capacity
        self._undo_stack: deque[UndoSnapshot] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._undo_stack)

    def push(self, snapshot: UndoSnapshot) -> None:
        if len(self._undo_stack) == self.capacity:
            logging.debug("History: Stack full (%d), evicting oldest snapshot.", self.capacity)
        self._undo_stack.append(snapshot)

    def pop(self) -> Optional[UndoSnapshot]:
        if not self._undo_stack:
            return None
        return self._undo_stack.pop()

    def push_undo(self) -> None:
        """Captures the editor state just before a mutation."""
        snapshot = UndoSnapshot(
            rows=tuple(self.editor.buffer.rows),
            cursor_x=self.editor.cursor_x,
            cursor_y=self.editor.cursor_y,
        )
        self.push(snapshot)
        logging.debug(
            "History: Snapshot pushed at (%d, %d). Stack size: %d",
            snapshot.cursor_x,
            snapshot.cursor_y,
            len(self._undo_stack),
        )

    def clear(self) -> None:
        self._undo_stack.clear()
        logging.debug("History: Undo stack cleared.")

    def undo(self) -> bool:
        """Restores the most recent snapshot into the editor.

        Returns:
            bool: True if the editor state or status message changed, which
                  means the screen needs a redraw.
        """
        original_status = self.editor.status_message
        snapshot = self.pop()
        if snapshot is None:
            self.editor._set_status_message("Nothing to undo")
            return self.editor.status_message != original_status

        buffer = self.editor.buffer
        buffer.rows = list(snapshot.rows)
        buffer.dirty = True
        self.editor.cursor_x, self.editor.cursor_y = buffer.clamp(snapshot.cursor_x, snapshot.cursor_y)
        self.editor._set_status_message("Undone")
        logging.debug(
            "History: Undo restored %d rows, cursor (%d, %d). Remaining: %d",
            len(buffer.rows),
            self.editor.cursor_x,
            self.editor.cursor_y,
            len(self._undo_stack),
        )
        return True
