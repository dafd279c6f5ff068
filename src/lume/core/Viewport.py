# lume/core/Viewport.py
"""Viewport Module for the Lume Editor
=====================================
Maps buffer-relative cursor positions to screen columns and keeps the scroll
offsets of the visible window in step with the cursor.

Two responsibilities are kept apart:

- `compute_screen_x` translates a character offset into a screen column,
  expanding tabs to the next tab stop.
- `Viewport.scroll` reconciles the row and column offsets so that the cursor
  is visible. It is run once per frame and is idempotent.
"""

import logging
from typing import Optional


def compute_screen_x(row: str, cx: int, tab_size: int) -> int:
    """Screen column of character offset `cx` in `row`.

    Ordinary characters advance one column; a tab advances to the next
    multiple of `tab_size`.

    Example:
        >>> compute_screen_x("\\tab", 1, 4)
        4
    """
    rx = 0
    for ch in row[: max(0, cx)]:
        if ch == "\t":
            rx += tab_size - (rx % tab_size)
        else:
            rx += 1
    return rx


def gutter_width(row_count: int, show_line_numbers: bool) -> int:
    """Width of the line-number gutter, including its trailing blank."""
    if not show_line_numbers:
        return 0
    return len(str(max(1, row_count))) + 1


## ==================== Viewport Class ====================
class Viewport:
    """Class Viewport
    ===================
    The visible window into the buffer.

    Attributes:
        screen_rows (int): Number of text rows on screen (status bar excluded).
        screen_cols (int): Full terminal width.
        row_offset (int): First buffer row shown.
        col_offset (int): First screen column shown.
    """

    def __init__(self, screen_rows: int, screen_cols: int, row_offset: int = 0, col_offset: int = 0):
        self.screen_rows = max(1, screen_rows)
        self.screen_cols = max(1, screen_cols)
        self.row_offset = max(0, row_offset)
        self.col_offset = max(0, col_offset)

    def __repr__(self) -> str:
        return (
            f"Viewport(screen_rows={self.screen_rows}, screen_cols={self.screen_cols}, "
            f"row_offset={self.row_offset}, col_offset={self.col_offset})"
        )

    def resize(self, screen_rows: int, screen_cols: int) -> None:
        self.screen_rows = max(1, screen_rows)
        self.screen_cols = max(1, screen_cols)
        logging.debug("Viewport resized to %dx%d", self.screen_rows, self.screen_cols)

    def scroll(self, cy: int, rx: int, text_cols: Optional[int] = None) -> tuple[int, int]:
        """Snaps the offsets so that the cursor row and column are visible.

        Args:
            cy (int): Cursor row index.
            rx (int): Cursor screen column (tab-expanded).
            text_cols (Optional[int]): Width of the text area. Defaults to
                `screen_cols` when there is no gutter.

        Returns:
            tuple[int, int]: The resulting `(row_offset, col_offset)`.
        """
        cols = self.screen_cols if text_cols is None else max(1, text_cols)

        if cy < self.row_offset:
            self.row_offset = cy
        elif cy >= self.row_offset + self.screen_rows:
            self.row_offset = cy - self.screen_rows + 1

        if rx < self.col_offset:
            self.col_offset = rx
        elif rx >= self.col_offset + cols:
            self.col_offset = rx - cols + 1

        return self.row_offset, self.col_offset
