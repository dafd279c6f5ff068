# lume/core/Lume.py
"""Lume Editor Session
=====================
The `Lume` class is the editor session: it owns the buffer, the cursor, the
viewport, the undo history, the key binder and the screen painter, and it runs
the render -> input loop.

Every editing operation captures an undo snapshot first and then delegates the
text change to the `Buffer`; every cursor motion ends with the column clamped to
the length of the row it lands on. Methods invoked through the key binder
return True when the screen needs a redraw, following the convention of the
other components.

The loop is single-threaded and blocks on one key read per iteration. Quitting
only clears the `running` flag, so the operation in progress always completes.
"""

import curses
import logging
from typing import Any, Optional

from lume.core.Buffer import Buffer, SaveError
from lume.core.History import DEFAULT_UNDO_LIMIT, History
from lume.core.Viewport import Viewport, compute_screen_x, gutter_width
from lume.ui.DrawScreen import DrawScreen
from lume.ui.KeyBinder import KeyBinder
from lume.utils.utils import DEFAULT_CONFIG, ConfigIssue, deep_merge


logger = logging.getLogger("lume")


## ==================== Lume Class ====================
class Lume:
    """Class Lume
    ===================
    One editing session on one buffer.

    Attributes:
        stdscr: The curses standard screen (or a test double).
        config (dict[str, Any]): Merged configuration.
        buffer (Buffer): The text being edited.
        cursor_x (int): Character offset into the cursor row.
        cursor_y (int): Cursor row index; ``len(buffer)`` is the virtual row
            past the end.
        tab_size (int): Tab stop distance.
        show_line_numbers (bool): Whether the gutter is drawn.
        viewport (Viewport): Scroll offsets and screen size.
        history (History): Undo stack.
        keybinder (KeyBinder): Key map and dispatcher.
        drawer (DrawScreen): Screen painter.
        status_message (str): Text shown at the end of the status bar.
        config_issues (list[ConfigIssue]): Problems found while loading config.
        running (bool): Cleared to stop the main loop.
        crashed (bool): Set when the loop stopped on an unexpected exception.
    """

    def __init__(
        self,
        stdscr: Any,
        config: Optional[dict[str, Any]] = None,
        config_issues: Optional[list[ConfigIssue]] = None,
    ) -> None:
        self.stdscr = stdscr
        self.config = deep_merge(DEFAULT_CONFIG, config or {})

        options = self.config.get("options", {})
        self.tab_size: int = max(1, int(options.get("tabsize", 4)))
        self.show_line_numbers: bool = bool(options.get("show_line_numbers", True))
        undo_limit = int(options.get("undo_limit", DEFAULT_UNDO_LIMIT))

        self.buffer = Buffer()
        self.cursor_x = 0
        self.cursor_y = 0
        self.status_message = ""
        self.running = False
        self.crashed = False

        height, width = self.stdscr.getmaxyx()
        self.viewport = Viewport(height - 1, width)
        self.history = History(self, capacity=undo_limit)
        self.keybinder = KeyBinder(self)
        self.drawer = DrawScreen(self, self.config)

        self.config_issues: list[ConfigIssue] = list(config_issues or []) + self.keybinder.issues
        if self.config_issues:
            self._set_status_message(f"Config: {len(self.config_issues)} issue(s), see log")
        logger.debug(
            "Lume initialized: tab_size=%d, show_line_numbers=%s, undo_limit=%d, screen=%dx%d",
            self.tab_size, self.show_line_numbers, undo_limit, width, height,
        )

    def _set_status_message(self, message: str) -> None:
        message = str(message)
        if self.status_message != message:
            self.status_message = message
            logging.debug(f"Status message set to: '{self.status_message}'")

    # ==================== File operations ====================
    def open_file(self, path: str) -> bool:
        """Loads `path` into the buffer; a missing file opens an empty buffer."""
        try:
            self.buffer.load(path)
        except OSError as e:
            logging.error(f"Failed to open '{path}': {e}")
            self._set_status_message(f"Cannot open {path}: {e.strerror or e}")
            return True

        self.cursor_x, self.cursor_y = 0, 0
        self.viewport.row_offset = self.viewport.col_offset = 0
        self.history.clear()
        if self.buffer.rows:
            self._set_status_message(f"Opened {path} ({len(self.buffer)} lines)")
        else:
            self._set_status_message(f"New file: {path}")
        return True

    def save_file(self) -> bool:
        """Writes the buffer to its file. Failures leave it dirty."""
        try:
            written = self.buffer.save()
        except SaveError as e:
            logging.error(f"Save failed: {e}")
            self._set_status_message(f"Can't save! {e}")
            return True
        self._set_status_message(f"{written} bytes written to disk")
        return True

    def exit_editor(self) -> bool:
        self.running = False
        logger.info("Quit requested.")
        return False

    def undo(self) -> bool:
        return self.history.undo()

    # ==================== Edit operations ====================
    def insert_char(self, ch: str) -> bool:
        self.history.push_undo()
        self.cursor_x, self.cursor_y = self.buffer.insert_char(self.cursor_x, self.cursor_y, ch)
        return True

    def insert_newline(self) -> bool:
        self.history.push_undo()
        self.cursor_x, self.cursor_y = self.buffer.split_line(self.cursor_x, self.cursor_y)
        return True

    def delete_char(self) -> bool:
        """Backspace. At the origin this changes nothing but still uses an undo slot."""
        self.history.push_undo()
        self.cursor_x, self.cursor_y = self.buffer.delete_backward(self.cursor_x, self.cursor_y)
        return True

    def handle_backspace(self) -> bool:
        return self.delete_char()

    def handle_enter(self) -> bool:
        return self.insert_newline()

    def handle_tab(self) -> bool:
        return self.insert_char("\t")

    # ==================== Cursor motions ====================
    def _clamp_cursor_x(self) -> None:
        self.cursor_x = max(0, min(self.cursor_x, self.buffer.row_length(self.cursor_y)))

    def handle_up(self) -> bool:
        if self.cursor_y > 0:
            self.cursor_y -= 1
        self._clamp_cursor_x()
        return True

    def handle_down(self) -> bool:
        if self.cursor_y + 1 < len(self.buffer):
            self.cursor_y += 1
        self._clamp_cursor_x()
        return True

    def handle_left(self) -> bool:
        if self.cursor_x > 0:
            self.cursor_x -= 1
        elif self.cursor_y > 0:
            self.cursor_y -= 1
            self.cursor_x = self.buffer.row_length(self.cursor_y)
        self._clamp_cursor_x()
        return True

    def handle_right(self) -> bool:
        if self.cursor_y < len(self.buffer):
            row_len = self.buffer.row_length(self.cursor_y)
            if self.cursor_x < row_len:
                self.cursor_x += 1
            elif self.cursor_y + 1 < len(self.buffer):
                self.cursor_y += 1
                self.cursor_x = 0
        self._clamp_cursor_x()
        return True

    def move_word_right(self) -> bool:
        """Skips the rest of the current word and the blanks after it.

        At the end of a row the cursor moves to the start of the next row.
        """
        if self.cursor_y >= len(self.buffer):
            return False
        row = self.buffer.rows[self.cursor_y]
        x = self.cursor_x
        if x >= len(row):
            if self.cursor_y + 1 < len(self.buffer):
                self.cursor_y += 1
                self.cursor_x = 0
            return True

        while x < len(row) and not row[x].isspace():
            x += 1
        while x < len(row) and row[x].isspace():
            x += 1
        self.cursor_x = x
        return True

    def move_word_left(self) -> bool:
        """Moves to the first character of the previous word.

        At the start of a row the cursor moves to the end of the previous row.
        """
        if self.cursor_y >= len(self.buffer):
            return False
        row = self.buffer.rows[self.cursor_y]
        if self.cursor_x == 0:
            if self.cursor_y > 0:
                self.cursor_y -= 1
                self.cursor_x = self.buffer.row_length(self.cursor_y)
            return True

        x = min(self.cursor_x, len(row))
        while x > 0 and row[x - 1].isspace():
            x -= 1
        while x > 0 and not row[x - 1].isspace():
            x -= 1
        self.cursor_x = x
        return True

    def handle_home(self) -> bool:
        self.cursor_x = 0
        return True

    def handle_end(self) -> bool:
        self.cursor_x = self.buffer.row_length(self.cursor_y)
        return True

    def handle_page_up(self) -> bool:
        self.cursor_y = max(0, self.cursor_y - self.viewport.screen_rows)
        self._clamp_cursor_x()
        return True

    def handle_page_down(self) -> bool:
        self.cursor_y += self.viewport.screen_rows
        if self.cursor_y >= len(self.buffer):
            self.cursor_y = max(0, len(self.buffer) - 1)
        self._clamp_cursor_x()
        return True

    # ==================== Viewport ====================
    def gutter_width(self) -> int:
        """Gutter width, or 0 when line numbers are off or would fill the screen."""
        width = gutter_width(len(self.buffer), self.show_line_numbers)
        return width if width < self.viewport.screen_cols else 0

    def scroll(self) -> tuple[int, int]:
        """Reconciles the viewport offsets with the cursor; idempotent."""
        rx = 0
        if self.cursor_y < len(self.buffer):
            rx = compute_screen_x(self.buffer.rows[self.cursor_y], self.cursor_x, self.tab_size)
        text_cols = self.viewport.screen_cols - self.gutter_width()
        return self.viewport.scroll(self.cursor_y, rx, text_cols)

    def handle_resize(self) -> bool:
        height, width = self.stdscr.getmaxyx()
        self.viewport.resize(height - 1, width)
        return True

    # ==================== Main loop ====================
    def run(self) -> None:
        """Render -> read key -> dispatch, until `running` is cleared."""
        logger.info("Editor main loop started.")
        self.running = True
        while self.running:
            try:
                self.drawer.draw()
                key = self.keybinder.get_key_input()
                if key == curses.ERR:
                    continue
                self.status_message = ""
                self.keybinder.handle_input(key)
            except KeyboardInterrupt:
                logger.info("Main loop interrupted by KeyboardInterrupt. Exiting.")
                self.exit_editor()
            except Exception as e:
                logger.critical("Unhandled exception in main loop: %s", e, exc_info=True)
                self.crashed = True
                self.exit_editor()
        logger.info("Editor main loop finished.")
