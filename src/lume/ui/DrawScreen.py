# lume/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen paints one frame of the Lume editor with curses.

It is responsible for:
- the text area, colored from the highlighter's span list and clipped to the
  horizontal scroll window,
- the optional dimmed line-number gutter,
- ``~`` filler rows past the end of the buffer and the welcome line shown for
  an empty buffer,
- the reverse-video status bar,
- placing the terminal cursor on the tab-expanded cursor column.

The frame is a pure function of the editor state: scroll offsets are
reconciled once by the editor before anything is painted.
"""

import curses
import logging
from typing import TYPE_CHECKING, Any

from wcwidth import wcwidth

from lume.core.Highlighter import highlight_row, style_name
from lume.core.Viewport import compute_screen_x
from lume.utils.utils import APP_VERSION, hex_to_xterm


if TYPE_CHECKING:
    from lume.core.Lume import Lume


## ================= class DrawScreen ==============================
class DrawScreen:
    """DrawScreen Class
    =========================
    Renders the editor state into the curses standard screen.

    Attributes:
        editor (Lume): The editor session being displayed.
        config (dict[str, Any]): Editor configuration; ``["colors"]`` is read.
        stdscr (curses.window): The main curses window.
        colors (dict[str, int]): Color role -> curses attribute.
        is_256_color_terminal (bool): True when hex colors could be used.
    """

    # role: (default hex, 8-color fallback, extra attribute)
    COLOR_DEFINITIONS: dict[str, tuple[str, int, int]] = {
        "keyword": ("#d75f5f", curses.COLOR_RED, curses.A_NORMAL),
        "type": ("#5fd7d7", curses.COLOR_CYAN, curses.A_NORMAL),
        "string": ("#d75fd7", curses.COLOR_MAGENTA, curses.A_NORMAL),
        "comment": ("#5f87d7", curses.COLOR_BLUE, curses.A_NORMAL),
        "number": ("#87d75f", curses.COLOR_GREEN, curses.A_NORMAL),
        "line_number": ("#6c6c6c", curses.COLOR_WHITE, curses.A_DIM),
    }

    MONOCHROME_COLORS: dict[str, int] = {
        "default": curses.A_NORMAL,
        "keyword": curses.A_BOLD,
        "type": curses.A_BOLD,
        "string": curses.A_NORMAL,
        "comment": curses.A_DIM,
        "number": curses.A_NORMAL,
        "line_number": curses.A_DIM,
        "status": curses.A_REVERSE,
    }

    def __init__(self, editor: "Lume", config: dict[str, Any]) -> None:
        self.editor = editor
        self.config = config
        self.stdscr = editor.stdscr
        self.colors: dict[str, int] = {}
        self.is_256_color_terminal = False
        self.init_colors()

    # ---------------------- Colors --------------------
    def init_colors(self) -> None:
        """Initializes curses color pairs with graceful degradation."""
        self.colors = dict(self.MONOCHROME_COLORS)
        try:
            if not curses.has_colors() or curses.COLORS < 8:
                logging.warning("Terminal has no or limited color support (< 8). Using monochrome attributes.")
                return
            curses.start_color()
            curses.use_default_colors()
        except curses.error as e:
            logging.warning("Color initialization failed (%s); using monochrome attributes.", e)
            return

        user_colors = self.config.get("colors", {}) or {}
        self.is_256_color_terminal = curses.COLORS >= 256

        for pair_id, (name, (default_hex, default_8_color, attr)) in enumerate(
            self.COLOR_DEFINITIONS.items(), start=1
        ):
            if pair_id >= curses.COLOR_PAIRS:
                logging.warning("Ran out of color pairs at '%s'.", name)
                break
            if self.is_256_color_terminal:
                fg = hex_to_xterm(user_colors.get(name, default_hex))
            else:
                fg = default_8_color
            try:
                curses.init_pair(pair_id, fg, -1)
                self.colors[name] = curses.color_pair(pair_id) | attr
            except curses.error as e:
                logging.error("Failed to initialize curses pair for '%s': %s", name, e)

    def attr_for(self, token: Any) -> int:
        """Curses attribute for a highlighter token type."""
        return self.colors.get(style_name(token), self.colors["default"])

    # ---------------------- Helpers --------------------
    @staticmethod
    def _printable(text: str) -> str:
        """Replaces characters curses would not show in one cell with '?'."""
        if text.isprintable():
            return text
        return "".join(ch if ch.isprintable() else "?" for ch in text)

    def truncate_string(self, s: str, max_width: int) -> str:
        """Return `s` clipped to visual width `max_width`."""
        result: list[str] = []
        consumed = 0
        for ch in s:
            w = wcwidth(ch)
            if w < 0:
                w = 1
            if consumed + w > max_width:
                break
            result.append(ch)
            consumed += w
        return "".join(result)

    def status_text(self) -> str:
        buffer = self.editor.buffer
        name = buffer.filename or "[No Name]"
        text = (
            f"{name} {'[+]' if buffer.dirty else '[]'}  |  "
            f"Ln {self.editor.cursor_y + 1}, Col {self.editor.cursor_x + 1}"
        )
        if self.editor.status_message:
            text += f"  |  {self.editor.status_message}"
        return text

    # ---------------------- Frame --------------------
    def draw(self) -> None:
        """Paints one complete frame."""
        try:
            height, width = self.stdscr.getmaxyx()
            viewport = self.editor.viewport
            if (viewport.screen_rows, viewport.screen_cols) != (max(1, height - 1), width):
                viewport.resize(height - 1, width)

            self.editor.scroll()
            self.stdscr.erase()
            self._draw_rows()
            self._draw_status_bar()
            self._position_cursor()
            self._update_display()
        except curses.error as e:
            logging.error(f"Curses error in DrawScreen.draw(): {e}", exc_info=True)
            self.editor._set_status_message(f"Draw error: {str(e)[:80]}")
        except Exception as e:
            logging.exception("Unexpected error in DrawScreen.draw()")
            self.editor._set_status_message(f"Draw error: {str(e)[:80]}")

    def _draw_rows(self) -> None:
        viewport = self.editor.viewport
        rows = self.editor.buffer.rows
        gutter = self.editor.gutter_width()
        text_cols = max(0, viewport.screen_cols - gutter)

        for screen_row in range(viewport.screen_rows):
            file_row = viewport.row_offset + screen_row
            if file_row >= len(rows):
                if not rows and screen_row == viewport.screen_rows // 3:
                    self._draw_welcome(screen_row)
                else:
                    self._addstr(screen_row, 0, "~", curses.A_NORMAL)
                continue

            if gutter:
                self._draw_line_number(screen_row, file_row, gutter)
            self._draw_single_line(screen_row, rows[file_row], gutter, text_cols)

    def _draw_welcome(self, screen_row: int) -> None:
        msg = f"Lume editor -- version {APP_VERSION}"
        width = self.editor.viewport.screen_cols
        padding = max(0, (width - len(msg)) // 2)
        line = "~" * padding + msg
        self._addstr(screen_row, 0, line[:width], curses.A_NORMAL)

    def _draw_line_number(self, screen_row: int, file_row: int, gutter: int) -> None:
        label = f"{file_row + 1:>{gutter - 1}} "
        self._addstr(screen_row, 0, label, self.colors.get("line_number", curses.A_DIM))

    def _draw_single_line(self, screen_row: int, row: str, text_start_x: int, text_cols: int) -> None:
        """Draws the visible slice of one buffer row.

        Spans are clipped to ``[col_offset, col_offset + text_cols)`` in screen
        columns; tabs are already expanded by the highlighter.
        """
        col_offset = self.editor.viewport.col_offset
        right_edge = col_offset + text_cols
        for span in highlight_row(row, self.editor.tab_size):
            span_end = span.col + span.width
            if span_end <= col_offset:
                continue
            if span.col >= right_edge:
                break
            visible_start = max(span.col, col_offset)
            visible_end = min(span_end, right_edge)
            text = span.text[visible_start - span.col : visible_end - span.col]
            x = text_start_x + visible_start - col_offset
            self._addstr(screen_row, x, self._printable(text), self.attr_for(span.token))

    def _draw_status_bar(self) -> None:
        height, width = self.stdscr.getmaxyx()
        y = max(0, height - 1)
        line = self.truncate_string(self.status_text(), width)
        line += " " * max(0, width - len(line))
        try:
            self.stdscr.addstr(y, 0, line, self.colors.get("status", curses.A_REVERSE))
        except curses.error:
            pass  # writing the bottom-right cell always raises

    def _position_cursor(self) -> None:
        """Moves the terminal cursor to the cursor's screen cell."""
        editor = self.editor
        viewport = editor.viewport
        rows = editor.buffer.rows
        rx = 0
        if editor.cursor_y < len(rows):
            rx = compute_screen_x(rows[editor.cursor_y], editor.cursor_x, editor.tab_size)

        screen_y = editor.cursor_y - viewport.row_offset
        screen_x = rx - viewport.col_offset + editor.gutter_width()
        screen_y = max(0, min(screen_y, viewport.screen_rows - 1))
        screen_x = max(0, min(screen_x, viewport.screen_cols - 1))
        try:
            self.stdscr.move(screen_y, screen_x)
        except curses.error as e:
            logging.warning(f"Curses error positioning cursor at ({screen_y}, {screen_x}): {e}")

    def _addstr(self, y: int, x: int, text: str, attr: int) -> None:
        if not text:
            return
        try:
            self.stdscr.addstr(y, x, text, attr)
        except curses.error as e:
            logging.debug("addstr failed at (%d,%d): %s", y, x, e)

    def _update_display(self) -> None:
        try:
            self.stdscr.noutrefresh()
            curses.doupdate()
        except curses.error as e:
            logging.error(f"Curses doupdate error: {e}")
