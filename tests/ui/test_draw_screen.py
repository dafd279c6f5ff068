# tests/ui/test_draw_screen.py
"""Unit and integration tests for the `DrawScreen` UI renderer.
=================================================================

This module validates the helpers and rendering behaviors of the screen
layer, including:

- Color initialization on monochrome, 8-color and 256-color terminals.
- Status bar composition and truncation.
- ``~`` filler rows and the welcome line for an empty buffer.
- Line number gutter rendering.
- Span clipping under horizontal scroll.
- Cursor placement on the tab-expanded column.

The standard screen is a `MagicMock`; every painted string is recovered from
its ``addstr`` calls. `curses.doupdate` is patched so that no terminal is
needed.
"""

import curses
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest

from lume.ui.DrawScreen import DrawScreen
from lume.utils.utils import hex_to_xterm


@pytest.fixture(autouse=True)
def no_doupdate() -> Generator[MagicMock, None, None]:
    with patch("lume.ui.DrawScreen.curses.doupdate") as doupdate:
        yield doupdate


def painted(stdscr: MagicMock) -> dict[tuple[int, int], tuple[str, int]]:
    """Maps ``(y, x)`` to the ``(text, attr)`` written there."""
    return {(c.args[0], c.args[1]): (c.args[2], c.args[3]) for c in stdscr.addstr.call_args_list}


def color_curses(colors: int) -> MagicMock:
    curses_mock = MagicMock()
    curses_mock.error = curses.error
    curses_mock.has_colors.return_value = True
    curses_mock.COLORS = colors
    curses_mock.COLOR_PAIRS = 64
    curses_mock.color_pair.side_effect = lambda n: n << 8
    return curses_mock


class TestColors:
    def test_monochrome_without_initialized_terminal(self, editor) -> None:
        drawer = editor.drawer
        assert drawer.colors == DrawScreen.MONOCHROME_COLORS
        assert drawer.is_256_color_terminal is False

    def test_monochrome_when_terminal_has_no_colors(self, editor) -> None:
        curses_mock = color_curses(256)
        curses_mock.has_colors.return_value = False
        with patch("lume.ui.DrawScreen.curses", curses_mock):
            drawer = DrawScreen(editor, editor.config)
        assert drawer.colors == DrawScreen.MONOCHROME_COLORS
        curses_mock.start_color.assert_not_called()

    def test_256_colors_use_configured_hex(self, editor) -> None:
        config = dict(editor.config, colors={"keyword": "#ffffff"})
        curses_mock = color_curses(256)
        with patch("lume.ui.DrawScreen.curses", curses_mock):
            drawer = DrawScreen(editor, config)

        assert drawer.is_256_color_terminal
        curses_mock.init_pair.assert_any_call(1, 231, -1)
        curses_mock.init_pair.assert_any_call(2, hex_to_xterm("#5fd7d7"), -1)
        assert drawer.colors["keyword"] == 1 << 8
        assert drawer.colors["status"] == curses.A_REVERSE

    def test_8_colors_use_basic_palette(self, editor) -> None:
        curses_mock = color_curses(8)
        with patch("lume.ui.DrawScreen.curses", curses_mock):
            DrawScreen(editor, editor.config)
        curses_mock.init_pair.assert_any_call(1, curses.COLOR_RED, -1)
        curses_mock.init_pair.assert_any_call(5, curses.COLOR_GREEN, -1)


class TestHelpers:
    def test_truncate_string(self, editor) -> None:
        drawer = editor.drawer
        assert drawer.truncate_string("abcdef", 3) == "abc"
        assert drawer.truncate_string("日本語", 4) == "日本"
        assert drawer.truncate_string("abc", 10) == "abc"

    def test_status_text_for_new_buffer(self, editor) -> None:
        assert editor.drawer.status_text() == "[No Name] []  |  Ln 1, Col 1"

    def test_status_text_with_file_and_message(self, make_editor) -> None:
        ed = make_editor(["a", "bcd"], cx=3, cy=1)
        ed.buffer.filename = "main.cpp"
        ed.buffer.dirty = True
        ed.status_message = "Undone"
        assert ed.drawer.status_text() == "main.cpp [+]  |  Ln 2, Col 4  |  Undone"

    def test_printable(self) -> None:
        assert DrawScreen._printable("a\x01b") == "a?b"
        assert DrawScreen._printable("plain") == "plain"


class TestFrame:
    def test_empty_buffer_shows_welcome_and_tildes(self, editor, mock_stdscr) -> None:
        editor.drawer.draw()
        cells = painted(mock_stdscr)

        welcome, _ = cells[(7, 0)]
        assert welcome.startswith("~")
        assert welcome.endswith("Lume editor -- version 0.1.0")
        assert len(welcome) <= 80
        assert cells[(0, 0)] == ("~", curses.A_NORMAL)
        assert cells[(22, 0)] == ("~", curses.A_NORMAL)

        status, attr = cells[(23, 0)]
        assert status.startswith("[No Name] []")
        assert len(status) == 80
        assert attr == curses.A_REVERSE
        mock_stdscr.move.assert_called_with(0, 2)

    def test_rows_with_line_numbers(self, make_editor, mock_stdscr) -> None:
        ed = make_editor(["int x;", "return 1;"])
        ed.drawer.draw()
        cells = painted(mock_stdscr)

        assert cells[(0, 0)][0] == "1 "
        assert cells[(1, 0)][0] == "2 "
        assert cells[(0, 2)][0] == "int"
        assert cells[(1, 2)][0] == "return"
        assert cells[(2, 0)] == ("~", curses.A_NORMAL)
        assert (2, 2) not in cells

    def test_rows_without_line_numbers(self, make_editor, mock_stdscr) -> None:
        ed = make_editor(["x = 1;"], show_line_numbers=False)
        ed.drawer.draw()
        cells = painted(mock_stdscr)
        assert cells[(0, 0)][0] == "x = "
        assert cells[(0, 4)][0] == "1"

    def test_horizontal_scroll_clips_spans(self, make_editor, mock_stdscr) -> None:
        row = "0123456789" * 10
        ed = make_editor([row], cx=90, cy=0)
        ed.drawer.draw()
        cells = painted(mock_stdscr)

        assert ed.viewport.col_offset == 13
        assert cells[(0, 2)][0] == row[13:91]
        mock_stdscr.move.assert_called_with(0, 79)

    def test_cursor_on_tab_expanded_column(self, make_editor, mock_stdscr) -> None:
        ed = make_editor(["\tx"], cx=1, cy=0)
        ed.drawer.draw()
        mock_stdscr.move.assert_called_with(0, 6)

    def test_vertical_scroll(self, make_editor, mock_stdscr) -> None:
        ed = make_editor([f"r{i}" for i in range(50)], cx=0, cy=40)
        ed.drawer.draw()
        cells = painted(mock_stdscr)
        assert ed.viewport.row_offset == 18
        assert cells[(0, 0)][0] == "19 "
        assert cells[(22, 3)][0] == "r40"
        mock_stdscr.move.assert_called_with(22, 3)

    def test_resize_is_picked_up(self, editor, mock_stdscr) -> None:
        mock_stdscr.getmaxyx.return_value = (10, 40)
        editor.drawer.draw()
        assert (editor.viewport.screen_rows, editor.viewport.screen_cols) == (9, 40)

    def test_curses_error_is_reported_in_status(self, editor, mock_stdscr) -> None:
        mock_stdscr.erase.side_effect = curses.error("boom")
        editor.drawer.draw()
        assert editor.status_message == "Draw error: boom"

    def test_status_bar_ignores_last_cell_error(self, editor, mock_stdscr) -> None:
        def addstr(y, x, text, attr):
            if y == 23:
                raise curses.error("bottom-right")

        mock_stdscr.addstr.side_effect = addstr
        editor.drawer.draw()
        assert editor.status_message == ""
