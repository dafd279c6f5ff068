# tests/test_core/test_lume_editor.py
"""Test suite for the Lume editor session.
==========================================

This module validates the following functionality:

1. Initialization
   - Core attributes, viewport size and config issue reporting.

2. Edit operations
   - Insert, newline and backspace composed with the undo history.

3. Cursor motions
   - Arrow motions with row wrapping and column clamping.
   - Word motions, Home/End and page moves.

4. File operations
   - Opening existing, missing and unreadable paths.
   - Saving with and without a filename.

5. Viewport reconciliation
   - Horizontal scrolling with the line-number gutter.

6. Main loop
   - Key dispatch, quitting, interrupts and crash handling.

Usage
-----
    pytest -q tests/test_core/test_lume_editor.py
"""

from __future__ import annotations

import curses
from unittest.mock import MagicMock

import pytest

from lume.core.Lume import Lume
from lume.utils.utils import ConfigIssue


class TestInitialization:
    def test_core_attributes(self, editor: Lume) -> None:
        assert editor.buffer.rows == []
        assert (editor.cursor_x, editor.cursor_y) == (0, 0)
        assert editor.tab_size == 4
        assert editor.show_line_numbers is True
        assert editor.history.capacity == 100
        assert (editor.viewport.screen_rows, editor.viewport.screen_cols) == (23, 80)
        assert editor.status_message == ""
        assert editor.config_issues == []

    def test_config_issues_are_reported_in_status(self, mock_stdscr: MagicMock) -> None:
        issues = [ConfigIssue("options", "tabsize", "expected a positive integer, got 'x'")]
        ed = Lume(mock_stdscr, config={"keys": {"NoSuchKey": "quit"}}, config_issues=issues)
        assert len(ed.config_issues) == 2
        assert ed.status_message == "Config: 2 issue(s), see log"

    def test_tab_size_is_at_least_one(self, make_editor) -> None:
        assert make_editor([], tabsize=0).tab_size == 1


class TestEditOperations:
    def test_insert_newline_and_delete(self, make_editor) -> None:
        ed = make_editor(["hello world"], cx=5, cy=0)
        ed.insert_newline()
        assert ed.buffer.rows == ["hello", " world"]
        assert (ed.cursor_x, ed.cursor_y) == (0, 1)

        ed.delete_char()
        assert ed.buffer.rows == ["hello world"]
        assert (ed.cursor_x, ed.cursor_y) == (5, 0)
        assert ed.buffer.dirty

    def test_typing_into_empty_buffer(self, editor: Lume) -> None:
        for ch in "hi":
            editor.insert_char(ch)
        assert editor.buffer.rows == ["hi"]
        assert editor.cursor_x == 2

    def test_undo_restores_before_edit(self, make_editor) -> None:
        ed = make_editor(["ab"], cx=1, cy=0)
        ed.insert_char("X")
        ed.buffer.dirty = False
        assert ed.undo() is True
        assert ed.buffer.rows == ["ab"]
        assert ed.cursor_x == 1
        assert ed.buffer.dirty
        assert ed.status_message == "Undone"

    def test_handle_aliases(self, make_editor) -> None:
        ed = make_editor(["ab"], cx=2, cy=0)
        ed.handle_tab()
        ed.handle_enter()
        ed.handle_backspace()
        assert ed.buffer.rows == ["ab\t"]
        assert len(ed.history) == 3


class TestCursorMotions:
    def test_left_wraps_to_previous_row_end(self, make_editor) -> None:
        ed = make_editor(["abc", "de"], cx=0, cy=1)
        ed.handle_left()
        assert (ed.cursor_x, ed.cursor_y) == (3, 0)

    def test_left_at_origin_stays(self, make_editor) -> None:
        ed = make_editor(["abc"])
        ed.handle_left()
        assert (ed.cursor_x, ed.cursor_y) == (0, 0)

    def test_right_wraps_to_next_row_start(self, make_editor) -> None:
        ed = make_editor(["abc", "de"], cx=3, cy=0)
        ed.handle_right()
        assert (ed.cursor_x, ed.cursor_y) == (0, 1)

    def test_right_at_end_of_last_row_stays(self, make_editor) -> None:
        ed = make_editor(["abc", "de"], cx=2, cy=1)
        ed.handle_right()
        assert (ed.cursor_x, ed.cursor_y) == (2, 1)

    def test_vertical_moves_clamp_column(self, make_editor) -> None:
        ed = make_editor(["long line", "ab"], cx=8, cy=0)
        ed.handle_down()
        assert (ed.cursor_x, ed.cursor_y) == (2, 1)
        ed.handle_down()
        assert ed.cursor_y == 1
        ed.handle_up()
        assert (ed.cursor_x, ed.cursor_y) == (2, 0)
        ed.handle_up()
        assert ed.cursor_y == 0

    def test_word_right_skips_word_and_blanks(self, make_editor) -> None:
        ed = make_editor(["foo  bar", "baz"])
        ed.move_word_right()
        assert ed.cursor_x == 5
        ed.move_word_right()
        assert ed.cursor_x == 8
        ed.move_word_right()
        assert (ed.cursor_x, ed.cursor_y) == (0, 1)

    def test_word_left_lands_on_word_start(self, make_editor) -> None:
        ed = make_editor(["baz", "foo  bar"], cx=8, cy=1)
        ed.move_word_left()
        assert ed.cursor_x == 5
        ed.move_word_left()
        assert ed.cursor_x == 0
        ed.move_word_left()
        assert (ed.cursor_x, ed.cursor_y) == (3, 0)

    def test_word_motion_on_virtual_row_is_noop(self, make_editor) -> None:
        ed = make_editor(["abc"], cx=0, cy=1)
        assert ed.move_word_right() is False
        assert ed.move_word_left() is False

    def test_home_and_end(self, make_editor) -> None:
        ed = make_editor(["hello"], cx=2, cy=0)
        ed.handle_end()
        assert ed.cursor_x == 5
        ed.handle_home()
        assert ed.cursor_x == 0

    def test_page_moves(self, make_editor) -> None:
        ed = make_editor([f"line {i}" for i in range(100)], cx=6, cy=0)
        ed.handle_page_down()
        assert ed.cursor_y == 23
        ed.cursor_y = 90
        ed.handle_page_down()
        assert ed.cursor_y == 99
        ed.handle_page_up()
        assert ed.cursor_y == 76
        ed.cursor_y = 10
        ed.handle_page_up()
        assert ed.cursor_y == 0

    def test_page_down_clamps_column(self, make_editor) -> None:
        ed = make_editor(["a long first row", "x"], cx=10, cy=0)
        ed.handle_page_down()
        assert (ed.cursor_x, ed.cursor_y) == (1, 1)


class TestFileOperations:
    def test_open_existing_file(self, editor: Lume, tmp_path) -> None:
        path = tmp_path / "main.cpp"
        path.write_text("int x;\nreturn x;\n")
        editor.cursor_x, editor.cursor_y = 3, 1
        editor.insert_char("q")

        editor.open_file(str(path))
        assert editor.buffer.rows == ["int x;", "return x;"]
        assert (editor.cursor_x, editor.cursor_y) == (0, 0)
        assert len(editor.history) == 0
        assert editor.status_message == f"Opened {path} (2 lines)"

    def test_open_missing_file(self, editor: Lume, tmp_path) -> None:
        path = tmp_path / "new.cpp"
        editor.open_file(str(path))
        assert editor.buffer.rows == []
        assert editor.buffer.filename == str(path)
        assert editor.status_message == f"New file: {path}"

    def test_open_unreadable_path_sets_status(self, editor: Lume, tmp_path) -> None:
        editor.open_file(str(tmp_path))
        assert editor.status_message.startswith("Cannot open")

    def test_save_reports_bytes_written(self, make_editor, tmp_path) -> None:
        path = tmp_path / "out.txt"
        ed = make_editor(["ab", "c"])
        ed.buffer.filename = str(path)
        ed.buffer.dirty = True
        ed.save_file()
        assert path.read_text() == "ab\nc"
        assert ed.status_message == "4 bytes written to disk"
        assert not ed.buffer.dirty

    def test_save_without_name_keeps_dirty(self, make_editor) -> None:
        ed = make_editor(["ab"])
        ed.buffer.dirty = True
        ed.save_file()
        assert ed.status_message.startswith("Can't save!")
        assert ed.buffer.dirty

    def test_open_binary_file(self, editor: Lume, tmp_path) -> None:
        path = tmp_path / "blob.bin"
        path.write_bytes("x = 1;\n".encode("utf-16-le") + b"\x00\xff\xfe\x80")
        assert editor.open_file(str(path))
        assert editor.status_message.startswith("Opened")
        assert not editor.buffer.dirty

    def test_save_unencodable_text_keeps_dirty(self, make_editor, tmp_path) -> None:
        path = tmp_path / "ascii.txt"
        ed = make_editor(["naïve"])
        ed.buffer.filename = str(path)
        ed.buffer.encoding = "ascii"
        ed.buffer.dirty = True
        ed.save_file()
        assert ed.status_message.startswith("Can't save!")
        assert ed.buffer.dirty
        assert not path.exists()


class TestViewport:
    def test_scroll_accounts_for_gutter(self, make_editor) -> None:
        rows = ["x" * 200] + ["y"] * 99
        ed = make_editor(rows, cx=100, cy=0)
        assert ed.gutter_width() == 4
        assert ed.scroll() == (0, 25)

    def test_scroll_down_keeps_cursor_on_last_screen_row(self, make_editor) -> None:
        ed = make_editor(["r"] * 50, cx=0, cy=30)
        assert ed.scroll() == (8, 0)
        assert ed.scroll() == (8, 0)

    def test_scroll_uses_tab_expanded_column(self, make_editor) -> None:
        ed = make_editor(["\t" * 30], cx=20, cy=0, show_line_numbers=False)
        assert ed.gutter_width() == 0
        assert ed.scroll() == (0, 1)

    def test_handle_resize(self, editor: Lume, mock_stdscr: MagicMock) -> None:
        mock_stdscr.getmaxyx.return_value = (40, 100)
        editor.handle_resize()
        assert (editor.viewport.screen_rows, editor.viewport.screen_cols) == (39, 100)


class TestMainLoop:
    def test_keys_are_dispatched_until_quit(self, editor: Lume) -> None:
        editor.drawer = MagicMock()
        editor.keybinder.get_key_input = MagicMock(side_effect=[curses.ERR, ord("a"), 17])
        editor.run()
        assert editor.buffer.rows == ["a"]
        assert editor.running is False
        assert editor.crashed is False
        assert editor.drawer.draw.call_count == 3

    def test_status_message_cleared_before_dispatch(self, editor: Lume) -> None:
        editor.drawer = MagicMock()
        editor.status_message = "old"
        editor.keybinder.get_key_input = MagicMock(side_effect=[ord("a"), 17])
        editor.run()
        assert editor.status_message == ""

    def test_keyboard_interrupt_stops_loop(self, editor: Lume) -> None:
        editor.drawer = MagicMock()
        editor.keybinder.get_key_input = MagicMock(side_effect=KeyboardInterrupt)
        editor.run()
        assert editor.running is False
        assert editor.crashed is False

    def test_unexpected_exception_marks_crash(self, editor: Lume) -> None:
        editor.drawer = MagicMock()
        editor.drawer.draw.side_effect = RuntimeError("boom")
        editor.run()
        assert editor.running is False
        assert editor.crashed is True

    @pytest.mark.parametrize("key", [ord("q"), curses.KEY_F1])
    def test_unbound_keys_do_not_quit(self, editor: Lume, key: int) -> None:
        editor.drawer = MagicMock()
        editor.keybinder.get_key_input = MagicMock(side_effect=[key, 17])
        editor.run()
        assert editor.running is False
        assert editor.crashed is False
