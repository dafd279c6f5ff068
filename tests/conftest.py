# tests/conftest.py
"""Pytest configuration with shared fixtures for the Lume editor tests.

The curses key constants used by the key binder are plain module attributes
and need no initialized terminal. Everything that would touch the terminal
goes through `mock_stdscr`; color setup degrades to monochrome attributes
because `curses.has_colors()` raises before `initscr()`.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from lume.core.Lume import Lume
from lume.utils.utils import DEFAULT_CONFIG, deep_merge


# --- Base fixtures for curses and configuration ---
@pytest.fixture
def mock_stdscr() -> MagicMock:
    """Create a mock of the `curses` stdscr for testing UI components.

    Returns:
        MagicMock: A mocked `stdscr` with terminal size set to (24, 80).
    """
    stdscr = MagicMock()
    stdscr.getmaxyx.return_value = (24, 80)  # Typical terminal size
    return stdscr


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Provide a baseline configuration for Lume tests."""
    return deep_merge(DEFAULT_CONFIG, {"options": {"tabsize": 4, "show_line_numbers": True}})


# --- Lume fixtures ---
@pytest.fixture
def editor(mock_stdscr: MagicMock, mock_config: dict[str, Any]) -> Lume:
    """A real editor session on a mocked screen with an empty buffer."""
    return Lume(mock_stdscr, config=mock_config)


@pytest.fixture
def make_editor(mock_stdscr: MagicMock, mock_config: dict[str, Any]):
    """Factory for editor sessions preloaded with rows and a cursor position."""

    def _make(rows: list[str], cx: int = 0, cy: int = 0, **options: Any) -> Lume:
        config = deep_merge(mock_config, {"options": options}) if options else mock_config
        ed = Lume(mock_stdscr, config=config)
        ed.buffer.rows = list(rows)
        ed.cursor_x, ed.cursor_y = cx, cy
        return ed

    return _make
