# lume/ui/TerminalAppMode.py
from __future__ import annotations

import curses
import logging
from types import TracebackType
from typing import Any, Optional


class TerminalAppMode:
    """
    Puts the terminal into the state the editor needs for its lifetime:

    - Alternate screen buffer (smcup/rmcup) so the shell prompt is untouched.
    - Application cursor keys (smkx/rmkx) so arrows and Ctrl-arrows reach us.
    - raw + noecho, keypad(True): Ctrl-Q, Ctrl-S and Ctrl-Z arrive as keys
      instead of being eaten by flow control or job control.
    - A short ESC delay so that a lone ESC does not stall input.

    Use it as a context manager, or pair `enter(stdscr)` with `exit()` in a
    try/finally; `exit()` is safe to call more than once.
    """

    ESC_DELAY_MS = 25

    def __init__(self, stdscr: Optional[Any] = None) -> None:
        self._entered: bool = False
        self._stdscr = stdscr

    def __enter__(self) -> "TerminalAppMode":
        if self._stdscr is None:
            raise ValueError("TerminalAppMode needs a window to enter")
        self.enter(self._stdscr)
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.exit()

    def enter(self, stdscr: Any) -> None:
        self._stdscr = stdscr
        self._tputs("smcup")
        self._tputs("smkx")

        try:
            curses.raw()
        except curses.error:
            curses.cbreak()
        curses.noecho()
        stdscr.keypad(True)

        try:
            curses.set_escdelay(self.ESC_DELAY_MS)
        except curses.error as e:
            logging.debug("set_escdelay(%d) failed: %r", self.ESC_DELAY_MS, e)

        stdscr.scrollok(False)
        stdscr.clearok(True)
        stdscr.erase()
        stdscr.refresh()

        self._entered = True
        logging.debug("TerminalAppMode: entered (alternate screen + app cursor keys).")

    def exit(self) -> None:
        if not self._entered:
            return

        try:
            if self._stdscr is not None:
                self._stdscr.keypad(False)
            curses.noraw()
            curses.echo()
        except curses.error as e:
            logging.debug("TerminalAppMode: restoring input modes failed: %r", e)

        self._tputs("rmkx")
        self._tputs("rmcup")

        self._entered = False
        logging.debug("TerminalAppMode: exited (restored terminal modes).")

    # -- helpers ---------------------------------------------------------------

    def _tputs(self, capname: str) -> None:
        try:
            s = curses.tigetstr(capname)
            if s:
                curses.putp(s)
        except curses.error as e:
            # Capability missing on some consoles.
            logging.debug("tputs(%s) skipped: %r", capname, e)
