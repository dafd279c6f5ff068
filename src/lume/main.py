# lume/main.py
"""
Lume editor entry point.

Startup sequence:
1. Load ``~/.config/Lume/.env`` so environment switches can live there.
2. Load the configuration and set up logging; a failure here is fatal (exit 1).
3. Hand control to ``curses.wrapper``, which owns the terminal for the run and
   restores it on every exit path, including exceptions.

Usage:
    lume [FILE]
"""

import curses
import locale
import logging
import sys
from typing import Any, Optional

from lume.core.Lume import Lume
from lume.ui.TerminalAppMode import TerminalAppMode
from lume.utils.logging_config import setup_logging
from lume.utils.utils import ConfigIssue, load_config, load_user_env


logger = logging.getLogger("lume")


def main_app_runner(
    stdscr: Any,
    config: dict[str, Any],
    config_issues: list[ConfigIssue],
    file_to_open: Optional[str],
) -> int:
    """Target for `curses.wrapper`: builds the session and runs its loop."""
    with TerminalAppMode(stdscr):
        editor = Lume(stdscr, config=config, config_issues=config_issues)
        if file_to_open:
            editor.open_file(file_to_open)
        editor.run()
    return 1 if editor.crashed else 0


def start(argv: Optional[list[str]] = None) -> None:
    """Console-script entry point; exits with 0 on a normal quit, 1 on fatal errors."""
    args = sys.argv[1:] if argv is None else argv
    file_to_open = args[0] if args else None

    try:
        load_user_env()
        config, config_issues = load_config()
        setup_logging(config)
    except Exception as e:
        print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("Lume editor starting up...")
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        logger.warning("Could not set system locale. Character rendering may be affected.")

    try:
        exit_code = curses.wrapper(main_app_runner, config, config_issues, file_to_open)
    except curses.error as e:
        logger.critical("Terminal initialization failed: %s", e, exc_info=True)
        print(f"FATAL: Could not initialize the terminal: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)

    logger.info("Lume editor shut down (exit code %d).", exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    start()
