# lume/utils/logging_config.py
"""lume.utils.logging_config
===========================

Logging setup for the Lume editor. The terminal is owned by curses while the
editor runs, so records go to rotating files by default and console output has
to be switched on explicitly.

Handlers attached by `setup_logging`:
    - ``lume.log``: rotating file (2 MiB x 5) at ``file_level``.
    - stderr: only when ``log_to_console`` is true, at ``console_level``.
    - ``error.log``: ERROR and CRITICAL only, when ``separate_error_log`` is true.
    - ``keytrace.log``: raw key codes on the ``lume.keyevents`` logger, enabled
      by ``LUME_KEYTRACE=1|true|yes``.

Globals:
    logger: Main application logger ("lume").
    KEY_LOGGER: Logger for raw key-press trace events ("lume.keyevents").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from typing import Any, Optional


logger = logging.getLogger("lume")
KEY_LOGGER = logging.getLogger("lume.keyevents")

KEYTRACE_ENV = "LUME_KEYTRACE"
DEFAULT_LOG_FILE = "lume.log"

FILE_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"
CONSOLE_FORMAT = "%(levelname)-8s - %(name)-12s - %(message)s"


def _level(name: Any, default: int) -> int:
    level = getattr(logging, str(name).upper(), None)
    return level if isinstance(level, int) else default


def _prepare_path(filename: str) -> str:
    """Creates the directory for `filename`, or redirects it to the temp dir."""
    log_dir = os.path.dirname(filename)
    if log_dir and not os.path.isdir(log_dir):
        try:
            os.makedirs(log_dir, exist_ok=True)
        except OSError as e:
            fallback = os.path.join(tempfile.gettempdir(), os.path.basename(filename) or DEFAULT_LOG_FILE)
            print(f"Error creating log directory '{log_dir}': {e}", file=sys.stderr)
            print(f"Logging to temporary file: '{fallback}'", file=sys.stderr)
            return fallback
    return filename


def _rotating_handler(
    filename: str, max_bytes: int, backups: int, formatter: logging.Formatter
) -> Optional[logging.Handler]:
    try:
        handler = logging.handlers.RotatingFileHandler(
            _prepare_path(filename), maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
        )
    except OSError as e:
        print(f"Error setting up log file '{filename}': {e}. File logging may be impaired.", file=sys.stderr)
        return None
    handler.setFormatter(formatter)
    return handler


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and log levels.

    Only the ``["logging"]`` section of `config` is consulted:

    - ``file_level`` (str): Level for the main log file. Default ``"DEBUG"``.
    - ``console_level`` (str): Level for stderr output. Default ``"WARNING"``.
    - ``log_to_console`` (bool): Attach the stderr handler. Default ``False``.
    - ``separate_error_log`` (bool): Also write ``error.log``. Default ``False``.
    - ``log_file`` (str): Path of the main log file. Default ``"lume.log"``.

    Root handlers are replaced on every call, so calling it twice (as the
    tests do) never duplicates records. I/O problems are reported to stderr
    and never raised.
    """
    logging_config = (config or {}).get("logging", {}) or {}
    file_formatter = logging.Formatter(FILE_FORMAT)

    file_level = _level(logging_config.get("file_level", "DEBUG"), logging.DEBUG)
    log_filename = str(logging_config.get("log_file") or DEFAULT_LOG_FILE)
    file_handler = _rotating_handler(log_filename, 2 * 1024 * 1024, 5, file_formatter)
    if file_handler:
        file_handler.setLevel(file_level)

    console_handler = None
    if logging_config.get("log_to_console", False):
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        console_handler.setLevel(_level(logging_config.get("console_level", "WARNING"), logging.WARNING))

    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        error_file_handler = _rotating_handler("error.log", 1024 * 1024, 3, file_formatter)
        if error_file_handler:
            error_file_handler.setLevel(logging.ERROR)

    root_logger = logging.getLogger()
    root_logger.handlers = []
    for handler in (file_handler, console_handler, error_file_handler):
        if handler:
            root_logger.addHandler(handler)
    root_logger.setLevel(file_level)

    KEY_LOGGER.propagate = False
    KEY_LOGGER.setLevel(logging.DEBUG)
    KEY_LOGGER.handlers = []

    if os.environ.get(KEYTRACE_ENV, "").lower() in {"1", "true", "yes"}:
        key_handler = _rotating_handler("keytrace.log", 1024 * 1024, 3, logging.Formatter("%(asctime)s - %(message)s"))
        if key_handler:
            KEY_LOGGER.addHandler(key_handler)
            KEY_LOGGER.disabled = False
            logging.info("Key event tracing enabled, logging to 'keytrace.log'.")
        else:
            KEY_LOGGER.disabled = True
    else:
        KEY_LOGGER.addHandler(logging.NullHandler())
        KEY_LOGGER.disabled = True
        logging.debug("Key event tracing is disabled.")

    logging.info(
        "Logging setup complete. Root logger level: %s.", logging.getLevelName(root_logger.level)
    )
    if file_handler:
        logging.info("File logging to '%s' at level: %s.", log_filename, logging.getLevelName(file_level))
    if console_handler:
        logging.info("Console logging to stderr at level: %s.", logging.getLevelName(console_handler.level))
