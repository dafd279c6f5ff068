# lume/utils/utils.py
"""
lume.utils.utils.py
===================

Configuration loading and small helpers for the Lume editor.

Key functionalities include:
- Layered configuration: the embedded `DEFAULT_CONFIG` is deep-merged with the
  user's `config.toml` (``$LUME_CONFIG`` or ``~/.config/Lume/config.toml``).
- Two readers for the same file: strict TOML through the `toml` package, and a
  lenient line reader (``key = value``, ``#`` comments, ``[section]`` headers,
  quotes stripped) used whenever the file is not valid TOML.
- Validation that turns malformed entries into `ConfigIssue` records instead of
  failing, so the editor always starts with usable settings.
- Environment loading from ``~/.config/Lume/.env`` via python-dotenv.
- Color conversion from ``#RRGGBB`` to the nearest xterm-256 index.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import toml
from dotenv import load_dotenv

logger = logging.getLogger("lume")

# --- Constants ---
APP_VERSION = "0.1.0"
WHITE_FG_IDX = 255
CONFIG_ENV = "LUME_CONFIG"
HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")

DEFAULT_CONFIG: Dict[str, Any] = {
    "options": {"tabsize": 4, "show_line_numbers": True, "undo_limit": 100},
    # key name -> action name, applied over the built-in key map in file order
    "keys": {},
    "colors": {
        "keyword": "#d75f5f",
        "type": "#5fd7d7",
        "string": "#d75fd7",
        "comment": "#5f87d7",
        "number": "#87d75f",
        "line_number": "#6c6c6c",
    },
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
        "log_file": "lume.log",
    },
}


@dataclass(frozen=True)
class ConfigIssue:
    """A configuration entry that was ignored, and why."""

    section: str
    key: str
    message: str
    line: Optional[int] = None

    def __str__(self) -> str:
        where = f"[{self.section}] {self.key}" if self.key else f"[{self.section}]"
        if self.line is not None:
            where = f"line {self.line}: {where}"
        return f"{where}: {self.message}"


# --- Helper Functions ---

def user_config_dir() -> Path:
    return Path.home() / ".config" / "Lume"


def config_path() -> Path:
    """Location of the user's config file, honoring ``$LUME_CONFIG``."""
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return user_config_dir() / "config.toml"


def load_user_env() -> bool:
    """Loads ``~/.config/Lume/.env`` into the process environment, if present."""
    dotenv_path = user_config_dir() / ".env"
    if not dotenv_path.is_file():
        return False
    return load_dotenv(dotenv_path=dotenv_path)


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def hex_to_xterm(hex_color: str) -> int:
    """
    Converts a hexadecimal color string to the nearest xterm-256 color index.

    Greys go to the 24-step ramp (232-255), everything else to the 6x6x6 cube.
    """
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        return WHITE_FG_IDX
    try:
        r, g, b = (int(hex_color[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return WHITE_FG_IDX

    if r == g == b:
        if r < 8:
            return 16
        if r > 248:
            return 231
        return round(((r - 8) / 247) * 24) + 232

    return 16 + 36 * round(r / 255 * 5) + 6 * round(g / 255 * 5) + round(b / 255 * 5)


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] == '"':
        return text[1:-1]
    return text


def parse_lenient(text: str) -> Tuple[Dict[str, Dict[str, str]], List[ConfigIssue]]:
    """Reads the line-oriented ``key = value`` format.

    Every value stays a string; typing happens in `validate_config`. Entries
    before the first section header and lines without ``=`` are reported.
    """
    sections: Dict[str, Dict[str, str]] = {}
    issues: List[ConfigIssue] = []
    section = ""

    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("[") and line.endswith("]"):
            section = line[1:-1].strip()
            sections.setdefault(section, {})
            continue

        key, sep, value = line.partition("=")
        if not sep:
            issues.append(ConfigIssue(section, line, "expected 'key = value'", lineno))
            continue
        key, value = _unquote(key.strip()), _unquote(value.strip())
        if not section:
            issues.append(ConfigIssue(section, key, "entry outside of any section", lineno))
            continue
        sections[section][key] = value

    return sections, issues


def _to_positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1")


def validate_config(raw: Dict[str, Any]) -> Tuple[Dict[str, Any], List[ConfigIssue]]:
    """Keeps the well-formed part of a parsed config file.

    Returns:
        The accepted settings (same shape as `DEFAULT_CONFIG`, possibly
        partial) and the issues for everything that was dropped.
    """
    clean: Dict[str, Any] = {}
    issues: List[ConfigIssue] = []

    for section, entries in raw.items():
        if section not in DEFAULT_CONFIG:
            issues.append(ConfigIssue(section, "", "unknown section"))
            continue
        if not isinstance(entries, dict):
            issues.append(ConfigIssue(section, "", "expected a table of entries"))
            continue

        accepted: Dict[str, Any] = {}
        if section == "options":
            for key, value in entries.items():
                if key == "show_line_numbers":
                    accepted[key] = _to_bool(value)
                elif key in ("tabsize", "undo_limit"):
                    number = _to_positive_int(value)
                    if number is None:
                        issues.append(ConfigIssue(section, key, f"expected a positive integer, got {value!r}"))
                    else:
                        accepted[key] = number
                else:
                    issues.append(ConfigIssue(section, key, "unknown option"))
        elif section == "keys":
            for key, value in entries.items():
                if isinstance(value, str) and value.strip():
                    accepted[str(key)] = value.strip()
                else:
                    issues.append(ConfigIssue(section, str(key), f"expected an action name, got {value!r}"))
        elif section == "colors":
            for key, value in entries.items():
                if isinstance(value, str) and HEX_COLOR_RE.match(value):
                    accepted[key] = value
                else:
                    issues.append(ConfigIssue(section, key, f"expected '#RRGGBB', got {value!r}"))
        else:
            accepted = dict(entries)

        clean[section] = accepted

    return clean, issues


def read_config_file(path: Path) -> Tuple[Dict[str, Any], List[ConfigIssue]]:
    """Parses `path` as TOML, falling back to the lenient reader.

    Raises:
        OSError: If the file cannot be read.
    """
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    try:
        return toml.loads(text), []
    except toml.TomlDecodeError as e:
        logger.info(f"Config '{path}' is not strict TOML ({e}); using the line reader.")
        return parse_lenient(text)


def load_config(path: Optional[Path] = None) -> Tuple[Dict[str, Any], List[ConfigIssue]]:
    """
    Loads the user configuration on top of the embedded defaults.

    A missing or unreadable file leaves every default in effect. Malformed
    entries are logged and returned as issues; they never stop startup.
    """
    final_config = deep_merge({}, DEFAULT_CONFIG)
    path = Path(path) if path is not None else config_path()

    if not path.is_file():
        logger.debug(f"No config file at {path}; using built-in defaults.")
        return final_config, []

    try:
        raw, issues = read_config_file(path)
    except OSError as e:
        logger.warning(f"Could not read config '{path}': {e}. Using defaults.")
        return final_config, []

    user_config, more_issues = validate_config(raw)
    issues = issues + more_issues
    final_config = deep_merge(final_config, user_config)

    for issue in issues:
        logger.warning(f"Config {path}: {issue}")
    logger.info(f"Loaded config from {path} ({len(issues)} issue(s)).")
    return final_config, issues
