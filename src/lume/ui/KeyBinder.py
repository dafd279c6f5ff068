# lume/ui/KeyBinder.py
"""KeyBinder.py
==================
Description:
-----------------------
The KeyBinder class translates raw key codes into editor actions for the Lume
editor. A configurable key map (action name -> key code) is consulted first;
keys it does not claim fall through to a fixed table of navigation and editing
keys, and finally printable bytes are inserted as text.

Key Features:
- Built-in default key map, overridden entry by entry from the ``[keys]``
  section of the configuration (``KeyName = "action"``).
- Symbolic key names: ``ArrowUp``, ``PageDown``, ``Ctrl-q``, ``Ctrl-ArrowLeft``
  or any single character.
- Deterministic resolution of duplicate bindings: the first action in key-map
  order wins and the conflict is logged when the map is loaded.
- Raw key reading with decoding of ESC sequences that curses leaves undecoded.

Ctrl-ArrowLeft/Right have no fixed curses constant: ncurses assigns codes to
the terminfo extended keys ``kLFT5``/``kRIT5`` per terminal. The codes are
looked up with `curses.keyname` when the binder is built; 554 and 569 (the
xterm values) are used when the terminal does not define them.

Main Methods:
1. handle_input: Dispatches a single key code to the matching editor method.
2. lookup: Resolves a key code to its action name.
3. get_key_input: Blocking read of one key, including ESC sequences.
"""

import curses
import logging
import re
from typing import TYPE_CHECKING, Any, Callable, Optional

from lume.utils.logging_config import KEY_LOGGER
from lume.utils.utils import ConfigIssue

if TYPE_CHECKING:
    from lume.core.Lume import Lume


CTRL_ARROW_LEFT = 554
CTRL_ARROW_RIGHT = 569


def ctrl_key(ch: str) -> int:
    """Key code produced by Ctrl plus `ch` (``ctrl_key("q") == 17``)."""
    return ord(ch) & 0x1F


NAMED_KEYS: dict[str, int] = {
    "ArrowUp": curses.KEY_UP,
    "ArrowDown": curses.KEY_DOWN,
    "ArrowLeft": curses.KEY_LEFT,
    "ArrowRight": curses.KEY_RIGHT,
    "PageUp": curses.KEY_PPAGE,
    "PageDown": curses.KEY_NPAGE,
    "Home": curses.KEY_HOME,
    "End": curses.KEY_END,
    "Ctrl-ArrowLeft": CTRL_ARROW_LEFT,
    "Ctrl-ArrowRight": CTRL_ARROW_RIGHT,
}


def resolve_ctrl_arrow_codes() -> tuple[int, int]:
    """Key codes of Ctrl-ArrowLeft and Ctrl-ArrowRight on the current terminal.

    Returns:
        tuple[int, int]: ``(left, right)``, each falling back to
        `CTRL_ARROW_LEFT` / `CTRL_ARROW_RIGHT` when not defined.
    """
    wanted = {b"kLFT5": "left", b"kRIT5": "right"}
    found: dict[str, int] = {}
    try:
        for code in range(curses.KEY_MAX + 1, curses.KEY_MAX + 1024):
            name = wanted.get(curses.keyname(code))
            if name and name not in found:
                found[name] = code
                if len(found) == len(wanted):
                    break
    except (curses.error, ValueError) as e:
        logging.debug("resolve_ctrl_arrow_codes: keyname lookup failed: %r", e)

    left = found.get("left", CTRL_ARROW_LEFT)
    right = found.get("right", CTRL_ARROW_RIGHT)
    logging.debug("Ctrl-ArrowLeft=%d, Ctrl-ArrowRight=%d", left, right)
    return left, right


def default_key_map(ctrl_left: int = CTRL_ARROW_LEFT, ctrl_right: int = CTRL_ARROW_RIGHT) -> dict[str, int]:
    """The built-in bindings, in resolution order."""
    return {
        "quit": ctrl_key("q"),
        "save": ctrl_key("s"),
        "move_up": curses.KEY_UP,
        "move_down": curses.KEY_DOWN,
        "move_left": curses.KEY_LEFT,
        "move_right": curses.KEY_RIGHT,
        "move_word_left": ctrl_left,
        "move_word_right": ctrl_right,
        "undo": ctrl_key("z"),
    }


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Class KeyBinder
    ====================
    Owns the key map of one editor session and dispatches key codes.

    Attributes:
        editor (Lume): The editor whose methods the actions call.
        config (dict): Editor configuration; only ``["keys"]`` is read.
        stdscr: Curses window used by `get_key_input`.
        keybindings (dict[str, int]): Action name -> key code, in resolution order.
        action_map (dict[int, Callable]): Key code -> editor method, covering both
            the configured actions and the fixed navigation/editing keys.
        issues (list[ConfigIssue]): Problems found in the ``[keys]`` section.
        conflicts (list[tuple[int, str, str]]): ``(code, winner, loser)`` for every
            key code bound to more than one action.
        ctrl_arrow_left (int): Code this terminal sends for Ctrl-ArrowLeft.
        ctrl_arrow_right (int): Code this terminal sends for Ctrl-ArrowRight.
    """

    ESCAPE_SEQUENCE_MAP: dict[str, int] = {
        "[A": curses.KEY_UP, "[B": curses.KEY_DOWN,
        "[C": curses.KEY_RIGHT, "[D": curses.KEY_LEFT,
        "OA": curses.KEY_UP, "OB": curses.KEY_DOWN,
        "OC": curses.KEY_RIGHT, "OD": curses.KEY_LEFT,
        "[1;5C": CTRL_ARROW_RIGHT, "[1;5D": CTRL_ARROW_LEFT,
        "[5C": CTRL_ARROW_RIGHT, "[5D": CTRL_ARROW_LEFT,
        "[H": curses.KEY_HOME, "[F": curses.KEY_END,
        "OH": curses.KEY_HOME, "OF": curses.KEY_END,
        "[1~": curses.KEY_HOME, "[4~": curses.KEY_END,
        "[7~": curses.KEY_HOME, "[8~": curses.KEY_END,
        "[5~": curses.KEY_PPAGE, "[6~": curses.KEY_NPAGE,
    }

    def __init__(self, editor: "Lume"):
        logging.debug("KeyBinder initialized with editor: %s", editor)
        self.editor = editor
        self.config = editor.config
        self.stdscr = editor.stdscr
        self.issues: list[ConfigIssue] = []
        self.conflicts: list[tuple[int, str, str]] = []

        self.ctrl_arrow_left, self.ctrl_arrow_right = resolve_ctrl_arrow_codes()
        remap = {CTRL_ARROW_LEFT: self.ctrl_arrow_left, CTRL_ARROW_RIGHT: self.ctrl_arrow_right}
        self.named_keys = {name: remap.get(code, code) for name, code in NAMED_KEYS.items()}
        self.escape_sequences = {seq: remap.get(code, code) for seq, code in self.ESCAPE_SEQUENCE_MAP.items()}

        self.keybindings = self._load_keybindings()
        self._code_to_action = self._index_keybindings()
        self.action_map = self._setup_action_map()

    # ---------------------- Key names --------------------
    def _decode_keystring(self, key_name: str) -> int:
        """Decodes a symbolic key name into a key code, or -1 if unknown."""
        if key_name in self.named_keys:
            return self.named_keys[key_name]
        if len(key_name) == 6 and key_name.startswith("Ctrl-") and key_name[5].isascii() and key_name[5].isalpha():
            return ctrl_key(key_name[5].lower())
        if len(key_name) == 1 and ord(key_name) < 256:
            return ord(key_name)
        return -1

    # ---------------------- Key map --------------------
    def _action_methods(self) -> dict[str, Callable[..., Any]]:
        return {
            "quit": self.editor.exit_editor,
            "save": self.editor.save_file,
            "move_up": self.editor.handle_up,
            "move_down": self.editor.handle_down,
            "move_left": self.editor.handle_left,
            "move_right": self.editor.handle_right,
            "move_word_left": self.editor.move_word_left,
            "move_word_right": self.editor.move_word_right,
            "undo": self.editor.undo,
        }

    def _load_keybindings(self) -> dict[str, int]:
        """Applies the ``[keys]`` section over the default key map.

        Entries are applied in file order; a later entry for the same action
        replaces the earlier code. Unknown key names are dropped and unknown
        action names are kept but never dispatched; both are reported.
        """
        keybindings = default_key_map(self.ctrl_arrow_left, self.ctrl_arrow_right)
        known_actions = set(keybindings)
        user_keys = self.config.get("keys", {}) or {}

        for key_name, action in user_keys.items():
            code = self._decode_keystring(str(key_name))
            if code == -1:
                self.issues.append(ConfigIssue("keys", str(key_name), "unrecognized key name"))
                logging.warning("KeyBinder: Unrecognized key name %r in [keys]; ignored.", key_name)
                continue
            if action not in known_actions:
                self.issues.append(ConfigIssue("keys", str(key_name), f"unknown action {action!r}"))
                logging.warning("KeyBinder: Key %r bound to unknown action %r.", key_name, action)
            keybindings[action] = code
            logging.debug("KeyBinder: %s -> %r (code %d)", action, key_name, code)

        return keybindings

    def _index_keybindings(self) -> dict[int, str]:
        """Builds the code -> action index, first action in key-map order winning."""
        known_actions = set(default_key_map())
        index: dict[int, str] = {}
        for action, code in self.keybindings.items():
            if action not in known_actions:
                continue
            if code in index:
                self.conflicts.append((code, index[code], action))
                logging.warning(
                    "KeyBinder: Key code %d is bound to both '%s' and '%s'; '%s' wins.",
                    code, index[code], action, index[code],
                )
                continue
            index[code] = action
        return index

    def _setup_action_map(self) -> dict[int, Callable[..., Any]]:
        """Maps every handled key code to the editor method it triggers.

        The fixed navigation/editing keys are entered first so that configured
        bindings on the same code take precedence over them.
        """
        methods = self._action_methods()
        action_map: dict[int, Callable[..., Any]] = {
            curses.KEY_HOME: self.editor.handle_home,
            curses.KEY_END: self.editor.handle_end,
            curses.KEY_PPAGE: self.editor.handle_page_up,
            curses.KEY_NPAGE: self.editor.handle_page_down,
            curses.KEY_BACKSPACE: self.editor.handle_backspace,
            127: self.editor.handle_backspace,
            8: self.editor.handle_backspace,
            curses.KEY_ENTER: self.editor.handle_enter,
            10: self.editor.handle_enter,
            13: self.editor.handle_enter,
            9: self.editor.handle_tab,
            curses.KEY_RESIZE: self.editor.handle_resize,
        }
        for code, action in self._code_to_action.items():
            action_map[code] = methods[action]

        logging.debug(
            "Final constructed action map: %s",
            {k: getattr(v, "__name__", repr(v)) for k, v in action_map.items()},
        )
        return action_map

    def lookup(self, key: int) -> Optional[str]:
        """Returns the action bound to `key`, or None."""
        return self._code_to_action.get(key)

    # ---------------------- Handle Input --------------------
    def handle_input(self, key: int) -> bool:
        """Processes a single key code.

        Returns:
            bool: True if the key changed something that needs a redraw.
        """
        KEY_LOGGER.debug("key=%r", key)
        try:
            action = self.action_map.get(key)
            if action is not None:
                logging.debug("handle_input: Key %r -> %s", key, getattr(action, "__name__", action))
                return bool(action())

            if isinstance(key, int) and 32 <= key <= 126:
                return bool(self.editor.insert_char(chr(key)))

            logging.debug("handle_input: Ignored unhandled key %r", key)
            return False
        except Exception as e:
            logging.exception("Input handler error for key %r", key)
            self.editor._set_status_message(f"Input handler error: {str(e)[:50]}")
            return True

    def get_key_input(self, window: Optional[Any] = None) -> int:
        """Reads one key, decoding ESC sequences curses did not translate.

        Returns:
            int: The key code; 27 for a lone or unknown ESC sequence, and
            ``curses.ERR`` if the read failed.
        """
        target = window or self.stdscr
        try:
            ch = target.getch()
            if ch != 27:
                return ch

            seq = ""
            target.nodelay(True)
            try:
                while True:
                    nx = target.getch()
                    if nx == curses.ERR:
                        break
                    if 0 <= nx <= 255:
                        seq += chr(nx)
            finally:
                target.nodelay(False)

            if not seq:
                return 27

            code = self.escape_sequences.get(seq)
            if code is None:
                cleaned = "".join(re.findall(r"[\[O0-9;~A-Za-z]", seq))
                code = self.escape_sequences.get(cleaned)
            if code is None:
                logging.debug("get_key_input: unknown escape sequence: ESC + %r", seq)
                return 27

            KEY_LOGGER.debug("ESC %r -> %d", seq, code)
            return code
        except curses.error:
            return curses.ERR
