# src/lume/core/__init__.py
"""Public facade for lume.core: re-export main classes from CamelCase modules.

Keeps one-class-per-file module names (Buffer.py, History.py, ...),
but provides flat imports for convenience and stability.
"""

# Re-export classes/symbols from CamelCase modules
from .Buffer import Buffer, SaveError  # noqa: F401
from .Highlighter import Span, highlight_row  # noqa: F401
from .History import History, UndoSnapshot  # noqa: F401
from .Lume import Lume  # noqa: F401
from .Viewport import Viewport, compute_screen_x  # noqa: F401


__all__ = [
    "Buffer",
    "SaveError",
    "History",
    "UndoSnapshot",
    "Viewport",
    "compute_screen_x",
    "Span",
    "highlight_row",
    "Lume",
]
