# lume/core/Highlighter.py
"""Highlighter Module for the Lume Editor
========================================
A single-pass classifier that splits one row of C/C++-like source into
syntax spans for paint-time coloring. It performs no I/O: the result depends
only on the row text, the tab size and the screen column the row starts at.

State is carried within one row only. An unterminated string or `//` comment
ends with its row and never continues onto the next one.

Classifications use the Pygments token vocabulary:

=====================  ==============================
Token.Keyword          reserved words (`if`, `return`)
Token.Keyword.Type     built-in type names (`int`, `std`)
Token.Literal.String   `"..."` and `'...'` literals
Token.Comment.Single   `//` through end of row
Token.Literal.Number   digit runs, one embedded `.`
Token.Text             everything else
=====================  ==============================
"""

import logging
from dataclasses import dataclass
from functools import lru_cache

from pygments.token import Comment, Keyword, Number, String, Text, Token


# Class shared by every Pygments token type (Token, Keyword.Type, ...).
TokenType = type(Token)


KEYWORDS = frozenset(
    {
        "if", "else", "for", "while", "switch", "case", "default", "break",
        "continue", "return", "goto", "do", "sizeof", "typedef", "static",
        "const", "volatile", "inline", "struct", "class", "public", "private",
        "protected", "virtual", "override", "template", "typename", "using",
        "namespace", "enum", "union", "new", "delete", "this", "operator",
        "try", "catch", "throw",
    }
)

TYPES = frozenset(
    {
        "int", "long", "short", "char", "float", "double", "void", "bool",
        "unsigned", "signed", "auto", "std", "string", "size_t",
    }
)

# Most specific first; style_name walks a token's parents until one matches.
_STYLE_ROLES = {
    Keyword.Type: "type",
    Keyword: "keyword",
    String: "string",
    Comment: "comment",
    Number: "number",
}


@dataclass(frozen=True)
class Span:
    """A run of row characters sharing one classification.

    Attributes:
        text (str): Display text with tabs expanded to blanks.
        token (TokenType): Pygments token type of the run.
        start (int): Offset of the first character in the row.
        end (int): Offset one past the last character in the row.
        col (int): Screen column at which `text` begins.
    """

    text: str
    token: TokenType
    start: int
    end: int
    col: int

    @property
    def width(self) -> int:
        return len(self.text)


def style_name(token: TokenType) -> str:
    """Maps a token type to one of the editor's color roles.

    Sub-types fall back to their nearest classified parent, so
    `Token.Literal.String.Double` resolves to ``"string"``.
    """
    current = token
    while current is not None and current is not Token:
        role = _STYLE_ROLES.get(current)
        if role:
            return role
        current = current.parent
    return "default"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _is_ident_char(ch: str) -> bool:
    return _is_ident_start(ch) or _is_digit(ch)


def _scan_number(row: str, i: int) -> int:
    """Returns the end offset of the numeric literal starting at `i`."""
    n = len(row)
    j = i
    while j < n and _is_digit(row[j]):
        j += 1
    if j + 1 < n and row[j] == "." and _is_digit(row[j + 1]):
        j += 1
        while j < n and _is_digit(row[j]):
            j += 1
    return j


def _scan_string(row: str, i: int) -> int:
    """Returns the end offset of the string literal opened at `i`.

    The literal closes at the first unescaped copy of its opening quote, or
    runs to the end of the row.
    """
    delimiter = row[i]
    j = i + 1
    while j < len(row):
        if row[j] == delimiter and row[j - 1] != "\\":
            return j + 1
        j += 1
    return j


def _expand(text: str, col: int, tab_size: int) -> tuple[str, int]:
    """Expands tabs in `text` starting at screen column `col`.

    Returns the display text and the column just after it.
    """
    if "\t" not in text:
        return text, col + len(text)
    out = []
    for ch in text:
        if ch == "\t":
            width = tab_size - (col % tab_size)
            out.append(" " * width)
            col += width
        else:
            out.append(ch)
            col += 1
    return "".join(out), col


@lru_cache(maxsize=4096)
def _classify(row: str, tab_size: int, start_col: int) -> tuple[Span, ...]:
    spans: list[Span] = []
    col = start_col
    n = len(row)
    i = 0

    def emit(token: TokenType, start: int, end: int) -> None:
        nonlocal col
        text, next_col = _expand(row[start:end], col, tab_size)
        # Adjacent plain runs are merged into one span.
        if token is Text and spans and spans[-1].token is Text and spans[-1].end == start:
            prev = spans[-1]
            spans[-1] = Span(prev.text + text, Text, prev.start, end, prev.col)
        else:
            spans.append(Span(text, token, start, end, col))
        col = next_col

    while i < n:
        ch = row[i]
        escaped = i > 0 and row[i - 1] == "\\"

        if ch == "/" and i + 1 < n and row[i + 1] == "/":
            emit(Comment.Single, i, n)
            break

        if ch in "\"'" and not escaped:
            end = _scan_string(row, i)
            emit(String, i, end)
            i = end
        elif _is_digit(ch):
            end = _scan_number(row, i)
            emit(Number, i, end)
            i = end
        elif _is_ident_start(ch):
            end = i + 1
            while end < n and _is_ident_char(row[end]):
                end += 1
            word = row[i:end]
            if word in KEYWORDS:
                emit(Keyword, i, end)
            elif word in TYPES:
                emit(Keyword.Type, i, end)
            else:
                emit(Text, i, end)
            i = end
        else:
            emit(Text, i, i + 1)
            i += 1

    return tuple(spans)


def highlight_row(row: str, tab_size: int = 4, start_col: int = 0) -> list[Span]:
    """Classifies `row` into syntax spans.

    Args:
        row (str): One buffer row, newline-free.
        tab_size (int): Distance between tab stops.
        start_col (int): Screen column of the row's first character; tab stops
            are computed relative to absolute column 0.

    Returns:
        list[Span]: Contiguous, non-overlapping spans covering the whole row
        in order. An empty row yields an empty list.
    """
    if tab_size < 1:
        logging.warning("highlight_row: invalid tab size %r, using 1", tab_size)
        tab_size = 1
    return list(_classify(row, tab_size, start_col))
