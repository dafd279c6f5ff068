# lume/core/Buffer.py
"""Buffer Module for the Lume Editor
===================================
This module provides the `Buffer` class, the row store of the Lume editor.
The buffer is an ordered list of rows (newline-free strings of single-byte
characters). Every mutation of the text goes through one of its row
operations, which clamp the requested cursor position to the current bounds
instead of failing and return the corrected cursor position afterwards.

Key Features:
-------------
- Character insertion, line splitting and backspace with line merging.
- Clamping of `(cx, cy)` on every operation.
- Dirty-flag tracking for unsaved changes.
- Plain-text load/save with chardet-based encoding detection that keeps
  undecodable bytes intact across a save.

Classes:
--------
- Buffer: The row store.
- SaveError: Raised when the buffer cannot be written to disk.
"""

import logging
import os
from typing import Optional

import chardet


class SaveError(OSError):
    """Raised when the buffer cannot be written to its target file."""


## ==================== Buffer Class ====================
class Buffer:
    """Class Buffer
    ===================
    Ordered sequence of text rows plus the dirty flag and file metadata.

    A cursor row index equal to ``len(rows)`` denotes the virtual row just past
    the end of the buffer. It is a valid append position for insertion but is
    never mutated in place.

    Attributes:
        rows (list[str]): The text, one string per line, without newlines.
        dirty (bool): True when the rows differ from what was last saved.
        filename (Optional[str]): Path the buffer is saved to.
        encoding (str): Encoding used to decode the file and to write it back.
    """

    CHARDET_SAMPLE_SIZE = 1024 * 20
    CHARDET_MIN_CONFIDENCE = 0.75

    def __init__(self, rows: Optional[list[str]] = None, filename: Optional[str] = None) -> None:
        self.rows: list[str] = list(rows) if rows else []
        self.dirty: bool = False
        self.filename: Optional[str] = filename
        self.encoding: str = "utf-8"

    def __len__(self) -> int:
        return len(self.rows)

    def row_length(self, cy: int) -> int:
        """Length of row `cy`, or 0 for the virtual row past the end."""
        if 0 <= cy < len(self.rows):
            return len(self.rows[cy])
        return 0

    def clamp(self, cx: int, cy: int) -> tuple[int, int]:
        """Corrects a cursor pair so that it satisfies the cursor invariant."""
        cy = max(0, min(cy, len(self.rows)))
        if cy == len(self.rows):
            return 0, cy
        return max(0, min(cx, len(self.rows[cy]))), cy

    # ---------------------- Row operations --------------------
    def append_row(self, text: str = "") -> None:
        self.rows.append(text)
        self.dirty = True

    def insert_char(self, cx: int, cy: int, ch: str) -> tuple[int, int]:
        """Inserts `ch` at `(cx, cy)` and returns the cursor after it.

        Inserting on the virtual row past the end appends a new row first.
        """
        if len(ch) != 1 or ch in "\r\n":
            logging.warning("Buffer.insert_char: refusing to insert %r", ch)
            return self.clamp(cx, cy)

        cx, cy = self.clamp(cx, cy)
        if cy == len(self.rows):
            self.rows.append("")

        row = self.rows[cy]
        self.rows[cy] = row[:cx] + ch + row[cx:]
        self.dirty = True
        return cx + 1, cy

    def split_line(self, cx: int, cy: int) -> tuple[int, int]:
        """Breaks row `cy` at `cx`; the tail becomes a new row below.

        On the virtual row past the end a new empty row is appended and the
        cursor advances past it instead.
        """
        cx, cy = self.clamp(cx, cy)
        if cy == len(self.rows):
            self.rows.append("")
            self.dirty = True
            return 0, cy + 1

        row = self.rows[cy]
        self.rows[cy] = row[:cx]
        self.rows.insert(cy + 1, row[cx:])
        self.dirty = True
        return 0, cy + 1

    def delete_backward(self, cx: int, cy: int) -> tuple[int, int]:
        """Removes the character before `(cx, cy)`.

        At the start of a row (other than the first) the row is merged onto the
        end of the previous one and the cursor moves to the join point.
        """
        cx, cy = self.clamp(cx, cy)
        if cy >= len(self.rows):
            return cx, cy
        if cx == 0 and cy == 0:
            return cx, cy

        row = self.rows[cy]
        if cx > 0:
            self.rows[cy] = row[: cx - 1] + row[cx:]
            self.dirty = True
            return cx - 1, cy

        join_x = len(self.rows[cy - 1])
        self.rows[cy - 1] += row
        del self.rows[cy]
        self.dirty = True
        return join_x, cy - 1

    # ---------------------- File I/O --------------------
    def _detect_encoding(self, raw: bytes) -> str:
        """Guesses the encoding of `raw`, falling back to UTF-8.

        A chardet guess is accepted only for an ASCII-compatible codec that
        decodes `raw` strictly and encodes the result back to the same bytes,
        so rows stay one character per byte of ASCII text and a save
        reproduces the file.
        """
        if not raw:
            return "utf-8"
        result = chardet.detect(raw[: self.CHARDET_SAMPLE_SIZE])
        guess = result.get("encoding")
        confidence = result.get("confidence") or 0.0
        logging.debug("Chardet detected encoding %r with confidence %.2f", guess, confidence)
        if not guess or confidence < self.CHARDET_MIN_CONFIDENCE:
            return "utf-8"

        try:
            if "\tA\n".encode(guess) != b"\tA\n":
                logging.info("Ignoring chardet guess %r: not ASCII-compatible.", guess)
                return "utf-8"
            if raw.decode(guess).encode(guess) != raw:
                logging.info("Ignoring chardet guess %r: bytes do not round-trip.", guess)
                return "utf-8"
        except LookupError:
            logging.warning("Unknown encoding %r reported by chardet; using utf-8.", guess)
            return "utf-8"
        except UnicodeError as e:
            logging.info("Ignoring chardet guess %r: %s", guess, e)
            return "utf-8"
        return guess

    def load(self, path: str) -> None:
        """Replaces the rows with the content of `path`.

        A file that does not exist yields an empty buffer named after `path`.
        Bytes that are not valid in the detected encoding are kept as escaped
        surrogates and written back unchanged by `save`.

        Raises:
            OSError: If the file exists but cannot be read. The buffer is left
                untouched in that case.
        """
        if not os.path.exists(path):
            logging.info("File '%s' does not exist yet; starting with an empty buffer.", path)
            self.filename, self.rows, self.dirty, self.encoding = path, [], False, "utf-8"
            return

        with open(path, "rb") as f:
            raw = f.read()

        encoding = self._detect_encoding(raw)
        text = raw.decode(encoding, errors="surrogateescape")

        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        self.rows = [line[:-1] if line.endswith("\r") else line for line in lines]
        self.filename = path
        self.dirty = False
        self.encoding = encoding
        logging.debug(
            "Loaded '%s': %d rows, encoding %s", path, len(self.rows), self.encoding
        )

    def to_text(self) -> str:
        """The rows joined by exactly ``len(rows) - 1`` newlines."""
        return "\n".join(self.rows)

    def save(self, path: Optional[str] = None) -> int:
        """Writes the buffer to `path` (or the remembered filename).

        Returns:
            int: Number of bytes written.

        Raises:
            SaveError: If there is no target path or the file cannot be written.
        """
        target = path or self.filename
        if not target:
            raise SaveError("No file name")

        try:
            data = self.to_text().encode(self.encoding, errors="surrogateescape")
        except UnicodeError as e:
            logging.error("Cannot encode buffer as %s: %s", self.encoding, e)
            raise SaveError(f"Cannot encode text as {self.encoding}") from e

        try:
            with open(target, "wb") as f:
                f.write(data)
        except OSError as e:
            logging.error("Failed to write file '%s': %s", target, e)
            raise SaveError(f"Cannot write '{target}': {e.strerror or e}") from e

        self.filename = target
        self.dirty = False
        logging.debug("Saved %d bytes to '%s'", len(data), target)
        return len(data)
