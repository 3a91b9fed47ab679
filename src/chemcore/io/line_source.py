#!/usr/bin/env python3
# src/chemcore/io/line_source.py

"""
Line-oriented reader with one-line lookahead and pushback.

The Molfile and SDF codecs read through this class so that a line consumed
while looking for a terminator (e.g. the next ``> <Field>`` header) can be
handed back instead of being lost.
"""

import io
from typing import Iterable, Iterator, List, Optional, Union

from ..exceptions import MolfileFormatError


class LineSource:
    """Wrap a text stream or iterable of lines.

    Lines are returned without their trailing newline. ``line_number`` is the
    1-based number of the last line handed out (0 before the first read).
    """

    def __init__(self, source: Union[str, Iterable[str]]):
        if isinstance(source, str):
            source = io.StringIO(source)
        self._lines: Iterator[str] = iter(source)
        self._pushed: List[str] = []
        self.line_number = 0

    def read_line(self) -> Optional[str]:
        """Next line, or None at end of input."""
        if self._pushed:
            line = self._pushed.pop()
        else:
            try:
                line = next(self._lines)
            except StopIteration:
                return None
            line = line.rstrip("\r\n")
        self.line_number += 1
        return line

    def peek_line(self) -> Optional[str]:
        line = self.read_line()
        if line is not None:
            self.push_back(line)
        return line

    def push_back(self, line: str) -> None:
        self._pushed.append(line)
        self.line_number -= 1

    def at_eof(self) -> bool:
        return self.peek_line() is None

    def require_line(self, what: str) -> str:
        """Next line, raising if the input ends first.

        Raises:
            MolfileFormatError: On unexpected end of input
        """
        line = self.read_line()
        if line is None:
            raise MolfileFormatError(
                f"unexpected end of input while reading {what}", self.line_number + 1
            )
        return line
