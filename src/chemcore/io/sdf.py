#!/usr/bin/env python3
# src/chemcore/io/sdf.py

"""
SD file (multi-record Molfile) reader and writer.

Each record is a V2000 connection table followed by optional data items

    >  <FieldName>
    value line(s)
    (blank line)

and terminated by ``$$$$``. Data items end at a blank line, at ``$$$$`` or
at the next ``>`` header; a header that ends the previous item is pushed
back onto the line source and read as the next item.
"""

import logging
import re
import threading
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, TextIO, Union

from ..domain.models.molecule import Molecule
from ..utils.cancellation import check_cancelled
from .line_source import LineSource
from .molfile import MolfileLoader, MolfileSaver

logger = logging.getLogger(__name__)

RECORD_SEPARATOR = "$$$$"
_FIELD_NAME = re.compile(r"<([^>]*)>")


class SDFReader:
    """Iterate over the molecules of an SD file.

    Usable as a context manager; the underlying stream is closed on exit
    only if the reader opened it.

    Args:
        source: Path, open text stream, or iterable of lines
        cancel_event: Optional event checked between records and atom lines
    """

    def __init__(
        self,
        source: Union[str, Path, TextIO, Iterable[str]],
        cancel_event: Optional[threading.Event] = None,
    ):
        self._owned: Optional[TextIO] = None
        if isinstance(source, (str, Path)):
            self._owned = open(source, "r")
            source = self._owned
        self._lines = LineSource(source)
        self._cancel_event = cancel_event
        self.records_read = 0

    def __enter__(self) -> "SDFReader":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        if self._owned is not None:
            self._owned.close()
            self._owned = None

    def __iter__(self) -> Iterator[Molecule]:
        while True:
            mol = self.read_next()
            if mol is None:
                return
            yield mol

    def read_next(self) -> Optional[Molecule]:
        """Read the next record, or return None at a clean end of input.

        Raises:
            MolfileFormatError: If the record is malformed; the partially
                read molecule is discarded
        """
        check_cancelled(self._cancel_event, "SDF reading")
        if self._at_end():
            return None

        mol = MolfileLoader(self._lines, self._cancel_event).load()
        self._read_data_items(mol)
        self.records_read += 1
        return mol

    def _at_end(self) -> bool:
        """True if nothing but whitespace remains.

        Blank lines are put back when a record follows, since a blank first
        line is a valid (empty) molecule name.
        """
        blanks: List[str] = []
        while True:
            line = self._lines.read_line()
            if line is None:
                return True
            if line.strip():
                self._lines.push_back(line)
                for blank in reversed(blanks):
                    self._lines.push_back(blank)
                return False
            blanks.append(line)

    def _read_data_items(self, mol: Molecule) -> None:
        while True:
            line = self._lines.read_line()
            if line is None or line.strip() == RECORD_SEPARATOR:
                return
            if not line.startswith(">"):
                continue

            match = _FIELD_NAME.search(line)
            if match is None:
                logger.debug(f"Data header without field name on line {self._lines.line_number}")
                name = ""
            else:
                name = match.group(1).strip()

            values: List[str] = []
            while True:
                value_line = self._lines.read_line()
                if value_line is None or not value_line.strip():
                    break
                if value_line.strip() == RECORD_SEPARATOR or value_line.startswith(">"):
                    self._lines.push_back(value_line)
                    break
                values.append(value_line.rstrip())

            if name:
                mol.properties[name] = "\n".join(values)


class SDFWriter:
    """Write molecules and their ``properties`` as SD records.

    Args:
        sink: Path or writable text stream
    """

    def __init__(self, sink: Union[str, Path, TextIO]):
        self._owned: Optional[TextIO] = None
        if isinstance(sink, (str, Path)):
            self._owned = open(sink, "w")
            sink = self._owned
        self._sink = sink
        self.records_written = 0

    def __enter__(self) -> "SDFWriter":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        if self._owned is not None:
            self._owned.close()
            self._owned = None

    def write(self, mol: Molecule) -> None:
        MolfileSaver(self._sink).save(mol)
        for name, value in mol.properties.items():
            self._sink.write(f">  <{name}>\n")
            for line in str(value).splitlines():
                self._sink.write(line + "\n")
            self._sink.write("\n")
        self._sink.write(RECORD_SEPARATOR + "\n")
        self.records_written += 1


def iter_sdf(
    path: Union[str, Path], cancel_event: Optional[threading.Event] = None
) -> Iterator[Molecule]:
    """Lazily yield molecules from an SD file."""
    with SDFReader(path, cancel_event) as reader:
        yield from reader


def load_sdf(
    path: Union[str, Path], cancel_event: Optional[threading.Event] = None
) -> List[Molecule]:
    with SDFReader(path, cancel_event) as reader:
        return list(reader)


def save_sdf(molecules: Iterable[Molecule], path: Union[str, Path]) -> int:
    """Write molecules to an SD file and return the number of records."""
    with SDFWriter(path) as writer:
        for mol in molecules:
            writer.write(mol)
        return writer.records_written


def count_records(path: Union[str, Path]) -> int:
    """Count ``$$$$`` separators without parsing the records."""
    with open(path, "r") as f:
        return sum(1 for line in f if line.strip() == RECORD_SEPARATOR)
