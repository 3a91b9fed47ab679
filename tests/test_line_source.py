import io

import pytest

from chemcore.exceptions import MolfileFormatError
from chemcore.io.line_source import LineSource


def test_reads_lines_without_newlines():
    source = LineSource("a\r\nb\nc")
    assert source.read_line() == "a"
    assert source.read_line() == "b"
    assert source.read_line() == "c"
    assert source.read_line() is None
    assert source.line_number == 3


def test_push_back_restores_line_number():
    source = LineSource(io.StringIO("first\nsecond\n"))
    line = source.read_line()
    source.push_back(line)
    assert source.line_number == 0
    assert source.peek_line() == "first"
    assert source.read_line() == "first"
    assert source.line_number == 1


def test_pushed_lines_come_back_in_reverse_order():
    source = LineSource(["x\n"])
    source.push_back("b")
    source.push_back("a")
    assert [source.read_line() for _ in range(3)] == ["a", "b", "x"]


def test_at_eof():
    source = LineSource("only\n")
    assert not source.at_eof()
    source.read_line()
    assert source.at_eof()


def test_require_line_raises_at_end():
    source = LineSource("one\n")
    source.require_line("header")
    with pytest.raises(MolfileFormatError) as exc_info:
        source.require_line("counts line")
    assert exc_info.value.line_number == 2
    assert "counts line" in str(exc_info.value)
