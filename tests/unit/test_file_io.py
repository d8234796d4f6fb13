"""Tests for log snapshot reads and atomic report writes."""

import pytest

from ladder_backtest.core.errors import DataError, LogFileMissingError
from ladder_backtest.core.file_io import read_log_lines, write_text_atomic


class TestReadLogLines:
    def test_missing_file(self, tmp_path):
        with pytest.raises(LogFileMissingError) as info:
            read_log_lines(tmp_path / "nope.log")
        assert isinstance(info.value, DataError)
        assert "nope.log" in str(info.value)

    def test_drops_blank_lines_and_handles_crlf(self, tmp_path):
        path = tmp_path / "bot.log"
        path.write_bytes(b"a\r\n\r\nb\nc")
        assert read_log_lines(path) == ["a", "b", "c"]

    def test_bad_bytes_do_not_fail(self, tmp_path):
        path = tmp_path / "bot.log"
        path.write_bytes(b"ok\n\xff\xfe broken\n")
        lines = read_log_lines(path)
        assert lines[0] == "ok"
        assert len(lines) == 2


class TestWriteTextAtomic:
    def test_overwrites(self, tmp_path):
        path = tmp_path / "out" / "report.txt"
        write_text_atomic(path, "first")
        write_text_atomic(path, "second")
        assert path.read_text() == "second"

    def test_leaves_no_temp_files(self, tmp_path):
        path = tmp_path / "report.txt"
        write_text_atomic(path, "x")
        assert [p.name for p in tmp_path.iterdir()] == ["report.txt"]
