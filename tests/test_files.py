import os

import pytest

from prpll.files import CRCError, CycleFile, File, ReadError, file_size


def test_write_then_iterate_lines(tmp_path):
    p = tmp_path / "a.txt"
    with File.open_write(p) as f:
        f.write("PRP=118063003\n")
        f.write(b"second\n")
    with File.open_read(p) as f:
        assert list(f) == ["PRP=118063003\n", "second\n"]


def test_missing_file_is_false_and_empty(tmp_path):
    f = File.open_read(tmp_path / "missing.txt")
    assert not f
    assert list(f) == []


def test_open_read_throw_missing(tmp_path):
    with pytest.raises(OSError):
        File.open_read_throw(tmp_path / "missing.txt")


def test_line_without_newline_raises(tmp_path):
    p = tmp_path / "b.txt"
    p.write_bytes(b"ok\nno newline")
    with File.open_read(p) as f:
        assert f.read_line() == "ok\n"
        with pytest.raises(ReadError) as info:
            f.read_line()
    assert info.value.name == os.fspath(p)


def test_overlong_line_raises(tmp_path):
    p = tmp_path / "long.txt"
    p.write_bytes(b"x" * 2000 + b"\n")
    with File.open_read(p) as f, pytest.raises(ReadError):
        f.read_line()


def test_read_line_at_eof(tmp_path):
    p = tmp_path / "empty.txt"
    p.write_bytes(b"")
    with File.open_read(p) as f:
        assert f.read_line() == ""
        assert f.size() == 0


def test_checked_round_trip(tmp_path):
    p = tmp_path / "c.bin"
    payload = bytes(range(200))
    with File.open_write(p) as f:
        f.write_checked(payload)
    with File.open_read(p) as f:
        assert f.read_checked(len(payload)) == payload


def test_checked_corruption(tmp_path):
    p = tmp_path / "c.bin"
    with File.open_write(p) as f:
        f.write_checked(b"hello world")
    data = bytearray(p.read_bytes())
    data[-1] ^= 0xFF
    p.write_bytes(bytes(data))
    with File.open_read(p) as f, pytest.raises(CRCError):
        f.read_checked(11)


def test_short_read(tmp_path):
    p = tmp_path / "c.bin"
    with File.open_write(p) as f:
        f.write_checked(b"abc")
    with File.open_read(p) as f, pytest.raises(ReadError):
        f.read_checked(10)


def test_size_keeps_position_and_read_all(tmp_path):
    p = tmp_path / "d.bin"
    p.write_bytes(b"0123456789")
    with File.open_read(p) as f:
        f.seek(3)
        assert f.size() == 10
        assert f.tell() == 3
        assert f.read_all() == b"3456789"


def test_append(tmp_path):
    p = tmp_path / "results.txt"
    File.append(p, "one\n")
    File.append(p, "two\n")
    assert p.read_text() == "one\ntwo\n"
    assert file_size(p) == len(b"one\ntwo\n")


def test_file_size_missing(tmp_path):
    assert file_size(tmp_path / "nope") == -1


def test_cycle_file_renames_on_close(tmp_path):
    p = tmp_path / "state.txt"
    p.write_text("old\n")
    with CycleFile(p) as cf:
        cf.file().write("new\n")
        assert p.read_text() == "old\n"
    assert p.read_text() == "new\n"
    assert not (tmp_path / "state.txt.new").exists()


def test_cycle_file_reset_keeps_original(tmp_path):
    p = tmp_path / "state.txt"
    p.write_text("old\n")
    cf = CycleFile(p)
    cf.file().write("partial")
    cf.reset()
    cf.close()
    assert p.read_text() == "old\n"
    assert (tmp_path / "state.txt.new").read_text() == "partial"
    with pytest.raises(ValueError):
        cf.file()