"""Binary files with line reading, CRC-checked blocks, durable close and write-then-rename."""

from __future__ import annotations

import os
import zlib
from pathlib import Path
from typing import BinaryIO, Iterator, Union

PathLike = Union[str, os.PathLike]

_MAX_LINE = 1023


class _FileError(Exception):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


class CRCError(_FileError):
    """Data read from a file does not match its checksum."""


class ReadError(_FileError):
    """A read or seek on a file failed or came up short."""


class WriteError(_FileError):
    """A write to a file failed."""


def file_size(path: PathLike) -> int:
    """Size of the file at ``path`` in bytes, or -1 when it cannot be determined."""
    try:
        return os.path.getsize(path)
    except OSError:
        return -1


class File:
    """A binary file; written files are synced to disk when closed.

    A File that could not be opened is false and yields no lines.
    """

    def __init__(self, fh: BinaryIO | None = None, name: str = "", read_only: bool = True) -> None:
        self._fh = fh
        self.name = name
        self.read_only = read_only

    @classmethod
    def _open(cls, path: PathLike, mode: str) -> "File":
        return cls(open(path, mode), os.fspath(path), mode == "rb")

    @classmethod
    def open_read(cls, path: PathLike) -> "File":
        """Open for reading; the result is false if the file cannot be opened."""
        try:
            return cls._open(path, "rb")
        except OSError:
            return cls(None, os.fspath(path), True)

    @classmethod
    def open_read_throw(cls, path: PathLike) -> "File":
        """Open for reading, raising OSError on failure."""
        return cls._open(path, "rb")

    @classmethod
    def open_write(cls, path: PathLike) -> "File":
        return cls._open(path, "wb")

    @classmethod
    def open_append(cls, path: PathLike) -> "File":
        return cls._open(path, "ab")

    @classmethod
    def append(cls, path: PathLike, text: Union[str, bytes]) -> None:
        """Append ``text`` to the file at ``path``."""
        with cls.open_append(path) as f:
            f.write(text)

    def __bool__(self) -> bool:
        return self._fh is not None

    def _handle(self) -> BinaryIO:
        if self._fh is None:
            raise ValueError(f"file '{self.name}' is not open")
        return self._fh

    def __iter__(self) -> Iterator[str]:
        if self._fh is None:
            return
        while line := self.read_line():
            yield line

    def read_line(self) -> str:
        """The next newline-terminated line, or "" at end of file.

        Raises ReadError for a line without a newline or longer than 1023 bytes.
        """
        raw = self._handle().readline(_MAX_LINE)
        if not raw:
            return ""
        if not raw.endswith(b"\n"):
            raise ReadError(self.name)
        return raw.decode()

    def write(self, data: Union[str, bytes, bytearray, memoryview]) -> None:
        """Write all of ``data`` (a str is written as UTF-8)."""
        if isinstance(data, str):
            data = data.encode()
        try:
            written = self._handle().write(data)
        except OSError as e:
            raise WriteError(self.name) from e
        if written is not None and written != len(data):
            raise WriteError(self.name)

    def write_checked(self, data: bytes) -> None:
        """Write the CRC32 of ``data`` as a little-endian u32, then ``data``."""
        self.write(zlib.crc32(data).to_bytes(4, "little"))
        self.write(data)

    def _read_exact(self, n_bytes: int) -> bytes:
        data = self._handle().read(n_bytes)
        if len(data) != n_bytes:
            raise ReadError(self.name)
        return data

    def read_checked(self, n_bytes: int) -> bytes:
        """Read a block written by write_checked."""
        crc = int.from_bytes(self._read_exact(4), "little")
        return self.read_with_crc(n_bytes, crc)

    def read_with_crc(self, n_bytes: int, crc: int) -> bytes:
        """Read ``n_bytes`` and check them against ``crc``, raising CRCError on mismatch."""
        data = self._read_exact(n_bytes)
        if zlib.crc32(data) != crc:
            raise CRCError(self.name)
        return data

    def read_all(self) -> bytes:
        """Everything from the current position to the end."""
        return self._read_exact(self.size() - self.tell())

    def size(self) -> int:
        """Current size of the file; the position is left unchanged."""
        saved = self.tell()
        end = self.seek(0, os.SEEK_END)
        self.seek(saved)
        return end

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        try:
            return self._handle().seek(offset, whence)
        except (OSError, ValueError) as e:
            raise ReadError(self.name) from e

    def tell(self) -> int:
        return self._handle().tell()

    def flush(self) -> None:
        self._handle().flush()

    def close(self) -> None:
        """Close the file, syncing written data to disk first."""
        if self._fh is None:
            return
        fh, self._fh = self._fh, None
        try:
            if not self.read_only:
                fh.flush()
                os.fsync(fh.fileno())
        finally:
            fh.close()

    def __enter__(self) -> "File":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __del__(self) -> None:
        try:
            self.close()
        except Exception:
            pass


class CycleFile:
    """Writes to ``<name>.new`` and renames it over ``<name>`` when closed."""

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        self._new_path = self.path.with_name(self.path.name + ".new")
        self._file: File | None = File.open_write(self._new_path)

    def file(self) -> File:
        """The file being written."""
        if self._file is None:
            raise ValueError(f"cycle file '{self.path}' is closed")
        return self._file

    def reset(self) -> None:
        """Close without replacing the target; the ``.new`` file is left behind."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def close(self) -> None:
        """Finish writing and move the new file into place."""
        if self._file is None:
            return
        self.reset()
        os.replace(self._new_path, self.path)

    def __enter__(self) -> "CycleFile":
        return self

    def __exit__(self, *args) -> None:
        self.close()