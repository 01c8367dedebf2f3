"""Incremental Blake2b (first 64-bit word) and SHA3-256 hashing."""

from __future__ import annotations

import hashlib
from typing import Any, Union

Data = Union[bytes, bytearray, memoryview, str]


def _as_bytes(data: Data) -> Union[bytes, bytearray, memoryview]:
    if isinstance(data, str):
        return data.encode()
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"cannot hash {type(data).__name__}; use update_u32/update_u64 for integers")
    return data


class _HashState:
    """Wraps a hashlib object that may be finished only once."""

    def __init__(self, state: Any) -> None:
        self._state = state
        self._finished = False

    def _check(self) -> None:
        if self._finished:
            raise RuntimeError("hash already finished")

    def _feed(self, data: Data) -> None:
        self._check()
        self._state.update(_as_bytes(data))

    def _digest(self) -> bytes:
        self._check()
        self._finished = True
        return self._state.digest()


class Blake2(_HashState):
    """Blake2b whose result is the first 64-bit word of the output, as an int."""

    def __init__(self, n_output_bytes: int = 8) -> None:
        if not 8 <= n_output_bytes <= 64:
            raise ValueError("n_output_bytes must be between 8 and 64")
        super().__init__(hashlib.blake2b(digest_size=n_output_bytes))

    def update(self, data: Data) -> "Blake2":
        """Feed bytes (a str is fed as its UTF-8 bytes)."""
        self._feed(data)
        return self

    def update_u32(self, x: int) -> "Blake2":
        """Feed a 32-bit unsigned integer, little-endian."""
        return self.update(x.to_bytes(4, "little"))

    def update_u64(self, x: int) -> "Blake2":
        """Feed a 64-bit unsigned integer, little-endian."""
        return self.update(x.to_bytes(8, "little"))

    def finish(self) -> int:
        """Return the first 64-bit little-endian word of the digest."""
        return int.from_bytes(self._digest()[:8], "little")

    @classmethod
    def hash(cls, *args: Data) -> int:
        """Hash all arguments in order and return the finished value."""
        h = cls()
        for data in args:
            h.update(data)
        return h.finish()


class Sha3(_HashState):
    """SHA3-256 whose result is four little-endian 64-bit words."""

    def __init__(self) -> None:
        super().__init__(hashlib.sha3_256())

    def update(self, data: Data) -> "Sha3":
        """Feed bytes (a str is fed as its UTF-8 bytes)."""
        self._feed(data)
        return self

    def update_u32(self, x: int) -> "Sha3":
        """Feed a 32-bit unsigned integer, little-endian."""
        return self.update(x.to_bytes(4, "little"))

    def update_u64(self, x: int) -> "Sha3":
        """Feed a 64-bit unsigned integer, little-endian."""
        return self.update(x.to_bytes(8, "little"))

    def finish(self) -> tuple[int, int, int, int]:
        """Return the digest as four little-endian 64-bit words."""
        digest = self._digest()
        return tuple(int.from_bytes(digest[i:i + 8], "little") for i in range(0, 32, 8))

    @classmethod
    def hash(cls, *args: Data) -> tuple[int, int, int, int]:
        """Hash all arguments in order and return the finished value."""
        h = cls()
        for data in args:
            h.update(data)
        return h.finish()