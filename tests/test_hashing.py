import struct

import pytest

from prpll.hashing import Blake2, Sha3


def words(hex_digest):
    return struct.unpack("<4Q", bytes.fromhex(hex_digest))


def test_sha3_abc():
    expected = words("3a985da74fe225b2045c172d6bd390bd855f086e3e9d525b46bfe24511431532")
    assert Sha3.hash(b"abc") == expected


def test_sha3_empty():
    expected = words("a7ffc6f8bf1ed76651c14756a061d662f580ff4de43b49fa82d80a4b80f8434a")
    assert Sha3().finish() == expected


def test_blake2_abc_first_word():
    expected = int.from_bytes(bytes.fromhex("ba80a53f981c4d0d"), "little")
    assert Blake2(64).update(b"abc").finish() == expected


@pytest.mark.parametrize("cls", [Blake2, Sha3])
def test_incremental_matches_one_shot(cls):
    data = bytes(range(256)) * 3
    h = cls()
    for i in range(0, len(data), 37):
        h.update(data[i:i + 37])
    assert h.finish() == cls.hash(data)


@pytest.mark.parametrize("cls", [Blake2, Sha3])
def test_integers_are_little_endian(cls):
    a = cls().update_u32(0x01020304).update_u64(5).finish()
    assert a == cls.hash(b"\x04\x03\x02\x01", b"\x05" + bytes(7))


@pytest.mark.parametrize("cls", [Blake2, Sha3])
def test_str_hashed_as_utf8(cls):
    assert cls.hash("prp") == cls.hash(b"prp")


@pytest.mark.parametrize("cls", [Blake2, Sha3])
def test_block_boundary_inputs_differ(cls):
    results = {cls.hash(bytes(n)) for n in (127, 128, 129)}
    assert len(results) == 3


def test_blake2_result_is_u64():
    value = Blake2.hash(b"hello")
    assert 0 <= value < 2 ** 64


def test_blake2_output_size_changes_result():
    assert Blake2(8).update(b"x").finish() != Blake2(16).update(b"x").finish()


@pytest.mark.parametrize("cls", [Blake2, Sha3])
def test_finish_twice_raises(cls):
    h = cls()
    h.finish()
    with pytest.raises(RuntimeError):
        h.finish()
    with pytest.raises(RuntimeError):
        h.update(b"more")


def test_integer_data_rejected():
    with pytest.raises(TypeError):
        Blake2().update(5)


def test_invalid_blake2_size():
    with pytest.raises(ValueError):
        Blake2(4)