"""Mapping between bit positions and FFT word indices for an exponent E over N words."""


def bitpos_to_word(e: int, n: int, offset: int) -> int:
    """Index of the word holding bit ``offset``."""
    return offset * n // e


def word_to_bitpos(e: int, n: int, word: int) -> int:
    """Bit position at which ``word`` starts."""
    return (word * e + (n - 1)) // n