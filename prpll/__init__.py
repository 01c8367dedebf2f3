"""Mersenne-number tools: P-1 estimation, FFT shapes, primes, hashing and checked file I/O."""

__version__ = "0.1.0"