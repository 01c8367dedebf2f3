"""Small-prime sieve with factoring, divisors and the multiplicative order of 2."""

from __future__ import annotations

from bisect import bisect_left
from itertools import product
from math import prod


class Primes:
    """Primes below ``limit``, found with a sieve over the odd numbers."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        half = limit // 2
        # _odd_map[i] tells whether 2*i + 1 is prime.
        sieve = bytearray([1]) * half
        if half:
            sieve[0] = 0
        for i in range(1, half):
            if not sieve[i]:
                continue
            start = 2 * i * (i + 1)
            if start >= half:
                break
            step = 2 * i + 1
            sieve[start::step] = bytes(len(range(start, half, step)))
        self._odd_map = sieve
        self._primes = [2] + [2 * i + 1 for i, flag in enumerate(sieve) if flag]

    def is_prime(self, x: int) -> bool:
        """Whether ``x`` is a prime known to the sieve."""
        if x == 2:
            return True
        if not (x & 1) or x > self.limit:
            return False
        index = (x - 1) >> 1
        return index < len(self._odd_map) and bool(self._odd_map[index])

    def primes_from(self, p: int) -> list[int]:
        """All sieved primes that are at least ``p``, in increasing order."""
        return self._primes[bisect_left(self._primes, p):]

    def factors(self, x: int) -> list[tuple[int, int]]:
        """Prime factorisation of ``x`` as (prime, exponent) pairs.

        Raises ValueError when ``x`` has a prime factor the sieve cannot reach.
        """
        if x <= 1:
            return []
        if self.is_prime(x):
            return [(x, 1)]
        result: list[tuple[int, int]] = []
        for p in self._primes:
            n = 0
            while x % p == 0:
                x //= p
                n += 1
            if n:
                result.append((p, n))
                if self.is_prime(x):
                    result.append((x, 1))
                    return result
                if x == 1:
                    return result
        raise ValueError(f"cannot factor: cofactor {x} is beyond the sieve limit {self.limit}")

    def unsorted_divisors(self, x: int) -> list[int]:
        """Divisors of ``x`` greater than 1, with the smallest prime's exponent varying fastest."""
        f = self.factors(x)
        ranges = [range(e + 1) for _, e in reversed(f)]
        divisors = []
        for counts in product(*ranges):
            if not any(counts):
                continue
            divisors.append(prod(p ** c for (p, _), c in zip(reversed(f), counts)))
        return divisors

    def divisors(self, x: int) -> list[int]:
        """Divisors of ``x`` greater than 1, sorted ascending."""
        return sorted(self.unsorted_divisors(x))

    def zn2(self, p: int) -> int:
        """Multiplicative order of 2 modulo the prime ``p``."""
        d = p - 1
        r = d

        def step(k: int) -> None:
            nonlocal d, r
            if k <= 1:
                return
            while r % k == 0 and d != k and pow(2, d // k, p) == 1:
                d //= k
                r //= k
            while r % k == 0:
                r //= k

        for k in (2, 3, 5, 7, 11, 13):
            step(k)

        for f in self.primes_from(17):
            if r == 1:
                return d
            if self.is_prime(r):
                break
            step(f)

        step(r)
        return d