"""Dickman's rho function, by linear interpolation in a precomputed table."""

from __future__ import annotations

import math
from decimal import Decimal, localcontext
from functools import reduce
from typing import Sequence

_STEPS_PER_UNIT = 40
_TABLE_START = 2
_TABLE_END = 25  # exclusive: the table covers [2, 25) in steps of 1/40
_TERMS = 100
_PRECISION = 60


def _evaluate(coeffs: Sequence[Decimal], v: Decimal) -> Decimal:
    """Evaluate a power series at ``v`` by Horner's rule."""
    return reduce(lambda acc, c: acc * v + c, reversed(coeffs), Decimal(0))


def _build_table() -> tuple[float, ...]:
    """Tabulate rho on [2, 25) by solving x*rho'(x) = -rho(x-1) interval by interval.

    On each unit interval [k, k+1] rho is a power series in v = x - (k + 1/2).
    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        half = Decimal("0.5")
        centre = Decimal("1.5")
        # rho(x) = 1 - ln(x) on [1, 2], expanded around x = 1.5.
        coeffs = [1 - centre.ln()] + [
            Decimal((-1) ** i) / (i * centre ** i) for i in range(1, _TERMS)
        ]
        table: list[float] = []
        for k in range(_TABLE_START, _TABLE_END):
            c = k + half
            rho_k = _evaluate(coeffs, half)
            new = [Decimal(0)]
            for i, a in enumerate(coeffs[:-1]):
                new.append(-(a + i * new[i]) / (c * (i + 1)))
            new[0] = rho_k - _evaluate(new, -half)
            coeffs = new
            table.extend(
                float(_evaluate(coeffs, Decimal(j) / _STEPS_PER_UNIT - half))
                for j in range(_STEPS_PER_UNIT)
            )
        return tuple(table)


_RHO_TABLE = _build_table()


def rho(x: float) -> float:
    """Dickman's rho function; rho(x) is the probability that n is n**(1/x)-smooth.

    Raises ValueError when ``x`` lies beyond the end of the table.
    """
    if x <= 1:
        return 1.0
    if x < 2:
        return 1 - math.log(x)
    scaled = (x - 2) * _STEPS_PER_UNIT
    pos = int(scaled)
    if pos + 1 >= len(_RHO_TABLE):
        raise ValueError(f"rho({x}) is beyond the range of the table")
    frac, _ = math.modf(scaled)
    return _RHO_TABLE[pos] * (1 - frac) + _RHO_TABLE[pos + 1] * frac