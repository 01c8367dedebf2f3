"""Probability and cost model for P-1 factoring of Mersenne numbers, with a command line front end."""

from __future__ import annotations

import math
import re
import sys

from prpll.dickman import rho

# Relative costs of the P-1 stages.
FACTOR_P1_LEGACY = 1.05
FACTOR_P1_MERGED = 1.12
FACTOR_P2 = 0.72

# Candidate bounds, in millions, tried by scan_bounds().
B1_CHOICES = (0.5, 0.6, 0.7, 0.8, 0.9, 1, 1.1, 1.2, 1.3, 1.5, 1.7, 2, 2.5, 3, 3.5, 4, 4.5, 5,
              6, 7, 8, 9, 10, 12, 15, 20, 25, 30, 40, 50, 100)
B2_CHOICES = (10, 15, 20, 25, 30, 35, 40, 45, 50, 60, 70, 80, 90, 100, 110, 120, 130, 140, 150,
              160, 180, 200, 220, 250, 300, 400, 500, 600, 800, 1000, 2000, 4000)

# Factors larger than this many bits are assumed to contribute nothing.
_BIT_END = 200.0
_SLICE_WIDTH = 0.25 / 2
# log2 of the middle point of a slice [2^n, 2^(n+SLICE_WIDTH)], relative to n.
_SLICE_MIDDLE = math.log2(1 + 2 ** _SLICE_WIDTH) - 1

_NUMBER_PREFIX = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _u32(x: float) -> int:
    return int(x) & 0xFFFFFFFF


def _integral(a: float, b: float, f, steps: int = 31) -> float:
    """Midpoint-rule integral of ``f`` over [a, b]."""
    if b < a:
        raise ValueError("integral bounds out of order")
    if b <= a:
        return 0.0
    step = (b - a) * (1.0 / steps)
    total = 0.0
    x = a + step * 0.5
    while x < b:
        total += f(x)
        x += step
    return total * step


def p_first_stage(alpha: float) -> float:
    """Probability that a number of size B1**alpha is B1-smooth."""
    return rho(alpha)


def p_second_stage(alpha: float, beta: float) -> float:
    """Probability that a number of size B1**alpha is found in stage two with B2 = B1**beta."""
    return _integral(1, beta, lambda x: rho(alpha - x) / x)


def pm1(exponent: float, factored_up_to: float, b1: float, b2: float) -> tuple[float, float]:
    """Probabilities of finding a factor in stage one and in stage two of P-1 on M(exponent).

    ``factored_up_to`` is the bit depth already covered by trial factoring.
    """
    if b2 < b1:
        raise ValueError("B2 must not be below B1")
    take_away_bits = math.log2(exponent) + 1
    bits_b1 = math.log2(b1)
    bits_b2 = math.log2(b2)
    beta = bits_b2 / bits_b1
    if beta < 1:
        raise ValueError("B1 and B2 must exceed 1")

    sum1 = 0.0
    sum2 = 0.0
    bit_pos = factored_up_to + _SLICE_MIDDLE
    alpha = (bit_pos - take_away_bits) / bits_b1
    while bit_pos < _BIT_END:
        slice_prob = _SLICE_WIDTH / bit_pos
        p1 = p_first_stage(alpha) * slice_prob
        # Probability union of independent events, accumulated incrementally.
        sum1 += p1 - p1 * sum1
        p12 = p1 + p_second_stage(alpha, beta) * slice_prob
        sum2 += p12 - p12 * sum2
        bit_pos += _SLICE_WIDTH
        alpha += _SLICE_WIDTH / bits_b1
    return sum1, sum2 - sum1


def pm1_total(exponent: float, factored_up_to: float, b1: float, b2: float) -> float:
    """Probability that P-1 with bounds (b1, b2) finds a factor."""
    p1, p2 = pm1(exponent, factored_up_to, b1, b2)
    return p1 + p2


def primepi(n: float) -> float:
    """Approximate count of primes up to ``n``."""
    return n / (math.log(n) - 1.06) if n > 0 else 0.0


def n_primes_between(b1: float, b2: float) -> float:
    """Approximate count of primes in (b1, b2]."""
    return 0.0 if b2 <= b1 else primepi(b2) - primepi(b1)


def work(exponent: float, factored: float, b1: float, b2: float,
         factor_bias: float = 1.0, legacy_p1: bool = False) -> float:
    """Expected total work, in iterations, of P-1 followed by a PRP test if no factor is found."""
    factor_p1 = FACTOR_P1_LEGACY if legacy_p1 else FACTOR_P1_MERGED
    p1, p2 = pm1(exponent, factored, b1, b2)
    iterations_p1 = 1.442 * b1
    work_p1 = iterations_p1 * factor_p1
    work_p2 = FACTOR_P2 * n_primes_between(b1, b2)
    bonus = (factor_bias - 1) * exponent
    work_after_p1 = p2 * (work_p2 / 2) + (1 - p2) * (
        work_p2 + exponent + bonus - (0 if legacy_p1 else iterations_p1))
    return work_p1 + (1 - p1) * work_after_p1


def stage_work(exponent: float, factored: float, b1: float, b2: float,
               legacy_p1: bool = False) -> tuple[float, float]:
    """Work of stage one and stage two, as fractions of one PRP test."""
    factor_p1 = FACTOR_P1_LEGACY if legacy_p1 else FACTOR_P1_MERGED - 1
    p1, p2 = pm1(exponent, factored, b1, b2)
    work_p1 = 1.442 * b1 * factor_p1
    full_work_p2 = FACTOR_P2 * n_primes_between(b1, b2)
    work_p2 = (1 - p1) * (1 - p2 / 2) * full_work_p2
    return work_p1 / exponent, work_p2 / exponent


def scan_bounds(exponent: float, factored: float, factor_bias: float = 1.0,
                fixed_b1: int = 0, fixed_b2: int = 0,
                use_legacy_p1: bool = False) -> tuple[int, int]:
    """The candidate (B1, B2) pair of least expected work; a fixed bound of 0 means free."""
    b1s = [fixed_b1] if fixed_b1 else [b * 1_000_000 for b in B1_CHOICES]
    b2s = [fixed_b2] if fixed_b2 else [b * 1_000_000 for b in B2_CHOICES]
    best = 1e20
    best_b1 = best_b2 = 0
    for b2 in map(_u32, b2s):
        for b1 in map(_u32, b1s):
            if b1 > b2:
                continue
            w = work(exponent, factored, b1, b2, factor_bias, use_legacy_p1)
            if w < best:
                best, best_b1, best_b2 = w, b1, b2
    return best_b1, best_b2


def parse_magnitude(s: str) -> float:
    """Parse a number with an optional K, M or G (decimal) suffix, e.g. ``100M``."""
    if not s:
        raise ValueError("empty number")
    last = s[-1]
    if last in "Gg":
        multiple = 1_000_000_000.0
    elif last in "Mm":
        multiple = 1_000_000.0
    elif last in "Kk":
        multiple = 1000.0
    else:
        multiple = 1.0
    match = _NUMBER_PREFIX.match(s)
    value = float(match.group()) if match else 0.0
    return value * multiple


def format_bounds(exponent: float, factored: float, b1: float, b2: float,
                  use_legacy_p1: bool = False) -> str:
    """One report line with probabilities, work and the share of B2-smooth factors missed."""
    p1, p2 = pm1(exponent, factored, b1, b2)
    p3, _ = pm1(exponent, factored, b2, b2)
    p = p1 + p2
    w1, w2 = stage_work(exponent, factored, b1, b2, use_legacy_p1)
    return ("B1=%4.1fM B2=%3.0fM | %.3f%% (%.3f%% + %.3f%%) | work %.3f%% (%.3f%% + %.3f%%) "
            "| B2/B1=%2.0f, misses %.2f%% of B2-smooth factors") % (
        b1 / 1_000_000, b2 / 1_000_000, p * 100, p1 * 100, p2 * 100,
        (w1 + w2) * 100, w1 * 100, w2 * 100, b2 / b1, (p3 - p) / p3 * 100)


def format_simple_b2(exponent: float, factored: float, b1: float, b2: float) -> str:
    """Report line weighing the gain of a slightly larger B2 against its cost."""
    in_m = 1.0 / 1_000_000
    p1, p2 = pm1(exponent, factored, b1, b2)
    p = p1 + p2
    b2u = b2 * 0.97
    b2o = b2 * 1.03
    dp = pm1_total(exponent, factored, b1, b2o) - pm1_total(exponent, factored, b1, b2u)
    cost = (b2o - b2u) * 0.001 * 1.442
    benefit = dp * exponent * 1.3
    gain = benefit - cost
    return "B1=%4.1fM B2=%4.0fM | %.3f%% (%.3f%% + %.3f%%) | gain=%+8.0f (%7.0f - %7.0f) | %f%%" % (
        b1 * in_m, b2 * in_m, p * 100, p1 * 100, p2 * 100, gain, benefit, cost, dp * 100)


def format_simple(exponent: float, factored: float, b1: float, b2: float, full_p: float) -> str:
    """Report line weighing the gain of a slightly larger B1 against its cost."""
    in_m = 1.0 / 1_000_000
    p1, p2 = pm1(exponent, factored, b1, b2)
    p = p1 + p2
    b1u = b1 * 0.97
    b1o = b1 * 1.03
    dp = pm1_total(exponent, factored, b1o, b2) - pm1_total(exponent, factored, b1u, b2)
    cost = (b1o - b1u) * 1.442
    benefit = dp * exponent * 1.3
    gain = benefit - cost
    return ("B1=%4.1fM B2=%4.0fM | %.3f%% (%.3f%% + %.3f%%) | Detects %.1f%% of B2-smooth "
            "| gain=%+8.0f (%7.0f - %7.0f) | %f%%") % (
        b1 * in_m, b2 * in_m, p * 100, p1 * 100, p2 * 100, p / full_p * 100,
        gain, benefit, cost, dp * 100)


_USAGE = """Usage: {0} <exponent> <factoredTo> [-legacy] [-B1 <B1>] [-B2 <B2>] [-bias <factor-bias>]
Examples:
{0} 100M 76
{0} 105M 76 -legacy
{0} 102M 76 -B2 100M
{0} 102M 77 -B1 3M"""


def main(argv: list[str] | None = None) -> int:
    """Print P-1 probability tables for the bounds given on the command line."""
    if argv is None:
        argv = sys.argv[1:]
    if len(argv) < 2:
        print(_USAGE.format("pm1"))
        return 1

    exponent = _u32(parse_magnitude(argv[0]))
    factored = _u32(parse_magnitude(argv[1]))
    b1 = b2 = 0

    pos = 2
    while pos < len(argv):
        if argv[pos] == "-legacy":
            pos += 1
        elif pos + 1 < len(argv):
            key, val = argv[pos], argv[pos + 1]
            if key == "-B1":
                b1 = _u32(parse_magnitude(val))
            elif key == "-B2":
                b2 = _u32(parse_magnitude(val))
            elif key == "-bias":
                if parse_magnitude(val.rstrip("GgMmKk") or val) <= 0:
                    print(f"Invalid bias '{val}'")
                    return 2
            pos += 2
        else:
            print(f"Unrecognized '{argv[pos]}'")
            return 2

    print(" ".join(argv))

    if b1 and b2:
        full = pm1(exponent, factored, b2, b2)[0]
        print(format_simple(exponent, factored, b1, b2, full))
    elif b2:
        full = pm1(exponent, factored, b2, b2)[0]
        mult = 100_000.0
        while True:
            for s in range(1, 10):
                low = s * mult
                if low * 10 > b2 or low > 30_000_000:
                    return 0
                print(format_simple(exponent, factored, low, b2, full))
            mult *= 10
    elif b1:
        mult = 100_000_000.0
        while True:
            for s in range(1, 10):
                high = s * mult
                if high > 1e10:
                    return 0
                print(format_simple_b2(exponent, factored, b1, high))
            mult *= 10
    else:
        print("One of -B1 or -B2 is required")
        return 2
    return 0