# prpll

A pure-Python toolkit for work on Mersenne numbers (2^p - 1): estimating
the odds and cost of P-1 factoring, choosing FFT shapes for a given
exponent, small-prime arithmetic, hashing, and checked binary file I/O.
It has no dependencies outside the standard library.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Command line: P-1 bounds

`prpll-pm1` estimates the probability that P-1 with bounds B1/B2 finds a
factor of M(exponent), for an exponent already trial-factored to
`factoredTo` bits, and prints the trade-off around the chosen bounds.

```
prpll-pm1 <exponent> <factoredTo> [-legacy] [-B1 <B1>] [-B2 <B2>] [-bias <factor-bias>]
```

Numbers accept a `K`, `M` or `G` suffix (powers of ten). Examples:

```
prpll-pm1 102M 76 -B2 100M
prpll-pm1 102M 77 -B1 3M
prpll-pm1 102M 77 -B1 3M -B2 100M
```

- With both `-B1` and `-B2`, one line is printed for that pair.
- With only `-B2`, B1 is scanned from 100K upwards (1, 2, ... 9 times each
  power of ten) while B1 is at most B2/10 and at most 30M.
- With only `-B1`, B2 is scanned from 100M up to 10G.
- With neither, an error is printed and the exit status is 2.

`-legacy` is accepted and ignored; `-bias` must be positive. Run with
fewer than two arguments to see the usage text (exit status 1).

## Library overview

### `prpll.pm1` and `prpll.dickman`

- `rho(x)` – Dickman's rho function, by linear interpolation in a table
  covering arguments below 25; larger arguments raise `ValueError`.
- `pm1(exponent, factored_up_to, b1, b2)` – probabilities of success in
  the first and in the second stage.
- `pm1_total(...)`, `work(...)`, `stage_work(...)`, `scan_bounds(...)` –
  total probability, expected work, per-stage work as a fraction of one
  PRP test, and a search over candidate bounds for the least work.
- `p_first_stage(alpha)`, `p_second_stage(alpha, beta)` – the per-stage
  smoothness probabilities.
- `primepi(n)`, `n_primes_between(b1, b2)` – prime-count approximations.
- `parse_magnitude("3M")` – parse a number with a K/M/G suffix.
- `format_bounds`, `format_simple`, `format_simple_b2` – the report lines
  as strings.

```python
from prpll.pm1 import pm1, scan_bounds

p1, p2 = pm1(100_000_000, 76, 1_000_000, 30_000_000)
b1, b2 = scan_bounds(100_000_000, 76, 1.0, 0, 0, False)
```

### `prpll.primes`

`Primes(limit)` sieves the primes below `limit` and offers `is_prime`,
`factors`, `divisors` and `unsorted_divisors` (divisors greater than 1),
`primes_from` and `zn2` (the multiplicative order of 2 modulo a prime).
`factors` raises `ValueError` when a cofactor lies beyond the sieve.

```python
from prpll.primes import Primes

primes = Primes(1_000_000)
primes.factors(360)     # [(2, 3), (3, 2), (5, 1)]
primes.zn2(23)          # 11
```

### `prpll.fftconfig`

`FFTShape` and `FFTConfig` describe FFT layouts written as
`width:middle:height` (e.g. `1K:13:256`), with per-variant bits-per-word
limits from a measured table. `FFTShape.multi_spec("6M-7M,1K:13:256")`
expands size ranges and lists; `FFTConfig.from_spec("1K:13:256:3").max_exp()`
gives the largest exponent a configuration handles. `CarryKind` selects
32-bit, 64-bit or automatic carries, and `number_k` / `parse_int` format
and parse sizes with K/M (power-of-two) suffixes. Bad specs raise
`FFTSpecError`.

### `prpll.hashing`

`Blake2` (Blake2b, result is the first 64-bit word) and `Sha3` (SHA3-256
as four 64-bit words) with `update`, `update_u32`, `update_u64`,
`finish`, and a one-shot `hash(*args)` class method. A hash can be
finished only once.

### `prpll.files`

`File` wraps binary files with line iteration, CRC32-checked blocks
(`write_checked`, `read_checked`, `read_with_crc`), and raises
`ReadError`, `WriteError` or `CRCError` on failure. Written files are
synced to disk on close. `File.open_read` returns a false `File` when
the file cannot be opened. `CycleFile` writes to `<name>.new` and
renames it over `<name>` on close, unless `reset()` was called.
`file_size(path)` returns -1 for a missing file.

### Smaller pieces

- `prpll.background.Background` – a bounded task queue run on one worker
  thread; exceptions from tasks are logged.
- `prpll.wordpos` – `bitpos_to_word` and `word_to_bitpos` for mapping
  between bit positions and FFT words.

## What this package does not do

It does not run PRP or LL tests, or any GPU computation; the FFT classes
only describe shapes and their limits. It has no allocation budget
tracker and no parser for command-line options or configuration files of
a testing run. The only command is `prpll-pm1`.