from math import prod

import pytest

from prpll.primes import Primes


@pytest.fixture(scope="module")
def primes():
    return Primes(10_000)


def test_primes_below_thirty():
    assert Primes(30).primes_from(0) == [2, 3, 5, 7, 11, 13, 17, 19, 23, 29]


def test_count_below_hundred():
    assert len(Primes(100).primes_from(0)) == 25


def test_primes_from_starts_at_bound():
    p = Primes(100)
    result = p.primes_from(50)
    assert all(q >= 50 for q in result)
    assert result == [q for q in p.primes_from(0) if q >= 50]


def test_listed_primes_are_prime_and_coprime(primes):
    listed = primes.primes_from(0)
    assert all(primes.is_prime(q) for q in listed)
    small = listed[:30]
    for i, q in enumerate(small):
        assert all(q % s != 0 for s in small[:i])


def test_is_prime_matches_list(primes):
    listed = set(primes.primes_from(0))
    for n in range(0, 2000):
        assert primes.is_prime(n) == (n in listed)


def test_is_prime_beyond_limit_false():
    p = Primes(20)
    assert p.is_prime(19)
    assert not p.is_prime(23)


def test_factors_small_values(primes):
    assert primes.factors(0) == []
    assert primes.factors(1) == []
    assert primes.factors(1024) == [(2, 10)]
    assert primes.factors(97) == [(97, 1)]


@pytest.mark.parametrize("x", [12, 360, 9999, 2 * 3 * 5 * 7 * 11 * 13, 4096 * 1024, 7919 * 2])
def test_factors_multiply_back(primes, x):
    f = primes.factors(x)
    assert prod(p ** e for p, e in f) == x
    assert all(primes.is_prime(p) for p, _ in f)
    assert [p for p, _ in f] == sorted(p for p, _ in f)


def test_factors_out_of_range_raises():
    with pytest.raises(ValueError):
        Primes(10).factors(11 * 13)
    with pytest.raises(ValueError):
        Primes(10).factors(2 * 13)


@pytest.mark.parametrize("x", [12, 360, 97, 1000, 2 * 3 * 5 * 7])
def test_divisors_properties(primes, x):
    divs = primes.divisors(x)
    assert divs == sorted(set(divs))
    assert 1 not in divs
    assert divs[-1] == x
    assert all(x % d == 0 for d in divs)
    expected_count = prod(e + 1 for _, e in primes.factors(x)) - 1
    assert len(divs) == expected_count


def test_divisors_of_one_empty(primes):
    assert primes.divisors(1) == []


def test_unsorted_divisors_same_set(primes):
    assert sorted(primes.unsorted_divisors(360)) == primes.divisors(360)
    assert primes.unsorted_divisors(360)[0] == 2


def test_zn2_small():
    assert Primes(100).zn2(7) == 3


def test_zn2_is_order_of_two(primes):
    for p in primes.primes_from(3)[:300]:
        d = primes.zn2(p)
        assert (p - 1) % d == 0
        assert pow(2, d, p) == 1
        for q in primes.divisors(d):
            if q != d:
                assert pow(2, q, p) != 1