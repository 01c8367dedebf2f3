import pytest

from prpll.pm1 import (
    B1_CHOICES,
    format_bounds,
    format_simple,
    main,
    n_primes_between,
    p_first_stage,
    p_second_stage,
    parse_magnitude,
    pm1,
    pm1_total,
    primepi,
    scan_bounds,
    stage_work,
    work,
)

E = 100_000_000
TF = 76


def test_parse_magnitude_suffixes():
    assert parse_magnitude("100M") == 100_000_000
    assert parse_magnitude("3m") == 3_000_000
    assert parse_magnitude("2k") == 2000
    assert parse_magnitude("1.5G") == 1_500_000_000
    assert parse_magnitude("76") == 76


def test_parse_magnitude_empty():
    with pytest.raises(ValueError):
        parse_magnitude("")


def test_first_stage_small_alpha_is_certain():
    assert p_first_stage(0.5) == 1.0


def test_second_stage_empty_range():
    assert p_second_stage(5.0, 1.0) == 0.0


def test_pm1_probabilities_are_valid():
    p1, p2 = pm1(E, TF, 1_000_000, 30_000_000)
    assert 0 < p1 < 1
    assert 0 < p2 < 1
    assert p1 + p2 < 1


def test_pm1_equal_bounds_has_no_second_stage():
    _, p2 = pm1(E, TF, 30_000_000, 30_000_000)
    assert p2 == 0


def test_pm1_rejects_b2_below_b1():
    with pytest.raises(ValueError):
        pm1(E, TF, 2_000_000, 1_000_000)


def test_total_is_sum_and_grows_with_b2():
    p1, p2 = pm1(E, TF, 1_000_000, 30_000_000)
    assert pm1_total(E, TF, 1_000_000, 30_000_000) == pytest.approx(p1 + p2)
    assert pm1_total(E, TF, 1_000_000, 60_000_000) > pm1_total(E, TF, 1_000_000, 30_000_000)


def test_deeper_trial_factoring_lowers_probability():
    assert pm1_total(E, TF + 2, 1_000_000, 30_000_000) < pm1_total(E, TF, 1_000_000, 30_000_000)


def test_prime_counts():
    assert primepi(0) == 0
    assert primepi(-5) == 0
    assert n_primes_between(10, 10) == 0
    assert n_primes_between(20, 10) == 0
    assert n_primes_between(1e6, 2e6) == pytest.approx(primepi(2e6) - primepi(1e6))


def test_stage_work_positive_and_legacy_costs_more():
    w1, w2 = stage_work(E, TF, 1_000_000, 30_000_000)
    assert w1 > 0 and w2 > 0
    l1, l2 = stage_work(E, TF, 1_000_000, 30_000_000, True)
    assert l1 > w1
    assert l2 == pytest.approx(w2)


def test_work_bias_increases_work():
    assert work(E, TF, 1_000_000, 30_000_000, 2.0) > work(E, TF, 1_000_000, 30_000_000, 1.0)


def test_scan_bounds_fixed_both():
    assert scan_bounds(E, TF, 1.0, 2_000_000, 50_000_000) == (2_000_000, 50_000_000)


def test_scan_bounds_picks_minimal_work():
    b2 = 30_000_000
    best_b1, best_b2 = scan_bounds(E, TF, 1.0, 0, b2)
    assert best_b2 == b2
    candidates = [int(b * 1_000_000) for b in B1_CHOICES if b * 1_000_000 <= b2]
    assert best_b1 in candidates
    best_work = work(E, TF, best_b1, b2, 1.0, False)
    for b in candidates[::5]:
        assert best_work <= work(E, TF, b, b2, 1.0, False)


def test_format_bounds_header():
    line = format_bounds(E, TF, 1_000_000, 30_000_000)
    assert line.startswith("B1= 1.0M B2= 30M | ")
    assert "B2/B1=30" in line


def test_main_usage():
    assert main([]) == 1
    assert main(["100M"]) == 1


def test_main_unrecognized(capsys):
    assert main(["100M", "76", "-B1"]) == 2
    assert "Unrecognized '-B1'" in capsys.readouterr().out


def test_main_both_bounds(capsys):
    assert main(["100M", "76", "-B1", "1M", "-B2", "30M"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "100M 76 -B1 1M -B2 30M"
    full = pm1(E, TF, 30_000_000, 30_000_000)[0]
    assert lines[1] == format_simple(E, TF, 1_000_000, 30_000_000, full)


def test_main_b2_only(capsys):
    assert main(["100M", "76", "-B2", "2M"]) == 0
    lines = capsys.readouterr().out.splitlines()
    full = pm1(E, TF, 2_000_000, 2_000_000)[0]
    assert lines[1:] == [
        format_simple(E, TF, 100_000, 2_000_000, full),
        format_simple(E, TF, 200_000, 2_000_000, full),
    ]