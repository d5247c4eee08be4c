"""Tests for the CPU workloads."""

import math
import random

import pytest

from cpubench.domain.models import WorkloadParams
from cpubench.engine import workloads
from cpubench.engine.workloads import (
    count_primes,
    fibonacci,
    matrix_multiply,
    monte_carlo_pi,
    run_work_unit,
)

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


class TestFibonacci:
    @pytest.mark.parametrize(("n", "expected"), [(0, 0), (1, 1), (2, 1), (10, 55), (50, 12586269025)])
    def test_known_values(self, n: int, expected: int) -> None:
        assert fibonacci(n) == expected

    def test_degenerate_input_returned_as_is(self) -> None:
        assert fibonacci(-3) == -3

    def test_largest_value_that_fits_in_64_bits(self) -> None:
        assert fibonacci(92) == 7540113804746346429

    def test_wraps_like_a_64_bit_integer(self) -> None:
        # F(93) = 12200160415121876738 overflows a signed 64-bit accumulator.
        assert fibonacci(93) == 12200160415121876738 - (1 << 64)

    def test_benchmark_index_stays_in_range(self) -> None:
        value = fibonacci(10000)
        assert INT64_MIN <= value <= INT64_MAX
        assert fibonacci(10000) == value


class TestMatrixMultiply:
    def test_matches_manual_product(self) -> None:
        size = 3
        result = matrix_multiply(size, random.Random(7))

        rng = random.Random(7)
        a = [rng.random() for _ in range(size * size)]
        b = [rng.random() for _ in range(size * size)]
        for i in range(size):
            for j in range(size):
                expected = sum(a[i * size + k] * b[k * size + j] for k in range(size))
                assert result[i * size + j] == pytest.approx(expected)

    def test_shape_and_range(self) -> None:
        size = 4
        result = matrix_multiply(size, random.Random(1))
        assert len(result) == size * size
        assert all(0.0 <= v < size for v in result)

    def test_empty_matrix(self) -> None:
        assert matrix_multiply(0) == []


class TestMonteCarloPi:
    def test_estimate_close_to_pi(self) -> None:
        estimate = monte_carlo_pi(50000, random.Random(42))
        assert abs(estimate - math.pi) < 0.05

    def test_estimate_bounds(self) -> None:
        estimate = monte_carlo_pi(10, random.Random(3))
        assert 0.0 <= estimate <= 4.0

    def test_no_iterations(self) -> None:
        assert monte_carlo_pi(0) == 0.0

    def test_seeded_runs_repeat(self) -> None:
        assert monte_carlo_pi(1000, random.Random(5)) == monte_carlo_pi(1000, random.Random(5))


class TestCountPrimes:
    @pytest.mark.parametrize(
        ("limit", "expected"),
        [(0, 0), (1, 0), (2, 1), (3, 2), (10, 4), (100, 25), (1000, 168)],
    )
    def test_known_counts(self, limit: int, expected: int) -> None:
        assert count_primes(limit) == expected

    def test_benchmark_limit(self) -> None:
        assert count_primes(100000) == 9592


class TestRunWorkUnit:
    def test_calls_workloads_in_fixed_order(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[tuple[str, int]] = []
        monkeypatch.setattr(workloads, "fibonacci", lambda n: calls.append(("fibonacci", n)))
        monkeypatch.setattr(
            workloads, "matrix_multiply", lambda size, rng=None: calls.append(("matrix", size))
        )
        monkeypatch.setattr(
            workloads,
            "monte_carlo_pi",
            lambda iterations, rng=None: calls.append(("monte_carlo", iterations)),
        )
        monkeypatch.setattr(workloads, "count_primes", lambda limit: calls.append(("primes", limit)))

        run_work_unit(WorkloadParams())

        assert calls == [
            ("fibonacci", 10000),
            ("matrix", 100),
            ("monte_carlo", 50000),
            ("primes", 100000),
        ]

    def test_tiny_unit_runs(self, tiny_params: WorkloadParams) -> None:
        assert run_work_unit(tiny_params, random.Random(0)) is None

    @pytest.mark.slow
    def test_full_unit_runs(self) -> None:
        run_work_unit(WorkloadParams(), random.Random(0))
