"""CPU-bound workloads that make up one work unit.

Every function is stateless. Callers that run workloads on several threads
pass each thread its own ``random.Random`` so no random state is shared.
"""

import math
import random

from cpubench.domain.models import WorkloadParams

_INT64_MASK = (1 << 64) - 1
_INT64_SIGN = 1 << 63


def _wrap_int64(value: int) -> int:
    """Reduce *value* to a signed 64-bit integer, wrapping on overflow."""
    value &= _INT64_MASK
    return value - (1 << 64) if value & _INT64_SIGN else value


def fibonacci(n: int) -> int:
    """Return the n-th Fibonacci number with 64-bit accumulators.

    Integer throughput test. Iterative, so the stack stays flat for large n.
    """
    if n <= 1:
        return n

    a, b = 0, 1
    result = 0
    for _ in range(2, n + 1):
        result = _wrap_int64(a + b)
        a = b
        b = result
    return result


def matrix_multiply(size: int, rng: random.Random | None = None) -> list[float]:
    """Multiply two random ``size x size`` matrices with the naive triple loop.

    Floating-point and memory-access test. Matrices are row-major flat lists.
    """
    rand = (rng or random).random
    n = size * size
    a = [rand() for _ in range(n)]
    b = [rand() for _ in range(n)]
    result = [0.0] * n

    for i in range(size):
        row = i * size
        for j in range(size):
            total = 0.0
            for k in range(size):
                total += a[row + k] * b[k * size + j]
            result[row + j] = total

    return result


def monte_carlo_pi(iterations: int, rng: random.Random | None = None) -> float:
    """Estimate pi from random points in the unit square."""
    if iterations <= 0:
        return 0.0

    rand = (rng or random).random
    inside = 0
    for _ in range(iterations):
        x = rand()
        y = rand()
        if x * x + y * y <= 1.0:
            inside += 1

    return (inside / iterations) * 4.0


def count_primes(limit: int) -> int:
    """Count primes in ``2..limit`` by trial division up to the square root."""
    count = 0
    for n in range(2, limit + 1):
        is_prime = True
        for d in range(2, math.isqrt(n) + 1):
            if n % d == 0:
                is_prime = False
                break
        if is_prime:
            count += 1
    return count


def run_work_unit(params: WorkloadParams, rng: random.Random | None = None) -> None:
    """Run one work unit: all four workloads, in this order."""
    fibonacci(params.fibonacci_n)
    matrix_multiply(params.matrix_size, rng)
    monte_carlo_pi(params.monte_carlo_iterations, rng)
    count_primes(params.prime_limit)
