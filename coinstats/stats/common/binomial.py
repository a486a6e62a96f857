"""
coinstats.stats.common.binomial
===============================

Exact binomial statistics for the fair-coin test.

Provides the mathematical building blocks used by every other layer:

- `combinations`: n choose k, computed incrementally in floating point
- `binomial_pmf`: probability of exactly k successes in n trials
- `find_critical_value`: upper-tail threshold of a two-tailed test
- `calculate_p_value`: exact two-tailed p-value under p = 0.5

These functions never raise. Out-of-range counts return 0 and a critical
value search that never crosses the threshold returns ``n + 1``.

Examples
--------
>>> combinations(5, 2)
10.0
>>> find_critical_value(10, 0.5, 0.05)
9
>>> calculate_p_value(10, 10)
0.001953125
>>> calculate_p_value(10, 5)
1.0
"""

from __future__ import annotations
import math
from typing import Tuple


def combinations(n: int, k: int) -> float:
    """Return n choose k.

    The product is built as ``res * (n - i + 1) / i`` in floating point,
    so large inputs carry rounding error rather than exact integers.

    Args:
        n: Number of trials (n >= 0)
        k: Number of successes (any integer)

    Returns:
        0 when k is outside [0, n], 1 at the edges, otherwise the coefficient
    """
    if k < 0 or k > n:
        return 0
    if k == 0 or k == n:
        return 1
    if k > n / 2:
        k = n - k
    res = 1.0
    for i in range(1, k + 1):
        res = res * (n - i + 1) / i
    return res


def binomial_pmf(k: int, n: int, p: float) -> float:
    """Probability of exactly k successes in n Bernoulli(p) trials."""
    coef = combinations(n, k)
    if coef == 0:
        # k outside [0, n]; also keeps 0 ** negative from raising
        return 0
    return coef * math.pow(p, k) * math.pow(1 - p, n - k)


def find_critical_value(n: int, p: float, alpha: float) -> int:
    """Find the upper critical count of a two-tailed binomial test.

    Walks k from n downward accumulating the tail mass. The first k at which
    the tail sum exceeds alpha / 2 is no longer in the rejection region, so
    the critical value is ``k + 1``.

    Args:
        n: Number of trials
        p: Success probability under the null hypothesis
        alpha: Two-sided significance level

    Returns:
        Smallest count in the upper rejection region, or ``n + 1`` when the
        tail mass never exceeds alpha / 2
    """
    upper_tail_alpha = alpha / 2
    prob_sum = 0.0
    for k in range(n, -1, -1):
        prob_sum += binomial_pmf(k, n, p)
        if prob_sum > upper_tail_alpha:
            return k + 1
    return n + 1


def calculate_p_value(n: int, k: int) -> float:
    """Exact two-tailed p-value for k heads in n flips of a fair coin.

    The p = 0.5 binomial is symmetric around n / 2, so the two-tailed mass
    is twice the upper tail at least as far from n / 2 as k. The result is
    capped at 1 because the central bin is counted in both tails.

    Args:
        n: Number of flips
        k: Observed number of heads

    Returns:
        p-value in [0, 1]; 0 when k is outside [0, n]
    """
    if k < 0 or k > n:
        return 0

    expected = n / 2
    distance = abs(k - expected)
    k_high = math.ceil(expected + distance)

    prob_high = 0.0
    for i in range(k_high, n + 1):
        prob_high += binomial_pmf(i, n, 0.5)

    return min(1.0, 2 * prob_high)


def critical_region(n: int, alpha: float, p: float = 0.5) -> Tuple[int, int]:
    """Return ``(lower, upper)`` bounds of the symmetric two-tailed region.

    Counts ``<= lower`` or ``>= upper`` reject the null hypothesis. The lower
    bound mirrors the upper one, which is exact for p = 0.5.

    >>> critical_region(10, 0.05)
    (1, 9)
    """
    upper = find_critical_value(n, p, alpha)
    return n - upper, upper


def in_critical_region(n: int, k: int, alpha: float, p: float = 0.5) -> bool:
    """Whether k heads out of n fall in the two-tailed rejection region."""
    lower, upper = critical_region(n, alpha, p)
    return k <= lower or k >= upper
