"""
coinstats.stats.common.approximation
====================================

Normal (z) approximation of the binomial coin test.

The exact test in `coinstats.stats.common.binomial` is what decisions are
based on; these functions give the textbook large-sample counterpart so the
two can be compared side by side.
"""

from __future__ import annotations
import math
from typing import Tuple

from scipy.stats import norm


def z_score(n: int, k: int, p: float = 0.5) -> float:
    """Standardized distance of k from its expectation n * p.

    Returns 0.0 when the variance vanishes (n == 0, p in {0, 1}).
    """
    var = n * p * (1 - p)
    if var <= 0:
        return 0.0
    return (k - n * p) / math.sqrt(var)


def normal_p_value(n: int, k: int, p: float = 0.5, continuity: bool = True) -> float:
    """Two-sided p-value of the normal approximation.

    Args:
        n: Number of flips
        k: Observed number of heads
        p: Success probability under the null hypothesis
        continuity: Apply the 0.5 continuity correction

    Returns:
        p-value in [0, 1]; 0 when k is outside [0, n]
    """
    if k < 0 or k > n:
        return 0
    var = n * p * (1 - p)
    if var <= 0:
        return 1.0 if k == n * p else 0.0

    dist = abs(k - n * p)
    if continuity:
        dist = max(dist - 0.5, 0.0)
    p_value = 2.0 * float(norm.sf(dist / math.sqrt(var)))
    return min(max(p_value, 0.0), 1.0)


def normal_critical_value(n: int, alpha: float, p: float = 0.5) -> int:
    """Upper critical count ``ceil(n p + z_{1 - alpha/2} * sd)``."""
    z_crit = float(norm.ppf(1 - alpha / 2.0))
    sd = math.sqrt(max(n * p * (1 - p), 0.0))
    return math.ceil(n * p + z_crit * sd)


def normal_critical_region(n: int, alpha: float, p: float = 0.5) -> Tuple[int, int]:
    """``(lower, upper)`` counts of the normal-approximation rejection region.

    >>> normal_critical_region(100, 0.05)
    (40, 60)
    """
    z_crit = float(norm.ppf(1 - alpha / 2.0))
    sd = math.sqrt(max(n * p * (1 - p), 0.0))
    return math.floor(n * p - z_crit * sd), normal_critical_value(n, alpha, p)
