"""
coinstats.api.coin_test
=======================

Business-oriented entry points for testing coins.

Examples
--------
>>> from coinstats.api.coin_test import significance_test, CoinTestConfig
>>> outcome = significance_test(100, 61)
>>> outcome.reject, outcome.upper_critical
(True, 61)
>>> significance_test(100, 61, CoinTestConfig(alpha=0.01)).reject
False
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Literal, Optional

from loguru import logger

from coinstats.stats.common.approximation import (
    normal_critical_region,
    normal_p_value,
    z_score,
)
from coinstats.stats.common.binomial import calculate_p_value, critical_region
from coinstats.stats.schemes.fair_coin.experiments import FairCoinTemplate


@dataclass
class CoinTestConfig:
    """
    Configuration of a single coin test.

    Parameters
    ----------
    alpha : float, default=0.05
        Two-sided significance level
    p_null : float, default=0.5
        Head probability under H0; the exact p-value assumes 0.5
    method : {"exact", "normal"}, default="exact"
        Exact binomial test or its normal approximation
    """

    alpha: float = 0.05
    p_null: float = 0.5
    method: Literal["exact", "normal"] = "exact"

    def validate(self) -> None:
        """Validate configuration."""
        if self.alpha <= 0 or self.alpha >= 1:
            raise ValueError(f"Alpha must be in (0,1), got {self.alpha}")
        if not (0.0 <= self.p_null <= 1.0):
            raise ValueError(f"p_null must be in [0,1], got {self.p_null}")
        if self.method not in ("exact", "normal"):
            raise ValueError(f"Method must be 'exact' or 'normal', got {self.method}")
        if self.method == "exact" and self.p_null != 0.5:
            raise ValueError("The exact p-value is only defined for p_null=0.5")


@dataclass
class CoinTestOutcome:
    """
    Outcome of one coin test.

    Attributes
    ----------
    n, heads : int
        Flips and observed heads
    p_value : float
        Two-tailed p-value under the configured method
    z : float
        Standardized head count
    lower_critical, upper_critical : int
        Counts at or beyond which H0 is rejected
    reject : bool
        Whether H0 is rejected at the configured alpha
    """

    n: int
    heads: int
    p_value: float
    z: float
    lower_critical: int
    upper_critical: int
    reject: bool
    method: str
    alpha: float


def significance_test(
    n: int, heads: int, config: Optional[CoinTestConfig] = None
) -> CoinTestOutcome:
    """
    Test H0: the coin is fair, from ``heads`` out of ``n`` flips.

    Unlike the pure statistics functions this validates its inputs and
    raises ``ValueError`` on counts outside 0 <= heads <= n.
    """
    config = config or CoinTestConfig()
    config.validate()
    if n < 0 or heads < 0 or heads > n:
        raise ValueError(f"Need 0 <= heads <= n, got heads={heads}, n={n}")

    if config.method == "exact":
        p_value = float(calculate_p_value(n, heads))
        lower, upper = critical_region(n, config.alpha, config.p_null)
    else:
        p_value = normal_p_value(n, heads, config.p_null)
        lower, upper = normal_critical_region(n, config.alpha, config.p_null)

    outcome = CoinTestOutcome(
        n=n,
        heads=heads,
        p_value=p_value,
        z=z_score(n, heads, config.p_null),
        lower_critical=lower,
        upper_critical=upper,
        reject=p_value <= config.alpha,
        method=config.method,
        alpha=config.alpha,
    )
    logger.debug(f"significance_test: {outcome}")
    return outcome


def fair_coin_test(experiment_id: str, alpha: float = 0.05) -> FairCoinTemplate:
    """
    Create a ledger-backed fair-coin experiment.

    Examples
    --------
    >>> from coinstats.core.ledger import Ledger, create_connection
    >>> from coinstats.runtime.runners import SequentialRunner
    >>> runner = SequentialRunner(fair_coin_test("coin"), Ledger(create_connection()))
    >>> runner.add_observations(heads=5, total=10)
    >>> runner.analyze().p_value
    1.0
    """
    return FairCoinTemplate(experiment_id=experiment_id, alpha=alpha)
