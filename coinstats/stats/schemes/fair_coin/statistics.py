"""
coinstats.stats.schemes.fair_coin.statistics
============================================

Ledger components of the fair-coin test.

- `ExactPValueStatistic`: exact two-tailed p-value of the accumulated flips
- `BinomialCriticalValue`: two-tailed rejection region for the current n
- `RejectSignaler`: reject/retain decision from the latest statistic

Mathematical Background
-----------------------
Under H0 the head count of n flips is Binomial(n, 0.5). The p-value sums
the probability of every count at least as far from n / 2 as the observed
one; H0 is rejected when it is at most alpha, which is the same as the
count falling at or beyond the critical values.

Examples
--------
>>> from coinstats.core.ledger import Ledger, create_connection
>>> from coinstats.core.names import Namespace
>>> L = Ledger(create_connection(), "test")
>>> L.write_event(time_index="t1", namespace=Namespace.OBS, kind="observation",
...               experiment_id="coin", step_key="s1",
...               payload_type="CoinObsBatch", payload={"n": 10, "heads": 10})
>>> ExactPValueStatistic().step(L, "coin", "s1", "t1")
>>> BinomialCriticalValue(alpha=0.05).step(L, "coin", "s1", "t1")
>>> RejectSignaler(alpha=0.05).step(L, "coin", "s1", "t1")
>>> L.latest(namespace=Namespace.SIGNALS).payload["reject"]
True
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, ClassVar, Dict

from loguru import logger

from coinstats.core.components import Criteria, Signaler, Statistic
from coinstats.core.ledger import Ledger
from coinstats.core.names import Namespace
from coinstats.stats.common.approximation import z_score
from coinstats.stats.common.binomial import calculate_p_value, critical_region
from coinstats.stats.schemes.fair_coin.core import (
    CriticalRegionPayload,
    ExactPValuePayload,
    reduce_counts,
)


@dataclass(kw_only=True)
class ExactPValueStatistic(Statistic):
    """
    Exact two-tailed p-value of all flips seen so far.

    Events consumed:
        - Namespace.OBS: CoinObsBatch observations of the current run

    Events produced:
        - Namespace.STATS: ExactPValue with counts and z-score
    """

    payload_type: ClassVar[str] = "ExactPValue"
    tag: str = "stat:exact_p"

    def compute(
        self, ledger: Ledger, experiment_id: str, after_seq: int = 0
    ) -> Dict[str, Any]:
        n, heads = reduce_counts(ledger, experiment_id=experiment_id, after_seq=after_seq)
        payload: ExactPValuePayload = {
            "n": n,
            "heads": heads,
            "p_value": float(calculate_p_value(n, heads)),
            "z": z_score(n, heads),
        }
        return dict(payload)


@dataclass(kw_only=True)
class BinomialCriticalValue(Criteria):
    """
    Symmetric two-tailed rejection region for the accumulated flip count.

    Attributes:
        alpha: Two-sided significance level
        p: Head probability under H0
    """

    payload_type: ClassVar[str] = "CriticalRegion"
    alpha: float = 0.05
    p: float = 0.5
    tag: str = "crit:binomial"

    def compute(
        self, ledger: Ledger, experiment_id: str, after_seq: int = 0
    ) -> Dict[str, Any]:
        n, _ = reduce_counts(ledger, experiment_id=experiment_id, after_seq=after_seq)
        lower, upper = critical_region(n, self.alpha, self.p)
        payload: CriticalRegionPayload = {
            "n": n,
            "alpha": self.alpha,
            "lower": lower,
            "upper": upper,
        }
        return dict(payload)


@dataclass(kw_only=True)
class RejectSignaler(Signaler):
    """
    Emit a reject/retain decision for H0: the coin is fair.

    Rejects when the latest p-value is at most alpha. The reason also states
    where the head count sits relative to the latest critical region.
    """

    payload_type: ClassVar[str] = "RejectDecision"
    alpha: float = 0.05
    tag: str = "signal:reject"

    def compute(
        self, ledger: Ledger, experiment_id: str, after_seq: int = 0
    ) -> Dict[str, Any]:
        stat = ledger.latest(
            namespace=Namespace.STATS, experiment_id=experiment_id, after_seq=after_seq
        )
        if stat is None:
            raise ValueError(f"No statistic recorded for {experiment_id}")
        crit = ledger.latest(
            namespace=Namespace.CRITERIA, experiment_id=experiment_id, after_seq=after_seq
        )

        p_value = float(stat.payload["p_value"])
        heads = int(stat.payload["heads"])
        reject = p_value <= self.alpha

        if crit is None:
            reason = f"p={p_value:.4g} vs alpha={self.alpha}"
        elif heads >= crit.payload["upper"]:
            reason = f"heads={heads} >= upper critical value {crit.payload['upper']}"
        elif heads <= crit.payload["lower"]:
            reason = f"heads={heads} <= lower critical value {crit.payload['lower']}"
        else:
            reason = f"heads={heads} inside ({crit.payload['lower']}, {crit.payload['upper']})"

        logger.info(f"{experiment_id}: {'reject' if reject else 'retain'} H0 ({reason})")
        return {"reject": reject, "p_value": p_value, "reason": reason}
