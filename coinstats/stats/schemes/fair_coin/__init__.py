"""
coinstats.stats.schemes.fair_coin
=================================

Is the coin fair? Flip batches go into the ledger, and each look records the
exact p-value, the critical region and the decision.

Examples
--------
>>> from coinstats.stats.schemes.fair_coin import FairCoinTemplate
>>> FairCoinTemplate("coin").alpha
0.05
"""

from coinstats.stats.schemes.fair_coin.core import (
    CoinObsBatch,
    CoinObservation,
    ObservationBatch,
    reduce_counts,
)
from coinstats.stats.schemes.fair_coin.statistics import (
    BinomialCriticalValue,
    ExactPValueStatistic,
    RejectSignaler,
)
from coinstats.stats.schemes.fair_coin.experiments import FairCoinTemplate

__all__ = [
    "CoinObsBatch",
    "CoinObservation",
    "ObservationBatch",
    "reduce_counts",
    "BinomialCriticalValue",
    "ExactPValueStatistic",
    "RejectSignaler",
    "FairCoinTemplate",
]
