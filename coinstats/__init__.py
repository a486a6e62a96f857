"""
coinstats: statistics behind "is this coin fair?" explainers.

At the bottom sit exact binomial computations under a fair-coin null
hypothesis: combinations, the probability mass function, the two-tailed
critical value and the exact p-value. Above them, every flip batch,
p-value, critical region and reject/retain decision of an experiment is
appended to a typed, append-only ledger, so a test can be replayed look by
look. Simulations and reports supply the data the interactive widgets
animate and plot.

Example
-------
>>> import coinstats
>>> coinstats.calculate_p_value(10, 10)
0.001953125
>>> assert hasattr(coinstats, "core")
>>> assert hasattr(coinstats, "stats")
"""

from coinstats.__version__ import __version__
from coinstats import core, stats
from coinstats.stats.common.binomial import (
    binomial_pmf,
    calculate_p_value,
    combinations,
    find_critical_value,
)

__all__ = [
    "__version__",
    "binomial_pmf",
    "calculate_p_value",
    "combinations",
    "find_critical_value",
]
