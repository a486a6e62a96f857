"""
coinstats.reporting.fair_coin
=============================

Tables and charts of the fair-coin null distribution.

The explainer shows Binomial(n, p) as a bar chart with the two-tailed
critical region highlighted and the observed head count marked; this module
produces that table as a polars DataFrame and draws it with matplotlib.

Examples
--------
>>> df = distribution_frame(4, alpha=0.2, observed=4)
>>> df.columns
['k', 'pmf', 'in_critical_region', 'observed']
>>> df["in_critical_region"].to_list()
[True, False, False, False, True]
"""

from __future__ import annotations
from typing import Any, Optional

import matplotlib.pyplot as plt
import polars as pl

from coinstats.stats.common.binomial import binomial_pmf, critical_region

REGION_COLOR = "#ffd700"
BODY_COLOR = "#888888"


def distribution_frame(
    n: int, alpha: float = 0.05, p: float = 0.5, observed: Optional[int] = None
) -> pl.DataFrame:
    """One row per possible head count k = 0..n."""
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    lower, upper = critical_region(n, alpha, p)
    ks = list(range(n + 1))
    return pl.DataFrame(
        {
            "k": ks,
            "pmf": [float(binomial_pmf(k, n, p)) for k in ks],
            "in_critical_region": [k <= lower or k >= upper for k in ks],
            "observed": [k == observed for k in ks],
        }
    )


def plot_distribution(
    n: int,
    alpha: float = 0.05,
    p: float = 0.5,
    observed: Optional[int] = None,
    ax: Optional[Any] = None,
) -> Any:
    """Bar chart of the null distribution; returns the matplotlib Axes."""
    df = distribution_frame(n, alpha, p, observed=observed)
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 3))

    colors = [
        REGION_COLOR if crit else BODY_COLOR
        for crit in df["in_critical_region"].to_list()
    ]
    ax.bar(df["k"].to_list(), df["pmf"].to_list(), color=colors)
    if observed is not None:
        ax.axvline(observed, color="black", linestyle="--", label=f"observed = {observed}")
        ax.legend()
    ax.set_xlabel("heads")
    ax.set_ylabel("probability")
    ax.set_title(f"Binomial({n}, {p}), alpha = {alpha}")
    return ax
