"""
coinstats.stats.common.simulation
=================================

Coin simulations behind the explainer animations.

The drawing itself lives in the front end; this module produces the data it
animates and the Monte Carlo estimates quoted next to it:

- `flip_coins`: a sequence of "Heads"/"Tails" faces
- `grid_layout`: landing slots for the grid drop
- `shuffle_sequence`: pairwise swaps of a row of coins
- `simulate_rejection_rate`: how often the exact test rejects

Examples
--------
>>> import numpy as np
>>> faces = flip_coins(8, rng=np.random.default_rng(0))
>>> len(faces)
8
>>> grid_layout(4)
[(-1.25, -1.25), (1.25, -1.25), (-1.25, 1.25), (1.25, 1.25)]
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from coinstats.stats.common.binomial import critical_region

HEADS = "Heads"
TAILS = "Tails"


def _rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _check_probability(p: float) -> None:
    if not (0.0 <= p <= 1.0):
        raise ValueError(f"p must be in [0, 1], got {p}")


def flip_coins(
    n: int, p: float = 0.5, rng: Optional[np.random.Generator] = None
) -> List[str]:
    """Flip n coins that land heads with probability p."""
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    _check_probability(p)
    draws = _rng(rng).random(n)
    return [HEADS if u < p else TAILS for u in draws]


def count_heads(faces: Sequence[str]) -> int:
    """Number of "Heads" in a face sequence."""
    return sum(1 for face in faces if face == HEADS)


def grid_layout(rolls: int, spacing: float = 2.5) -> List[Tuple[float, float]]:
    """Centered square-grid slots (x, z) for ``rolls`` coins."""
    if rolls <= 0:
        return []
    cols = math.ceil(math.sqrt(rolls))
    offset = (cols - 1) * spacing / 2
    return [
        ((i % cols) * spacing - offset, (i // cols) * spacing - offset)
        for i in range(rolls)
    ]


def ease_in_out_quad(t: float) -> float:
    """Quadratic ease-in-out used for swap arcs; t is clamped to [0, 1]."""
    t = min(max(t, 0.0), 1.0)
    if t < 0.5:
        return 2 * t * t
    return 1 - (-2 * t + 2) ** 2 / 2


@dataclass
class ShuffleRun:
    """A row of coins and the swaps applied to it.

    Attributes:
        initial: Arrangement before shuffling, e.g. "HHHTT"
        swaps: Index pairs (i, j) with i < j, in application order
        final: Arrangement after all swaps
    """

    initial: str
    swaps: List[Tuple[int, int]] = field(default_factory=list)
    final: str = ""

    @property
    def heads(self) -> int:
        return self.final.count("H")

    @property
    def tails(self) -> int:
        return self.final.count("T")


def shuffle_sequence(
    heads: int,
    tails: int,
    shuffles: int,
    rng: Optional[np.random.Generator] = None,
) -> ShuffleRun:
    """Swap random pairs of coins ``shuffles`` times.

    Each swap picks two distinct positions. With fewer than two coins no swap
    is possible and the arrangement is returned unchanged.
    """
    if heads < 0 or tails < 0 or shuffles < 0:
        raise ValueError("heads, tails and shuffles must be non-negative")

    gen = _rng(rng)
    items = ["H"] * heads + ["T"] * tails
    run = ShuffleRun(initial="".join(items))

    if len(items) > 1:
        for _ in range(shuffles):
            idx1 = int(gen.integers(len(items)))
            idx2 = int(gen.integers(len(items)))
            while idx1 == idx2:
                idx2 = int(gen.integers(len(items)))
            i_min, i_max = min(idx1, idx2), max(idx1, idx2)
            items[i_min], items[i_max] = items[i_max], items[i_min]
            run.swaps.append((i_min, i_max))

    run.final = "".join(items)
    return run


def simulate_rejection_rate(
    n: int,
    alpha: float = 0.05,
    trials: int = 1000,
    p: float = 0.5,
    rng: Optional[np.random.Generator] = None,
) -> float:
    """Fraction of simulated experiments that land in the critical region.

    Each trial flips n coins with head probability p and checks the count
    against the fair-coin rejection region. With p = 0.5 the result
    estimates the type I error rate, otherwise the power.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    if trials < 1:
        raise ValueError(f"trials must be at least 1, got {trials}")
    _check_probability(p)

    lower, upper = critical_region(n, alpha)
    counts = _rng(rng).binomial(n, p, size=trials)
    rejected = int(np.count_nonzero((counts <= lower) | (counts >= upper)))
    rate = rejected / trials
    logger.debug(
        f"Simulated {trials} experiments of n={n}, p={p}: rejection rate {rate:.4f}"
    )
    return rate
