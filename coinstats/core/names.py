"""
coinstats.core.names
====================

Typed names shared across the package.

- `Namespace`: an Enum for well-known ledger namespaces.
- `ExperimentId`, `StepKey`, `TimeIndex`: NewType wrappers for clarity.
- `Literal` tags for the fair-coin test events.

Examples
--------
>>> from coinstats.core.names import Namespace, ExperimentId
>>> Namespace.OBS.value
'obs'
>>> str(Namespace.SIGNALS)
'signals'
>>> eid = ExperimentId("coin#1"); isinstance(eid, str)
True
"""

from __future__ import annotations
from enum import Enum
from typing import Literal, NewType


class Namespace(str, Enum):
    """Well-known ledger namespaces.

    - OBS: raw coin flip batches
    - DESIGN: registered experiment designs
    - STATS: statistics (derived)
    - CRITERIA: critical values / rejection regions
    - SIGNALS: emitted decisions
    """

    OBS = "obs"
    DESIGN = "design"
    STATS = "stats"
    CRITERIA = "criteria"
    SIGNALS = "signals"

    def __str__(self) -> str:
        return self.value


# Typed aliases for logical identifiers (thin wrappers over str).
ExperimentId = NewType("ExperimentId", str)
StepKey = NewType("StepKey", str)
TimeIndex = NewType("TimeIndex", str)

ExactPValueTag = Literal["stat:exact_p"]
CriticalRegionTag = Literal["crit:binomial"]
RejectDecisionTag = Literal["signal:reject"]

# Kind of the design event that closes one run of an experiment; counts
# restart after the most recent one.
RUN_RESET = "run_reset"
