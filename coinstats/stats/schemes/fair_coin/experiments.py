"""
coinstats.stats.schemes.fair_coin.experiments
=============================================

Experiment template for testing whether a coin is fair.

`FairCoinTemplate` wires the observation, p-value, critical region and
decision components together, registers its design in the ledger and reads
the resulting events back into an `AnalysisResult`.

Examples
--------
>>> from coinstats.core.ledger import Ledger, create_connection
>>> exp = FairCoinTemplate("coin", alpha=0.05)
>>> exp.setup(Ledger(create_connection(), "coin"))
>>> exp.add_observations(faces=["Heads", "Tails", "Heads", "Heads"])
>>> result = exp.analyze()
>>> result.reject, result.n, result.heads
(False, 4, 3)
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from coinstats.core.components import Component
from coinstats.core.ledger import Ledger
from coinstats.core.names import Namespace
from coinstats.runtime.experiment_template import ExperimentTemplate, AnalysisResult
from coinstats.stats.schemes.fair_coin.core import (
    CoinObservation,
    ObservationBatch,
    reduce_counts,
)
from coinstats.stats.schemes.fair_coin.statistics import (
    BinomialCriticalValue,
    ExactPValueStatistic,
    RejectSignaler,
)


class FairCoinTemplate(ExperimentTemplate):
    """
    Exact two-tailed binomial test of H0: P(heads) = 0.5.

    Flips may arrive over several looks; every look re-tests all flips seen
    so far in the current run.

    Attributes:
        experiment_id: Unique identifier for the experiment
        alpha: Two-sided significance level (default 0.05)
    """

    def __init__(self, experiment_id: str, alpha: float = 0.05):
        if not (0.0 < alpha < 1.0):
            raise ValueError(f"alpha must be in (0, 1), got {alpha}")
        super().__init__(experiment_id)
        self.alpha = alpha

    def build_pipeline(self) -> Tuple[CoinObservation, List[Component]]:
        return CoinObservation(), [
            ExactPValueStatistic(),
            BinomialCriticalValue(alpha=self.alpha),
            RejectSignaler(alpha=self.alpha),
        ]

    def populate_batch(self, batch: ObservationBatch, **kwargs: Any) -> None:
        """Accept ``heads``/``total`` counts or a ``faces`` sequence."""
        if "heads" in kwargs and "total" in kwargs:
            batch.add_flips(kwargs["heads"], kwargs["total"])
        elif "faces" in kwargs:
            batch.add_faces(kwargs["faces"])
        else:
            raise ValueError("Pass heads= and total=, or faces=")

    def register_design(self, ledger: Ledger) -> None:
        ledger.write_event(
            namespace=Namespace.DESIGN,
            kind="experiment_design",
            payload_type="fair_coin_design",
            experiment_id=self.experiment_id,
            step_key="design",
            time_index="t0",
            payload={
                "method": "exact_binomial",
                "alpha": self.alpha,
                "p_null": 0.5,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    def extract_results(self, ledger: Ledger) -> AnalysisResult:
        """Build the result of the latest look from its ledger events."""
        eid = self.experiment_id
        since = ledger.run_start(eid)
        signal = ledger.latest(namespace=Namespace.SIGNALS, experiment_id=eid, after_seq=since)
        if signal is None:
            raise ValueError(f"No decision recorded for {eid} in run {self.run}")
        stat = ledger.latest(namespace=Namespace.STATS, experiment_id=eid, after_seq=since)
        crit = ledger.latest(namespace=Namespace.CRITERIA, experiment_id=eid, after_seq=since)

        n, heads = reduce_counts(ledger, experiment_id=eid, after_seq=since)
        return AnalysisResult(
            reject=bool(signal.payload["reject"]),
            p_value=float(signal.payload["p_value"]),
            alpha=self.alpha,
            run=self.run,
            look_number=self.look,
            n=n,
            heads=heads,
            z=stat.payload["z"] if stat else None,
            lower_critical=crit.payload["lower"] if crit else None,
            upper_critical=crit.payload["upper"] if crit else None,
            reason=signal.payload["reason"],
            statistic_event=stat,
            criteria_event=crit,
            signal_event=signal,
        )

    def get_summary(self) -> Dict[str, Any]:
        summary = super().get_summary()
        summary.update({"alpha": self.alpha, "experiment_type": "fair_coin"})

        if self.ledger is not None:
            n, heads = reduce_counts(self.ledger, experiment_id=self.experiment_id)
            summary.update(
                {
                    "total_flips": n,
                    "heads": heads,
                    "head_rate": heads / n if n > 0 else 0.0,
                }
            )
        return summary
