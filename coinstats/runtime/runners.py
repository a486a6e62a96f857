"""
coinstats.runtime.runners
=========================

Drive coin experiments look by look.

`SequentialRunner` keeps the result of every look of one experiment, so the
point where a growing sample first rejects H0 can be read off afterwards.
`BatchRunner` gives the same flips to several experiments, e.g. one coin
tested at alpha 0.05 and at 0.01, each on its own ledger.

Examples
--------
>>> from coinstats.core.ledger import Ledger, create_connection
>>> from coinstats.stats.schemes.fair_coin.experiments import FairCoinTemplate
>>> from coinstats.runtime.runners import SequentialRunner
>>>
>>> runner = SequentialRunner(FairCoinTemplate("coin"), Ledger(create_connection(), "coin"))
>>> runner.add_observations(heads=9, total=10)
>>> runner.analyze().reject
True
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from coinstats.core.ledger import Ledger, create_connection
from coinstats.runtime.experiment_template import ExperimentTemplate, AnalysisResult

_NOT_SETUP = "Runner not setup. Call setup() first."


class SequentialRunner:
    """History of looks of a single experiment."""

    def __init__(self, template: ExperimentTemplate, ledger: Optional[Ledger] = None):
        self.template = template
        self.history: List[AnalysisResult] = []
        if ledger is not None:
            self.setup(ledger)

    def setup(self, ledger: Ledger) -> None:
        self.template.setup(ledger)

    def add_observations(self, **kwargs: Any) -> None:
        if not self.template.is_setup:
            raise RuntimeError(_NOT_SETUP)
        self.template.add_observations(**kwargs)

    def analyze(self) -> AnalysisResult:
        if not self.template.is_setup:
            raise RuntimeError(_NOT_SETUP)
        result = self.template.analyze()
        self.history.append(result)
        return result

    def first_rejection(self) -> Optional[AnalysisResult]:
        """Earliest look of the current run that rejected H0, if any."""
        return next((r for r in self.history if r.reject), None)

    def get_summary(self) -> Dict[str, Any]:
        summary = self.template.get_summary()
        first = self.first_rejection()
        summary.update(
            {
                "looks_analyzed": len(self.history),
                "rejected": bool(self.history) and self.history[-1].reject,
                "first_rejection_look": first.look_number if first else None,
            }
        )
        return summary

    def reset(self) -> None:
        """Start a new run of the experiment and forget the look history."""
        self.template.reset()
        self.history.clear()


def _memory_ledger() -> Ledger:
    return Ledger(create_connection())


class BatchRunner:
    """Feeds the same flips to several experiments, each on its own ledger."""

    def __init__(
        self,
        templates: List[ExperimentTemplate],
        ledger_factory: Optional[Callable[[], Ledger]] = None,
    ):
        self.templates = templates
        self.ledger_factory = ledger_factory or _memory_ledger
        self.runners: Optional[List[SequentialRunner]] = None

    def setup(self) -> None:
        self.runners = [SequentialRunner(t, self.ledger_factory()) for t in self.templates]

    def _require_setup(self) -> List[SequentialRunner]:
        if self.runners is None:
            raise RuntimeError(_NOT_SETUP)
        return self.runners

    def add_observations_all(self, **kwargs: Any) -> None:
        for runner in self._require_setup():
            runner.add_observations(**kwargs)

    def analyze_all(self) -> List[AnalysisResult]:
        results = [runner.analyze() for runner in self._require_setup()]
        logger.debug(
            "batch: " + ", ".join(f"{r.alpha}:{'reject' if r.reject else 'retain'}" for r in results)
        )
        return results

    def decisions(self) -> Dict[str, Optional[bool]]:
        """Latest reject decision per experiment id; None before any look."""
        return {
            runner.template.experiment_id: (
                runner.history[-1].reject if runner.history else None
            )
            for runner in self._require_setup()
        }
