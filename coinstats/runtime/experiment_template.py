"""
coinstats.runtime.experiment_template
=====================================

Look-by-look lifecycle of a ledger-backed coin experiment.

An experiment is identified by its id and lives in *runs*. A run is a
sequence of looks: each look registers one batch of flips, then the
pipeline re-tests every flip of the run so far. `ExperimentTemplate.reset`
closes the current run by writing a ``design/run_reset`` event; flips and
results written before it are no longer read, but stay in the ledger.

Step keys have the form ``run-<r>/look-<k>``.

Examples
--------
>>> from coinstats.core.ledger import Ledger, create_connection
>>> from coinstats.stats.schemes.fair_coin.experiments import FairCoinTemplate
>>>
>>> exp = FairCoinTemplate("coin")
>>> exp.setup(Ledger(create_connection(), "test"))
>>> exp.add_observations(heads=9, total=10)
>>> exp.step_key()
'run-1/look-1'
>>> exp.reset()
>>> exp.step_key(), exp.look
('run-2/look-0', 0)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from coinstats.core.components import Component, Observer
from coinstats.core.ledger import Event, Ledger
from coinstats.core.names import RUN_RESET, Namespace


@dataclass
class AnalysisResult:
    """Outcome of one look: the test of every flip of the run so far."""

    reject: bool
    p_value: float
    alpha: float
    run: int
    look_number: int
    n: int
    heads: int

    z: Optional[float] = None
    lower_critical: Optional[int] = None
    upper_critical: Optional[int] = None
    reason: str = ""

    statistic_event: Optional[Event] = None
    criteria_event: Optional[Event] = None
    signal_event: Optional[Event] = None

    @property
    def head_rate(self) -> float:
        return self.heads / self.n if self.n > 0 else 0.0


class ExperimentTemplate(ABC):
    """
    Base class for experiments driven look by look.

    Subclasses provide the observer and the ordered pipeline
    (`build_pipeline`), turn keyword arguments into a batch
    (`populate_batch`), and read a look's events back (`extract_results`).
    """

    def __init__(self, experiment_id: str):
        self.experiment_id = str(experiment_id)
        self.ledger: Optional[Ledger] = None
        self.observer: Optional[Observer] = None
        self.pipeline: List[Component] = []
        self.run = 1
        self.look = 0

    @abstractmethod
    def build_pipeline(self) -> Tuple[Observer, List[Component]]:
        """Observer for incoming flips, then the components run per look."""

    @abstractmethod
    def register_design(self, ledger: Ledger) -> None:
        """Write the experiment's design event."""

    @abstractmethod
    def populate_batch(self, batch: Any, **kwargs: Any) -> None:
        """Fill an observation batch from keyword arguments."""

    @abstractmethod
    def extract_results(self, ledger: Ledger) -> AnalysisResult:
        """Read the latest look of the current run back from the ledger."""

    @property
    def is_setup(self) -> bool:
        return self.ledger is not None

    def step_key(self, look: Optional[int] = None) -> str:
        return f"run-{self.run}/look-{self.look if look is None else look}"

    def _require_setup(self) -> Ledger:
        if self.ledger is None:
            raise RuntimeError("Template not setup. Call setup(ledger) first.")
        return self.ledger

    def setup(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self.observer, self.pipeline = self.build_pipeline()
        self.register_design(ledger)
        logger.debug(f"{self.experiment_id} set up on ledger {ledger.ledger_name}")

    def add_observations(self, **kwargs: Any) -> None:
        """Register one batch of flips as the next look.

        Raises ``ValueError`` with the batch's errors if it is refused; the
        look counter only advances on success.
        """
        ledger = self._require_setup()
        batch = self.observer.create_batch()
        self.populate_batch(batch, **kwargs)

        look = self.look + 1
        if not self.observer.register_batch(
            ledger, self.experiment_id, self.step_key(look), f"t{look}", batch
        ):
            raise ValueError(f"Failed to register observations: {batch.validation_errors}")
        self.look = look

    def analyze(self) -> AnalysisResult:
        """Run the pipeline over the current run and return the look's result."""
        ledger = self._require_setup()
        if self.look == 0:
            raise ValueError("No observations registered yet. Call add_observations() first.")

        after_seq = ledger.run_start(self.experiment_id)
        for component in self.pipeline:
            component.step(
                ledger, self.experiment_id, self.step_key(), f"t{self.look}", after_seq
            )
        return self.extract_results(ledger)

    def get_summary(self) -> Dict[str, Any]:
        return {
            "experiment_id": self.experiment_id,
            "status": "ready" if self.is_setup else "not_setup",
            "run": self.run,
            "look": self.look,
        }

    def reset(self) -> None:
        """Start a new run; the next look is look 1 again.

        Once set up, the reset is recorded in the ledger so that every reader
        of the current run skips the earlier flips.
        """
        if self.ledger is not None:
            self.ledger.write_event(
                time_index=f"t{self.look}",
                namespace=Namespace.DESIGN,
                kind=RUN_RESET,
                experiment_id=self.experiment_id,
                step_key=self.step_key(),
                payload_type="RunReset",
                payload={"closed_run": self.run, "looks": self.look},
            )
        self.run += 1
        self.look = 0
