"""
coinstats.stats.schemes.fair_coin.core
======================================

Core data structures and utilities for the fair-coin test.

- Payload schemas for flips, p-values and critical regions
- Observation batches with validation
- Registration of batches in the ledger and count aggregation per run

Examples
--------
>>> from coinstats.core.ledger import Ledger, create_connection
>>> from coinstats.stats.schemes.fair_coin.core import CoinObservation, ObservationBatch
>>>
>>> ledger = Ledger(create_connection(), "test")
>>> batch = ObservationBatch()
>>> batch.add_flips(heads=7, total=10)
>>> CoinObservation().register_batch(ledger, "coin", "look-1", "t1", batch)
True
>>> reduce_counts(ledger, experiment_id="coin")
(10, 7)
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple, TypedDict, Union

from loguru import logger

from coinstats.core.components import Observer
from coinstats.core.ledger import Ledger, PayloadCodec, PayloadTypeRegistry
from coinstats.core.names import Namespace
from coinstats.stats.common.simulation import HEADS, TAILS


# --- Type Definitions and Payload Schemas ---


class ExactPValuePayload(TypedDict):
    """Payload for the exact p-value statistic."""

    n: int
    heads: int
    p_value: float
    z: float


class CriticalRegionPayload(TypedDict):
    """Payload for the two-tailed critical region."""

    n: int
    alpha: float
    lower: int
    upper: int


@dataclass(frozen=True)
class CoinObsBatch:
    """Typed observation batch: ``heads`` out of ``n`` flips."""

    n: int
    heads: int


# --- Data Validation and Ingestion ---


@dataclass
class ObservationBatch:
    """
    A batch of coin flips awaiting registration.

    Counts accumulate across calls. Every call checks its own arguments and
    records problems in ``validation_errors``; a later valid call does not
    clear them.
    """

    heads: int = 0
    total: int = 0

    timestamp: Optional[datetime] = None
    validation_errors: List[str] = field(default_factory=list)

    def _error(self, message: str) -> None:
        if message not in self.validation_errors:
            self.validation_errors.append(message)

    def add_flips(self, heads: int, total: int) -> None:
        """Add ``heads`` out of ``total`` flips."""
        if heads < 0 or total < 0:
            self._error("Counts cannot be negative")
        if heads > total:
            self._error("Heads cannot exceed total flips")

        self.heads += heads
        self.total += total

    def add_faces(self, faces: Iterable[str]) -> None:
        """Add individual faces ("Heads"/"Tails", or "H"/"T")."""
        for face in faces:
            if face in (HEADS, "H"):
                self.heads += 1
                self.total += 1
            elif face in (TAILS, "T"):
                self.total += 1
            else:
                self._error(f"Unknown face: {face!r}")

    def validate(self) -> bool:
        """Validate the batch and return True if valid."""
        # counts may also have been assigned directly
        if self.heads < 0 or self.total < 0:
            self._error("Counts cannot be negative")
        if self.heads > self.total:
            self._error("Heads cannot exceed total flips")
        return not self.validation_errors

    def is_empty(self) -> bool:
        return self.total == 0

    def to_payload(self) -> Dict[str, Any]:
        return {"n": self.total, "heads": self.heads}


@dataclass(kw_only=True)
class CoinObservation(Observer):
    """
    Registers coin flip batches in the ledger.

    Parameters
    ----------
    auto_validate : bool, default=True
        Validate batches before registration
    """

    auto_validate: bool = True

    def create_batch(self, timestamp: Optional[datetime] = None) -> ObservationBatch:
        return ObservationBatch(timestamp=timestamp)

    def register_batch(
        self,
        ledger: Ledger,
        experiment_id: str,
        step_key: str,
        time_index: str,
        batch: ObservationBatch,
        force: bool = False,
    ) -> bool:
        """
        Register an observation batch to the ledger.

        Returns
        -------
        bool
            True if registration succeeded, False if the batch was refused
        """
        if not force and self.auto_validate and not batch.validate():
            logger.warning(
                f"Refused batch for {experiment_id}: {batch.validation_errors}"
            )
            return False

        if not force and batch.is_empty():
            batch.validation_errors.append("Batch has no flips")
            return False

        ledger.write_event(
            time_index=str(time_index),
            namespace=self.namespace,
            kind="observation",
            experiment_id=str(experiment_id),
            step_key=str(step_key),
            payload_type="CoinObsBatch",
            payload=CoinObsBatch(n=batch.total, heads=batch.heads),
            tag=self.tag,
            ts=batch.timestamp or datetime.now(timezone.utc),
        )
        return True


# --- Data Aggregation Utilities ---


def reduce_counts(
    ledger: Ledger, *, experiment_id: str, after_seq: Optional[int] = None
) -> Tuple[int, int]:
    """
    Sum the flip batches of the experiment's current run.

    ``after_seq`` defaults to `Ledger.run_start`, so batches written before the
    latest reset are not counted.

    Returns
    -------
    tuple[int, int]
        (n, heads)
    """
    if after_seq is None:
        after_seq = ledger.run_start(experiment_id)
    n = heads = 0
    for event in ledger.events(
        namespace=Namespace.OBS, experiment_id=experiment_id, after_seq=after_seq
    ):
        n += event.payload.n
        heads += event.payload.heads
    return n, heads


def _encode_batch(data: Union[CoinObsBatch, Dict[str, Any]]) -> Dict[str, int]:
    if isinstance(data, CoinObsBatch):
        data = asdict(data)
    return {"n": int(data["n"]), "heads": int(data["heads"])}


PayloadTypeRegistry.register(
    "CoinObsBatch",
    PayloadCodec(encode=_encode_batch, decode=lambda d: CoinObsBatch(**d)),
)
