"""
coinstats.core.components
=========================

Pipeline steps that turn the flips in the ledger into derived events.

A look of a coin test runs three steps in order, each reading what the
previous ones wrote and appending one event of its own:

- `Statistic` (``stats/updated``): e.g. the exact p-value of all flips
- `Criteria` (``criteria/updated``): e.g. the two-tailed critical region
- `Signaler` (``signals/emitted``): the reject/retain decision

Subclasses only implement `compute`, returning the payload; `step` takes
care of writing it. `Observer` is the odd one out: flips are pushed into
it by the experiment rather than pulled from the ledger.

Examples
--------
>>> from coinstats.core.ledger import Ledger, create_connection
>>> from coinstats.core.names import Namespace
>>>
>>> ledger = Ledger(create_connection(), "test")
>>>
>>> class BatchCount(Statistic):
...     payload_type = "BatchCount"
...     def compute(self, ledger, experiment_id, after_seq=0):
...         obs = ledger.events(namespace=Namespace.OBS, experiment_id=experiment_id)
...         return {"batches": len(obs)}
...
>>> BatchCount().step(ledger, "exp1", "look-1", "t1")
>>> ledger.latest(namespace=Namespace.STATS).payload
{'batches': 0}
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, TYPE_CHECKING

from coinstats.core.names import Namespace

if TYPE_CHECKING:
    from coinstats.core.ledger import Ledger


@dataclass(kw_only=True)
class Component(ABC):
    """One derived event per look.

    ``after_seq`` is the ``seq`` of the event that opened the current run
    of the experiment; events up to it belong to earlier runs and must be
    ignored by `compute`.
    """

    namespace: ClassVar[Namespace]
    kind: ClassVar[str] = "updated"
    payload_type: ClassVar[str] = "Generic"
    tag: str = ""

    @abstractmethod
    def compute(
        self, ledger: "Ledger", experiment_id: str, after_seq: int = 0
    ) -> Dict[str, Any]:
        """Payload of this step for the current state of the ledger."""

    def step(
        self,
        ledger: "Ledger",
        experiment_id: str,
        step_key: str,
        time_index: str,
        after_seq: int = 0,
    ) -> None:
        ledger.write_event(
            time_index=time_index,
            namespace=self.namespace,
            kind=self.kind,
            experiment_id=experiment_id,
            step_key=step_key,
            payload_type=self.payload_type,
            payload=self.compute(ledger, str(experiment_id), after_seq),
            tag=self.tag,
        )


@dataclass(kw_only=True)
class Statistic(Component):
    namespace: ClassVar[Namespace] = Namespace.STATS


@dataclass(kw_only=True)
class Criteria(Component):
    namespace: ClassVar[Namespace] = Namespace.CRITERIA


@dataclass(kw_only=True)
class Signaler(Component):
    namespace: ClassVar[Namespace] = Namespace.SIGNALS
    kind: ClassVar[str] = "emitted"


@dataclass(kw_only=True)
class Observer(ABC):
    """Validates batches of flips and writes them as ``obs/observation``."""

    namespace: ClassVar[Namespace] = Namespace.OBS
    tag: str = "obs"

    @abstractmethod
    def create_batch(self) -> Any:
        """An empty batch for the experiment to fill."""

    @abstractmethod
    def register_batch(
        self,
        ledger: "Ledger",
        experiment_id: str,
        step_key: str,
        time_index: str,
        batch: Any,
    ) -> bool:
        """Write the batch; False when it was refused."""
