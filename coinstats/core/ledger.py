"""
coinstats.core.ledger
=====================

Append-only event ledger on top of ibis-framework.

Each coin experiment leaves a trail of rows: the design it was started
with, every batch of flips, and per look the p-value, critical region and
decision. Rows are never updated; readers replay them in ``seq`` order.

Rows carry the experiment id in a column of its own, so reads for one
experiment never pick up another whose id merely starts the same way.

Examples
--------
>>> from coinstats.core.ledger import Ledger, create_connection
>>> from coinstats.core.names import Namespace
>>>
>>> ledger = Ledger(create_connection("duckdb"), "demo")
>>> ledger.write_event(
...     time_index="t1", namespace=Namespace.OBS, kind="observation",
...     experiment_id="coin", step_key="look-1", payload_type="FlipCount",
...     payload={"n": 10, "heads": 7}
... )
>>> ledger.latest(namespace=Namespace.OBS).payload["heads"]
7
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union
import json
import uuid as uuid_module

import ibis
import pandas as pd
from ibis import BaseBackend
from ibis.expr.types import Table
from loguru import logger

from coinstats.core.names import RUN_RESET, Namespace, ExperimentId, StepKey, TimeIndex
from coinstats.__version__ import __version__

NamespaceLike = Union[Namespace, str]

LEDGER_SCHEMA = ibis.schema(
    [
        ("uuid", "string"),
        ("ledger_name", "string"),
        ("seq", "int64"),
        ("time_index", "string"),
        ("ts", "timestamp"),
        ("namespace", "string"),
        ("kind", "string"),
        ("experiment_id", "string"),
        ("step_key", "string"),
        ("entity", "string"),
        ("tag", "string"),
        ("payload_type", "string"),
        ("payload", "string"),
        ("coinstats_version", "string"),
    ]
)


def _identity(data: Any) -> Any:
    return data


@dataclass(frozen=True)
class PayloadCodec:
    """Converts a payload object to and from a JSON-compatible value.

    ``encode`` runs before ``json.dumps`` on write, ``decode`` after
    ``json.loads`` on read.
    """

    encode: Callable[[Any], Any] = _identity
    decode: Callable[[Any], Any] = _identity


class PayloadTypeRegistry:
    """Codecs by ``payload_type``; unknown types are stored as plain JSON."""

    _codecs: Dict[str, PayloadCodec] = {}
    default = PayloadCodec()

    @classmethod
    def register(cls, payload_type: str, codec: PayloadCodec) -> None:
        cls._codecs[payload_type] = codec

    @classmethod
    def unregister(cls, payload_type: str) -> None:
        cls._codecs.pop(payload_type, None)

    @classmethod
    def codec(cls, payload_type: str) -> PayloadCodec:
        return cls._codecs.get(payload_type, cls.default)

    @classmethod
    def dumps(cls, payload_type: str, data: Any) -> str:
        return json.dumps(cls.codec(payload_type).encode(data), separators=(",", ":"))

    @classmethod
    def loads(cls, payload_type: str, text: str) -> Any:
        return cls.codec(payload_type).decode(json.loads(text))


@dataclass(frozen=True)
class Event:
    """One decoded ledger row."""

    seq: int
    time_index: str
    ts: datetime
    namespace: str
    kind: str
    experiment_id: str
    step_key: str
    entity: str
    tag: str
    payload_type: str
    payload: Any


class Ledger:
    """
    Append-only ledger stored in one table of an ibis backend.

    Several ledgers may share a table; each only sees rows carrying its
    ``ledger_name``. ``seq`` numbers rows of one ledger from 1 in write
    order.
    """

    def __init__(
        self,
        connection: BaseBackend,
        ledger_name: str = "default",
        table_name: str = "ledger",
    ):
        self.connection = connection
        self.ledger_name = ledger_name
        self.table_name = table_name
        if table_name not in connection.list_tables():
            connection.create_table(table_name, schema=LEDGER_SCHEMA)

    @property
    def table(self) -> Table:
        """This ledger's rows as an ibis expression.

        >>> ledger = Ledger(create_connection(), "t")
        >>> int(ledger.table.count().execute())
        0
        """
        table = self.connection.table(self.table_name)
        return table.filter(table.ledger_name == self.ledger_name)

    def write_event(
        self,
        *,
        time_index: Union[TimeIndex, str],
        namespace: NamespaceLike,
        kind: str,
        experiment_id: Union[ExperimentId, str],
        step_key: Union[StepKey, str],
        payload_type: str,
        payload: Any,
        tag: Optional[str] = None,
        ts: Optional[datetime] = None,
    ) -> None:
        """Append one event.

        ``payload`` is serialized with the codec registered for
        ``payload_type``. ``ts`` defaults to now and is stored as naive UTC.
        """
        if ts is None:
            ts = datetime.now(timezone.utc)
        elif ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)

        seq = int(self.table.count().execute()) + 1
        record = {
            "uuid": str(uuid_module.uuid4()),
            "ledger_name": self.ledger_name,
            "seq": seq,
            "time_index": str(time_index),
            "ts": ts.astimezone(timezone.utc).replace(tzinfo=None),
            "namespace": str(namespace),
            "kind": kind,
            "experiment_id": str(experiment_id),
            "step_key": str(step_key),
            "entity": f"{experiment_id}#{step_key}",
            "tag": tag or "",
            "payload_type": payload_type,
            "payload": PayloadTypeRegistry.dumps(payload_type, payload),
            "coinstats_version": __version__,
        }
        self.connection.insert(
            self.table_name, ibis.memtable(pd.DataFrame([record]), schema=LEDGER_SCHEMA)
        )
        logger.debug(
            f"ledger[{self.ledger_name}] #{seq} {record['namespace']}/{kind} "
            f"{record['entity']} ({payload_type})"
        )

    def events(
        self,
        *,
        namespace: Optional[NamespaceLike] = None,
        experiment_id: Optional[Union[ExperimentId, str]] = None,
        kind: Optional[str] = None,
        after_seq: int = 0,
    ) -> List[Event]:
        """Decoded events in write order.

        Filters combine: ``namespace``, ``experiment_id`` and ``kind`` must
        match exactly, and only rows with ``seq > after_seq`` are returned.
        """
        t = self.table
        if namespace is not None:
            t = t.filter(t.namespace == str(namespace))
        if experiment_id is not None:
            t = t.filter(t.experiment_id == str(experiment_id))
        if kind is not None:
            t = t.filter(t.kind == kind)
        if after_seq:
            t = t.filter(t.seq > after_seq)

        found = []
        for row in t.order_by("seq").execute().to_dict("records"):
            ts = row["ts"]
            if hasattr(ts, "to_pydatetime"):
                ts = ts.to_pydatetime()
            found.append(
                Event(
                    seq=int(row["seq"]),
                    time_index=row["time_index"],
                    ts=ts,
                    namespace=row["namespace"],
                    kind=row["kind"],
                    experiment_id=row["experiment_id"],
                    step_key=row["step_key"],
                    entity=row["entity"],
                    tag=row["tag"],
                    payload_type=row["payload_type"],
                    payload=PayloadTypeRegistry.loads(row["payload_type"], row["payload"]),
                )
            )
        return found

    def latest(
        self,
        *,
        namespace: Optional[NamespaceLike] = None,
        experiment_id: Optional[Union[ExperimentId, str]] = None,
        kind: Optional[str] = None,
        after_seq: int = 0,
    ) -> Optional[Event]:
        """The most recently written matching event, or None."""
        found = self.events(
            namespace=namespace, experiment_id=experiment_id, kind=kind, after_seq=after_seq
        )
        return found[-1] if found else None

    def run_start(self, experiment_id: Union[ExperimentId, str]) -> int:
        """``seq`` of the experiment's latest ``design/run_reset`` event, 0 if none.

        Events with a larger ``seq`` form the experiment's current run.
        """
        marker = self.latest(
            namespace=Namespace.DESIGN, experiment_id=experiment_id, kind=RUN_RESET
        )
        return marker.seq if marker is not None else 0


def create_connection(backend: str = "duckdb", path: str = ":memory:") -> BaseBackend:
    """Create an ibis connection for a ledger.

    Only DuckDB is supported; ``path`` defaults to an in-memory database.

    >>> ledger = Ledger(create_connection("duckdb"), "test")
    >>> ledger.write_event(
    ...     time_index="t1", namespace=Namespace.OBS, kind="test",
    ...     experiment_id="exp1", step_key="s1", payload_type="TestData",
    ...     payload={"value": 42}
    ... )
    >>> ledger.events(experiment_id="exp1")[0].payload["value"]
    42
    """
    if backend == "duckdb":
        return ibis.duckdb.connect(path)
    raise ValueError(f"Unsupported backend: {backend}. Use 'duckdb'.")
