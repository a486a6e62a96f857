from __future__ import annotations

import unittest
from datetime import datetime, timezone

from coinstats.core.ledger import (
    Ledger,
    PayloadCodec,
    PayloadTypeRegistry,
    create_connection,
)
from coinstats.core.names import RUN_RESET, Namespace
from coinstats.stats.schemes.fair_coin.core import CoinObsBatch


def _write(ledger: Ledger, experiment_id: str, step_key: str, value: int, **kw) -> None:
    ledger.write_event(
        time_index=f"t{value}",
        namespace=kw.get("namespace", Namespace.OBS),
        kind=kw.get("kind", "observation"),
        experiment_id=experiment_id,
        step_key=step_key,
        payload_type=kw.get("payload_type", "TestData"),
        payload=kw.get("payload", {"value": value}),
    )


class LedgerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ledger = Ledger(create_connection(), "test")

    def test_empty_ledger(self) -> None:
        self.assertEqual(self.ledger.events(), [])
        self.assertIsNone(self.ledger.latest())

    def test_events_in_write_order(self) -> None:
        for i in range(1, 5):
            _write(self.ledger, "coin", f"s{i}", i)
        events = self.ledger.events()
        self.assertEqual([e.payload["value"] for e in events], [1, 2, 3, 4])
        self.assertEqual([e.seq for e in events], [1, 2, 3, 4])
        self.assertEqual(self.ledger.latest().payload["value"], 4)

    def test_event_fields(self) -> None:
        ts = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        self.ledger.write_event(
            time_index="t1",
            namespace=Namespace.STATS,
            kind="updated",
            experiment_id="coin",
            step_key="look-1",
            payload_type="TestData",
            payload={"x": 1},
            tag="stat:test",
            ts=ts,
        )
        event = self.ledger.latest()
        self.assertEqual(event.namespace, "stats")
        self.assertEqual(event.entity, "coin#look-1")
        self.assertEqual(event.experiment_id, "coin")
        self.assertEqual(event.step_key, "look-1")
        self.assertEqual(event.tag, "stat:test")
        self.assertEqual(event.ts.replace(tzinfo=None), ts.replace(tzinfo=None))

    def test_filters(self) -> None:
        _write(self.ledger, "coin", "s1", 1)
        _write(self.ledger, "coin2", "s1", 2)
        _write(self.ledger, "coin", "s2", 3, namespace=Namespace.STATS)
        self.assertEqual(len(self.ledger.events(experiment_id="coin")), 2)
        self.assertEqual(len(self.ledger.events(experiment_id="coin2")), 1)
        self.assertEqual(
            len(self.ledger.events(namespace=Namespace.OBS, experiment_id="coin")), 1
        )
        self.assertEqual(len(self.ledger.events(kind="observation")), 3)
        self.assertEqual(len(self.ledger.events(kind="missing")), 0)

    def test_ledgers_sharing_a_connection_are_isolated(self) -> None:
        other = Ledger(self.ledger.connection, "other")
        _write(self.ledger, "coin", "s1", 1)
        _write(other, "coin", "s1", 2)
        self.assertEqual(len(self.ledger.events()), 1)
        self.assertEqual(other.latest().payload["value"], 2)
        shared = self.ledger.connection.table(self.ledger.table_name)
        self.assertEqual(int(shared.count().execute()), 2)

    def test_registered_payload_type_roundtrip(self) -> None:
        _write(
            self.ledger,
            "coin",
            "s1",
            1,
            payload_type="CoinObsBatch",
            payload=CoinObsBatch(n=10, heads=4),
        )
        self.assertEqual(self.ledger.latest().payload, CoinObsBatch(n=10, heads=4))

    def test_experiment_filter_is_exact(self) -> None:
        _write(self.ledger, "coin", "s1", 1)
        _write(self.ledger, "coin#1", "s1", 2)
        _write(self.ledger, "coin#1#2", "s1", 3)
        self.assertEqual([e.payload["value"] for e in self.ledger.events(experiment_id="coin")], [1])
        self.assertEqual(self.ledger.latest(experiment_id="coin#1").payload["value"], 2)
        self.assertEqual(self.ledger.latest(experiment_id="coin#1").entity, "coin#1#s1")

    def test_after_seq(self) -> None:
        for i in range(1, 5):
            _write(self.ledger, "coin", f"s{i}", i)
        self.assertEqual([e.seq for e in self.ledger.events(after_seq=2)], [3, 4])
        self.assertIsNone(self.ledger.latest(after_seq=4))

    def test_run_start(self) -> None:
        self.assertEqual(self.ledger.run_start("coin"), 0)
        _write(self.ledger, "coin", "s1", 1)
        _write(self.ledger, "coin", "s1", 2, namespace=Namespace.DESIGN, kind=RUN_RESET)
        _write(self.ledger, "other", "s1", 3, namespace=Namespace.DESIGN, kind=RUN_RESET)
        self.assertEqual(self.ledger.run_start("coin"), 2)
        self.assertEqual(self.ledger.run_start("other"), 3)

    def test_custom_codec(self) -> None:
        PayloadTypeRegistry.register(
            "UpperText", PayloadCodec(encode=str.upper, decode=str.lower)
        )
        self.addCleanup(PayloadTypeRegistry.unregister, "UpperText")

        _write(self.ledger, "coin", "s1", 1, payload_type="UpperText", payload="heads")
        raw = self.ledger.table.execute()["payload"].tolist()
        self.assertEqual(raw, ['"HEADS"'])
        self.assertEqual(self.ledger.latest().payload, "heads")

    def test_unregistered_type_falls_back_to_json(self) -> None:
        self.assertIs(PayloadTypeRegistry.codec("NoSuchType"), PayloadTypeRegistry.default)

    def test_unsupported_backend(self) -> None:
        with self.assertRaises(ValueError):
            create_connection("sqlite")


if __name__ == "__main__":
    unittest.main()
