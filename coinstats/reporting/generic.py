"""
coinstats.reporting.generic
===========================

A scheme-agnostic reporter that shows ledger contents and
namespace x kind counts.

Examples
--------
>>> from coinstats.core.ledger import Ledger, create_connection
>>> from coinstats.reporting.generic import LedgerReporter
>>> rep = LedgerReporter(Ledger(create_connection(), "test"))
>>> rep.unique_namespaces()
[]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List

import ibis

if TYPE_CHECKING:
    from coinstats.core.ledger import Ledger


@dataclass
class LedgerReporter:
    """A generic reporter for any ledger."""

    ledger: "Ledger"

    def ledger_table(self) -> Any:
        """Return the underlying ledger table as ibis expression."""
        return self.ledger.table

    def _distinct(self, column: str) -> List[str]:
        table = self.ledger.table
        values = table.select(table[column]).distinct().execute()[column]
        return sorted(v for v in values if v is not None)

    def unique_entities(self) -> List[str]:
        """List all unique experiment entities."""
        return self._distinct("entity")

    def unique_experiments(self) -> List[str]:
        """List all experiment ids."""
        return self._distinct("experiment_id")

    def unique_namespaces(self) -> List[str]:
        """List all unique event namespaces."""
        return self._distinct("namespace")

    def unique_kinds(self) -> List[str]:
        """List all unique event kinds."""
        return self._distinct("kind")

    def namespace_kind_counts(self) -> Any:
        """
        Return counts of events grouped by namespace and kind.

        Returns
        -------
        ibis.Table
            Table with namespace, kind, and count columns
        """
        table = self.ledger.table
        return (
            table.group_by([table.namespace, table.kind])
            .aggregate(count=ibis._.count())
            .order_by(["namespace", "kind"])
        )
