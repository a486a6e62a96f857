"""
Statistical methods for coin tests.

1. **Common** (coinstats.stats.common):
   Scheme-independent math: exact binomial statistics, the normal
   approximation and coin simulations.

2. **Schemes** (coinstats.stats.schemes):
   Ledger components and experiment templates applying the common methods
   to a concrete experiment (the fair-coin test).

Example:
--------
>>> from coinstats.stats.common.binomial import find_critical_value
>>> find_critical_value(100, 0.5, 0.05)
61
"""
