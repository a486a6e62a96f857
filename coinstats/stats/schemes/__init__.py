"""
coinstats.stats.schemes
=======================

Problem-specific applications of the common methods.

Available schemes:
- `fair_coin`: exact two-tailed binomial test of H0: P(heads) = 0.5
"""
