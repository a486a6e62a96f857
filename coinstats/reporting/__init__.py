"""
coinstats.reporting
===================

Ledger overviews and null-distribution tables/charts.
"""
