"""
coinstats.stats.common
======================

Generic, scheme-independent statistical methods.
"""
