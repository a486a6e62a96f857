"""
coinstats.core
==============

Ledger, typed names and component base classes shared by every scheme.
"""
