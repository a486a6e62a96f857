"""
coinstats.api - User-Friendly Facade
====================================

Entry points phrased in the language of the explainer rather than the
framework.

Examples
--------
>>> from coinstats.api.coin_test import significance_test
>>> significance_test(10, 5).p_value
1.0
"""
