from __future__ import annotations

import unittest

from coinstats.stats.common.approximation import (
    normal_critical_region,
    normal_critical_value,
    normal_p_value,
    z_score,
)
from coinstats.stats.common.binomial import calculate_p_value


class ZScoreTests(unittest.TestCase):
    def test_standardizes_head_count(self) -> None:
        self.assertAlmostEqual(z_score(100, 60), 2.0)
        self.assertAlmostEqual(z_score(100, 40), -2.0)
        self.assertAlmostEqual(z_score(100, 50), 0.0)

    def test_zero_variance(self) -> None:
        self.assertEqual(z_score(0, 0), 0.0)
        self.assertEqual(z_score(10, 10, p=1.0), 0.0)


class NormalPValueTests(unittest.TestCase):
    def test_without_continuity_correction(self) -> None:
        self.assertAlmostEqual(normal_p_value(100, 60, continuity=False), 0.0455, places=4)

    def test_close_to_exact_for_large_n(self) -> None:
        for k in (480, 500, 520, 540):
            self.assertAlmostEqual(normal_p_value(1000, k), calculate_p_value(1000, k), delta=2e-3)

    def test_center_is_one(self) -> None:
        self.assertEqual(normal_p_value(100, 50), 1.0)

    def test_out_of_range_is_zero(self) -> None:
        self.assertEqual(normal_p_value(10, 11), 0)
        self.assertEqual(normal_p_value(10, -1), 0)

    def test_degenerate_null(self) -> None:
        self.assertEqual(normal_p_value(10, 10, p=1.0), 1.0)
        self.assertEqual(normal_p_value(10, 9, p=1.0), 0.0)


class NormalCriticalValueTests(unittest.TestCase):
    def test_region_at_n_100(self) -> None:
        self.assertEqual(normal_critical_value(100, 0.05), 60)
        self.assertEqual(normal_critical_region(100, 0.05), (40, 60))

    def test_region_widens_with_smaller_alpha(self) -> None:
        lower_05, upper_05 = normal_critical_region(400, 0.05)
        lower_01, upper_01 = normal_critical_region(400, 0.01)
        self.assertLess(lower_01, lower_05)
        self.assertGreater(upper_01, upper_05)


if __name__ == "__main__":
    unittest.main()
