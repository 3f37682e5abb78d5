#!/usr/bin/env python3
"""
Unit tests for contest outcome calculation.
"""

import unittest
from decimal import Decimal

from core.config_loader import ScoringConfig, BonusTier
from core.scoring.outcome import calculate_outcome, margin_bonus_for


class TestCalculateOutcome(unittest.TestCase):
    """Covering side, margin and bonus from final scores."""

    def test_01_away_covers_half_point_handicap(self):
        """20-17 with home -6.5: adjusted home 13.5, away covers by 3.5, no bonus."""
        outcome = calculate_outcome(20, 17, Decimal('-6.5'))

        self.assertEqual(outcome.covering_side, 'away')
        self.assertEqual(outcome.margin, Decimal('3.5'))
        self.assertEqual(outcome.margin_bonus, 0)
        self.assertEqual(outcome.adjusted_home, Decimal('13.5'))

    def test_02_home_covers_by_18(self):
        """31-3 with home -10: home covers by 18, which sits in the >=11 tier."""
        outcome = calculate_outcome(31, 3, Decimal('-10'))

        self.assertEqual(outcome.covering_side, 'home')
        self.assertEqual(outcome.margin, Decimal('18'))
        self.assertEqual(outcome.margin_bonus, 1)

    def test_03_exact_push(self):
        """Adjusted home equal to away score is a push with no bonus."""
        outcome = calculate_outcome(24, 21, Decimal('-3'))

        self.assertEqual(outcome.covering_side, 'push')
        self.assertTrue(outcome.is_push)
        self.assertEqual(outcome.margin_bonus, 0)
        self.assertEqual(outcome.margin, Decimal('0'))

    def test_04_no_tolerance_near_push(self):
        """Half a point off is never a push."""
        outcome = calculate_outcome(24, 21, Decimal('-3.5'))
        self.assertEqual(outcome.covering_side, 'away')
        self.assertEqual(outcome.margin, Decimal('0.5'))

        outcome = calculate_outcome(24, 21, Decimal('-2.5'))
        self.assertEqual(outcome.covering_side, 'home')

    def test_05_push_iff_exact_equality(self):
        """Sweep scores and handicaps: push exactly when home + handicap == away."""
        handicaps = [Decimal(h) / 2 for h in range(-40, 41)]
        for home in range(0, 45, 3):
            for away in range(0, 45, 4):
                for handicap in handicaps:
                    outcome = calculate_outcome(home, away, handicap)
                    self.assertEqual(
                        outcome.is_push,
                        Decimal(home) + handicap == Decimal(away),
                        f"{home}-{away} handicap {handicap}"
                    )

    def test_06_float_handicap_accepted(self):
        """A float handicap gives the same exact result as its Decimal form."""
        outcome = calculate_outcome(20, 17, -6.5)
        self.assertEqual(outcome.covering_side, 'away')
        self.assertEqual(outcome.margin, Decimal('3.5'))

    def test_07_bonus_tiers(self):
        cases = [
            (0, 0), (10.5, 0), (11, 1), (19.5, 1),
            (20, 3), (28.5, 3), (29, 5), (45, 5),
        ]
        for margin, expected in cases:
            bonus = margin_bonus_for(Decimal(str(margin)), ScoringConfig().bonus_tiers)
            self.assertEqual(bonus, expected, f"margin {margin}")

    def test_08_away_blowout_gets_top_bonus(self):
        outcome = calculate_outcome(3, 45, Decimal('7'))

        self.assertEqual(outcome.covering_side, 'away')
        self.assertEqual(outcome.margin, Decimal('35'))
        self.assertEqual(outcome.margin_bonus, 5)

    def test_09_custom_tiers_from_config(self):
        config = ScoringConfig(bonus_tiers=[BonusTier(min_margin=7, bonus=2)])

        self.assertEqual(calculate_outcome(30, 0, 0, config).margin_bonus, 2)
        self.assertEqual(calculate_outcome(6, 0, 0, config).margin_bonus, 0)

    def test_10_missing_score_rejected(self):
        with self.assertRaises(ValueError):
            calculate_outcome(None, 17, Decimal('-3'))


if __name__ == '__main__':
    unittest.main()
