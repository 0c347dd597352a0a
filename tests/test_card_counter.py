"""
Tests for UnaccountedCardCounter and the turn log.
"""
import sys
import unittest
from pathlib import Path

# Add parent directory to path so imports work from tests folder
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.game_config import GameConfig
from loveletter.data_structures import Card, TurnLog, TurnRecord, UnaccountedCardCounter
from loveletter.errors import ExhaustedCard, InvariantViolation, PreconditionViolation


class TestUnaccountedCardCounter(unittest.TestCase):

    def setUp(self):
        self.config = GameConfig()
        self.counter = UnaccountedCardCounter(self.config.card_counts)

    def test_starts_with_full_deck(self):
        self.assertEqual(self.counter.remaining(), (5, 2, 2, 2, 2, 1, 1, 1))
        self.assertEqual(self.counter.total(), 16)

    def test_account_for_decrements_one_value(self):
        self.counter.account_for(Card.GUARD)
        self.counter.account_for(Card.PRINCESS)
        self.assertEqual(self.counter.count(Card.GUARD), 4)
        self.assertEqual(self.counter.count(Card.PRINCESS), 0)
        self.assertTrue(self.counter.is_fully_accounted(Card.PRINCESS))
        self.assertEqual(self.counter.total(), 14)

    def test_exhausted_card_is_an_invariant_violation(self):
        self.counter.account_for(Card.KING)
        with self.assertRaises(ExhaustedCard) as ctx:
            self.counter.account_for(Card.KING)
        self.assertIsInstance(ctx.exception, InvariantViolation)
        self.assertEqual(ctx.exception.value, Card.KING)
        # Failed call leaves the count untouched
        self.assertEqual(self.counter.count(Card.KING), 0)

    def test_values_outside_the_deck_are_rejected(self):
        with self.assertRaises(PreconditionViolation):
            self.counter.account_for(0)
        with self.assertRaises(PreconditionViolation):
            self.counter.account_for(9)

    def test_return_to_pool_never_exceeds_deck_count(self):
        self.counter.account_for(Card.BARON)
        self.counter.return_to_pool(Card.BARON)
        self.assertEqual(self.counter.count(Card.BARON), 2)
        with self.assertRaises(PreconditionViolation):
            self.counter.return_to_pool(Card.BARON)

    def test_snapshot_is_read_only(self):
        snapshot = self.counter.remaining()
        self.counter.account_for(Card.PRIEST)
        self.assertEqual(snapshot[Card.PRIEST - 1], 2)
        self.assertEqual(self.counter.count(Card.PRIEST), 1)

    def test_reset_restores_the_deck(self):
        for value in (1, 1, 2, 8):
            self.counter.account_for(value)
        self.counter.reset()
        self.assertEqual(self.counter.remaining(), self.config.card_counts)


class TestTurnLog(unittest.TestCase):

    def test_records_are_appended_in_order(self):
        log = TurnLog()
        log.append(TurnRecord(turn_number=0, player=1, card=Card.HANDMAID))
        log.append(TurnRecord(turn_number=1, player=2, card=Card.GUARD, target=3, guess=Card.KING))
        self.assertEqual(len(log), 2)
        self.assertEqual(log.record(1).guess, Card.KING)
        with self.assertRaises(ValueError):
            log.append(TurnRecord(turn_number=5, player=3, card=Card.PRIEST, target=1))

    def test_records_are_immutable(self):
        record = TurnRecord(turn_number=0, player=1, card=Card.GUARD, target=2, guess=3)
        with self.assertRaises(Exception):
            record.card = Card.KING
        self.assertFalse(record.there_was_a_knockout)
        self.assertEqual(record.to_dict()["target"], 2)
        self.assertIn("GUARD", repr(record))


if __name__ == "__main__":
    unittest.main()
