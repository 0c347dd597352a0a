"""
Perceptor: the query surface a player (or its agent) uses to read beliefs.

A Perceptor follows the shared turn log through its own cursor and
interpreter, receives the owner's private card movements through the
observe_* hooks, and answers questions about the deck and the other hands.
"""

from typing import Dict, List, Optional

import numpy as np

from config.game_config import GameConfig
from loveletter.belief.knowledge_state import KnowledgeState
from loveletter.belief.turn_interpreter import TurnEventInterpreter
from loveletter.data_structures import BeliefStrategy, Card, TurnLog
from loveletter.errors import AnalysisInProgress, InvariantViolation, PreconditionViolation


class Perceptor:
    """
    Beliefs of one seat, updated from the public turn log.

    Attributes:
        my_seat: Seat of the owner
        turn_log: Shared, append-only log of the round
        strategy: Belief strategy chosen at construction
        knowledge: Underlying KnowledgeState
        interpreter: TurnEventInterpreter feeding the knowledge state
        round_abandoned: True after an invariant violation until the next reset
    """

    def __init__(self, my_seat: int, turn_log: TurnLog, config: GameConfig,
                 strategy: BeliefStrategy = BeliefStrategy.POSTERIORI):
        self.my_seat = my_seat
        self.turn_log = turn_log
        self.config = config
        self.strategy = strategy
        self.knowledge = KnowledgeState(my_seat, config, strategy)
        self.interpreter = TurnEventInterpreter(self.knowledge, config)
        self.round_abandoned = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def is_ready(self) -> bool:
        """False while a turn is being analysed."""
        return not self.interpreter.analyzing

    def reset_for_new_round(self):
        """Drop every belief and start following the log from its first record."""
        self._check_ready()
        self.knowledge.reset()
        self.interpreter.reset()
        self.round_abandoned = False

    def notify_turn_available(self):
        """
        Analyse every record appended since the last call.

        An invariant violation abandons the round: beliefs fall back to the
        prior and the rest of the round is ignored.
        """
        if self.round_abandoned:
            return
        try:
            self.interpreter.process_pending(self.turn_log)
        except AnalysisInProgress:
            raise
        except InvariantViolation as e:
            print(f"❌ P{self.my_seat} belief tracking failed at turn {self.interpreter.cursor}: {e}")
            print("   Falling back to prior beliefs until the next round.")
            self._abandon_round()

    def _abandon_round(self):
        self.knowledge.reset()
        self.interpreter.reset()
        self.interpreter.cursor = len(self.turn_log)
        self.round_abandoned = True

    def _check_ready(self):
        if self.interpreter.analyzing:
            raise AnalysisInProgress(f"P{self.my_seat} is analysing turn {self.interpreter.cursor}")

    def _tracking(self) -> bool:
        return not (self.round_abandoned or self.interpreter.finished)

    # ------------------------------------------------------------------
    # Private observations from the owner
    # ------------------------------------------------------------------

    def observe_draw(self, value: int):
        """The owner drew `value` from the deck (deal or start of turn)."""
        self._check_ready()
        if not self._tracking():
            return
        try:
            self.knowledge.condition_on_own_draw(value)
        except InvariantViolation as e:
            print(f"❌ P{self.my_seat} could not account for its draw: {e}")
            self._abandon_round()
            return
        self.knowledge.recalculate_marginals()

    def observe_play(self, value: int):
        """The owner is playing `value` from its hand."""
        self._check_ready()
        if not self._tracking():
            return
        if value not in self.knowledge.my_cards:
            raise PreconditionViolation(f"P{self.my_seat} plays {value} but holds {self.knowledge.my_cards}")
        self.knowledge.my_cards.remove(value)

    def observe_swap(self, received: int):
        """A King swapped the owner's card for `received`."""
        self._check_ready()
        if not self._tracking():
            return
        self.interpreter.note_swap(self.knowledge.my_cards[0], received)

    def observe_prince_redraw(self, value: int):
        """A Prince made the owner discard and draw `value`."""
        self._check_ready()
        if not self._tracking():
            return
        self.interpreter.note_prince_redraw(value)

    def observe_learned_hand(self, seat: int, value: int):
        """The owner saw `seat`'s hand with a Priest."""
        self._check_ready()
        if not self._tracking():
            return
        self.interpreter.note_learned_hand(seat, value)

    @property
    def my_hand(self) -> List[int]:
        return list(self.knowledge.my_cards)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _check_value(self, value: int):
        if not 1 <= value <= self.config.n_values:
            raise PreconditionViolation(f"Card value {value} outside 1..{self.config.n_values}")

    def hand_distribution(self, seat: int) -> np.ndarray:
        self._check_ready()
        return self.knowledge.hand_distribution(seat).copy()

    def deck_distribution(self) -> np.ndarray:
        self._check_ready()
        return self.knowledge.deck_distribution.copy()

    def probability_in_deck(self, value: int) -> float:
        """Probability that the next card drawn has `value`."""
        self._check_value(value)
        return float(self.deck_distribution()[value - 1])

    def probability_in_hand(self, seat: int, value: int) -> float:
        self._check_value(value)
        return float(self.hand_distribution(seat)[value - 1])

    def expected_hand_value(self, seat: int) -> float:
        distribution = self.hand_distribution(seat)
        return float(np.dot(distribution, np.arange(1, len(distribution) + 1)))

    def expected_deck_value(self) -> float:
        distribution = self.deck_distribution()
        return float(np.dot(distribution, np.arange(1, len(distribution) + 1)))

    def most_likely_hand_value(self, seat: int) -> int:
        """Most probable value of the seat's hand (lowest value on ties)."""
        return int(np.argmax(self.hand_distribution(seat))) + 1

    def certain_hand_value(self, seat: int, threshold: Optional[float] = None) -> Optional[int]:
        """
        Most likely value of the seat's hand if its probability reaches the
        threshold (config.certainty_threshold by default), otherwise None.
        """
        if threshold is None:
            threshold = self.config.certainty_threshold
        distribution = self.hand_distribution(seat)
        value = int(np.argmax(distribution)) + 1
        if distribution[value - 1] >= threshold:
            return value
        return None

    def is_eliminated(self, seat: int) -> bool:
        self._check_ready()
        return seat in self.knowledge.eliminated

    @property
    def hidden_opponents(self):
        return self.knowledge.hidden_seats

    def player_knows_my_hand(self, seat: int) -> Optional[int]:
        """Value `seat` knows the owner holds, if any."""
        self._check_ready()
        return self.knowledge.knows_my_hand.get(seat)

    def someone_knows_my_hand(self) -> bool:
        self._check_ready()
        return any(seat not in self.knowledge.eliminated for seat in self.knowledge.knows_my_hand)

    def times_targeted_me(self, seat: int) -> int:
        self._check_ready()
        return self.knowledge.targeted_me.get(seat, 0)

    def knockouts_by(self, seat: int) -> int:
        self._check_ready()
        return self.knowledge.knockouts.get(seat, 0)

    def revealed_card_count(self, value: int) -> int:
        """Copies of `value` seen face up this round."""
        self._check_ready()
        self._check_value(value)
        return self.knowledge.revealed_count(value)

    def summary(self) -> Dict:
        """Snapshot of the current beliefs, keyed by seat."""
        self._check_ready()
        return {
            "seat": self.my_seat,
            "strategy": self.strategy.value,
            "my_hand": self.my_hand,
            "unaccounted": list(self.knowledge.counter.remaining()),
            "deck": [round(float(p), 4) for p in self.knowledge.deck_distribution],
            "hands": {
                seat: [round(float(p), 4) for p in dist]
                for seat, dist in self.knowledge.hand_distributions.items()
            },
        }

    def print_beliefs(self):
        """Print the deck and hand distributions in a readable table."""
        self._check_ready()
        names = [Card(v).name[:5] for v in range(1, self.config.n_values + 1)]
        print(f"\n{'='*80}")
        print(f"BELIEFS OF P{self.my_seat} ({self.strategy.value}) - holding {[Card(v).name for v in self.my_hand]}")
        print(f"{'='*80}")
        print(f"{'':>10} " + " ".join(f"{n:>7}" for n in names))
        print(f"{'Deck':>10} " + " ".join(f"{p:7.3f}" for p in self.knowledge.deck_distribution))
        for seat, dist in sorted(self.knowledge.hand_distributions.items()):
            print(f"{'P' + str(seat):>10} " + " ".join(f"{p:7.3f}" for p in dist))
        for seat in sorted(self.knowledge.eliminated):
            print(f"{'P' + str(seat):>10} knocked out")
        print(f"Unaccounted: {self.knowledge.counter.remaining()}")
