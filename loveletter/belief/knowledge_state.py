"""
KnowledgeState: everything one player believes about the hidden cards.

Holds the unaccounted card counter, the joint belief over the hidden
opponents' hands and the derived per-hand and deck distributions, and
implements the per-card filters that update them.

Accounting model:
- A card is accounted for when it becomes public (discarded) or enters the
  owner's hand. Opponent hands stay in the unaccounted pool.
- For any joint assignment h of the hidden hands, the deck holds exactly
  remaining - counts(h). Every filter is phrased in terms of that pool.
- sum(remaining) + len(my_cards) + len(discard_pile) == total cards.
"""

from typing import Dict, List, Optional, Set

import numpy as np

from config.game_config import GameConfig
from loveletter.belief.joint_belief import (
    JointBelief,
    base_deck_distribution,
    normalize_probabilities,
)
from loveletter.data_structures import BeliefStrategy, Card, UnaccountedCardCounter
from loveletter.errors import PreconditionViolation


class KnowledgeState:
    """
    Subjective belief of one seat about the deck and the other hands.

    Attributes:
        my_seat: Seat of the belief owner
        strategy: Which updates are applied (see BeliefStrategy)
        counter: Cards not yet publicly observed
        joint: Joint belief over the hidden (alive) opponents
        hand_distributions: Derived hand distribution per hidden opponent
        deck_distribution: Derived distribution of the next card drawn
        eliminated: Seats knocked out this round
        my_cards: Cards the owner holds
        discard_pile: Cards seen face up this round, in order
        knows_my_hand: Seat -> value that seat knows the owner holds
        consistency_warnings: Number of degenerate renormalizations this round
    """

    def __init__(self, my_seat: int, config: GameConfig,
                 strategy: BeliefStrategy = BeliefStrategy.POSTERIORI):
        if not 0 <= my_seat < config.n_players:
            raise PreconditionViolation(f"Seat {my_seat} outside 0..{config.n_players - 1}")
        self.my_seat = my_seat
        self.config = config
        self.strategy = strategy
        self.card_counts = config.card_counts
        self.n_values = config.n_values
        self.likelihood = np.array(config.likelihood_of_play, dtype=float)
        self.counter = UnaccountedCardCounter(self.card_counts)
        self.opponents = [s for s in range(config.n_players) if s != my_seat]
        self.reset()

    @property
    def filters_enabled(self) -> bool:
        return self.strategy is BeliefStrategy.POSTERIORI

    def reset(self):
        """Forget the round: full deck, every opponent hidden, nothing seen."""
        self.counter.reset()
        self.joint = JointBelief.prior(self.opponents, self.card_counts)
        self.eliminated: Set[int] = set()
        self.my_cards: List[int] = []
        self.discard_pile: List[int] = []
        self.knows_my_hand: Dict[int, int] = {}
        self.targeted_me: Dict[int, int] = {s: 0 for s in self.opponents}
        self.knockouts: Dict[int, int] = {s: 0 for s in range(self.config.n_players)}
        self.consistency_warnings = 0
        self.recalculate_marginals()

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    @property
    def hidden_seats(self):
        return self.joint.seats

    def deck_size(self) -> int:
        """Cards left in the draw pile."""
        return self.counter.total() - len(self.joint.seats)

    def account_for(self, value: int):
        self.counter.account_for(value)

    def record_discard(self, value: int):
        self._check_value(value)
        self.discard_pile.append(value)

    def revealed_count(self, value: int) -> int:
        return self.discard_pile.count(value)

    def note_targeted_me(self, seat: int):
        self.targeted_me[seat] = self.targeted_me.get(seat, 0) + 1

    def note_knockout(self, seat: int):
        self.knockouts[seat] = self.knockouts.get(seat, 0) + 1

    def forget_my_hand_knowledge(self):
        """The owner just played: whatever the others knew about its hand is stale."""
        self.knows_my_hand.clear()

    def _check_value(self, value: int):
        if value is None or not 1 <= value <= self.n_values:
            raise PreconditionViolation(f"Card value {value} outside 1..{self.n_values}")

    def _check_hidden(self, seat: int):
        if seat == self.my_seat:
            raise PreconditionViolation(f"Seat {seat} is the belief owner, not an opponent")
        if seat in self.eliminated:
            raise PreconditionViolation(f"Seat {seat} is already knocked out")
        self.joint.axis(seat)

    def _warn(self, message: str):
        self.consistency_warnings += 1
        print(f"⚠️  P{self.my_seat} beliefs inconsistent: {message}. Resetting to the deck prior.")

    def _renormalize(self, operation: str):
        if not self.joint.normalize():
            self._warn(f"no probability mass left after {operation}")

    def _deck_pool(self, remaining: np.ndarray, idx) -> Optional[np.ndarray]:
        """Cards left in the deck if the hidden hands are `idx`, None if impossible."""
        pool = remaining.copy()
        for i in idx:
            pool[i] -= 1
        if (pool < 0).any():
            return None
        return pool

    def _remaining(self) -> np.ndarray:
        return np.array(self.counter.remaining(), dtype=float)

    def _retarget(self, idx, axis: int, value: int) -> tuple:
        new_idx = list(idx)
        new_idx[axis] = value - 1
        return tuple(new_idx)

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def filter_on_played_card(self, opponent: int, played: int):
        """
        The opponent played `played`, either the card it held or the one it
        just drew. Moves the opponent's axis to the card it kept, weighted by
        the deck composition and the likelihood of play. The played card is
        accounted for by the caller afterwards.
        """
        self._check_hidden(opponent)
        self._check_value(played)
        if not self.filters_enabled:
            return

        axis = self.joint.axis(opponent)
        remaining = self._remaining()
        updated = np.zeros_like(self.joint.table)

        for idx, p in self.joint.assignments():
            pool = self._deck_pool(remaining, idx)
            if pool is None:
                continue
            deck_size = pool.sum()
            if deck_size <= 0:
                continue
            held = idx[axis] + 1
            for drawn in range(1, self.n_values + 1):
                copies = pool[drawn - 1]
                if copies <= 0:
                    continue
                if played == held:
                    retained = drawn
                elif played == drawn:
                    retained = held
                else:
                    continue
                weight = copies / deck_size * self.likelihood[played - 1, retained - 1]
                updated[self._retarget(idx, axis, retained)] += p * weight

        self.joint.table = updated
        self._renormalize(f"P{opponent} played {Card(played).name}")

    def knockout_filter(self, opponent: int, discarded: int):
        """The opponent is out, holding `discarded`. Its axis is removed."""
        self._check_hidden(opponent)
        self._check_value(discarded)
        self.account_for(discarded)
        self.joint = self.joint.without(opponent, discarded)
        self.eliminated.add(opponent)
        self.hand_distributions.pop(opponent, None)
        self._renormalize(f"P{opponent} knocked out with {Card(discarded).name}")

    def guard_filter(self, target: int, guess: int):
        """A wrong Guard guess: the target does not hold `guess`."""
        self._check_hidden(target)
        if guess is None or not 2 <= guess <= self.n_values:
            raise PreconditionViolation(f"Guard cannot guess {guess}")
        if not self.filters_enabled:
            return
        self.joint.clear_value(target, guess)
        self._renormalize(f"Guard missed P{target} with {Card(guess).name}")

    def baron_filter_knockout(self, winner: int, loser: int, losers_value: int):
        """Baron comparison lost by `loser`: the winner holds more than `losers_value`."""
        self._check_hidden(winner)
        self.knockout_filter(loser, losers_value)
        if not self.filters_enabled:
            return
        self.joint.clear_up_to(winner, losers_value)
        self._renormalize(f"P{winner} beat {Card(losers_value).name}")

    def baron_filter_draw(self, player_a: int, player_b: int):
        """Baron comparison tied: both hold the same value."""
        self._check_hidden(player_a)
        self._check_hidden(player_b)
        if not self.filters_enabled:
            return
        self.joint.keep_diagonal(player_a, player_b)
        self._renormalize(f"Baron draw between P{player_a} and P{player_b}")

    def prince_filter(self, target: int, discarded: int):
        """
        The target discarded `discarded` and drew a replacement from the deck.
        Only assignments where the target held `discarded` survive, and the
        target's axis is redrawn from the deck that assignment leaves.
        """
        self._check_hidden(target)
        self._check_value(discarded)
        if self.filters_enabled:
            axis = self.joint.axis(target)
            remaining = self._remaining()
            updated = np.zeros_like(self.joint.table)
            for idx, p in self.joint.assignments():
                if idx[axis] != discarded - 1:
                    continue
                pool = self._deck_pool(remaining, idx)
                if pool is None:
                    continue
                deck_size = pool.sum()
                if deck_size < 1:
                    continue
                for drawn in range(1, self.n_values + 1):
                    copies = pool[drawn - 1]
                    if copies > 0:
                        updated[self._retarget(idx, axis, drawn)] += p * copies / deck_size
            self.joint.table = updated
        self.account_for(discarded)
        self._renormalize(f"P{target} redrew after discarding {Card(discarded).name}")

    def king_filter_with_me(self, opponent: int, my_before: int, my_after: int):
        """
        The owner swapped hands with the opponent: the opponent held `my_after`
        and now holds `my_before`.
        """
        self._check_hidden(opponent)
        self._check_value(my_before)
        self._check_value(my_after)
        if my_before not in self.my_cards:
            raise PreconditionViolation(f"Owner does not hold {Card(my_before).name}")
        if self.filters_enabled:
            self.joint.keep_only(opponent, my_after)
            self.joint.swap_values(opponent, my_before, my_after)
            self._renormalize(f"King swap with P{opponent}")
        self.counter.return_to_pool(my_before)
        self.account_for(my_after)
        self.my_cards.remove(my_before)
        self.my_cards.append(my_after)
        self.knows_my_hand[opponent] = my_after

    def king_filter(self, player: int, target: int):
        """Two opponents swapped hands."""
        self._check_hidden(player)
        self._check_hidden(target)
        if not self.filters_enabled:
            return
        self.joint.transpose(player, target)

    def certainty_filter(self, opponent: int, value: int):
        """The opponent's hand is known to be `value`."""
        self._check_hidden(opponent)
        self._check_value(value)
        if not self.filters_enabled:
            return
        self.joint.keep_only(opponent, value)
        self._renormalize(f"P{opponent} known to hold {Card(value).name}")

    def condition_on_own_draw(self, value: int):
        """
        The owner drew `value` from the deck. Assignments that leave fewer
        copies of `value` in the deck become less likely, then the card is
        accounted for.
        """
        self._check_value(value)
        if self.filters_enabled:
            remaining = self._remaining()
            for idx, p in self.joint.assignments():
                pool = self._deck_pool(remaining, idx)
                if pool is None or pool.sum() <= 0:
                    self.joint.table[idx] = 0.0
                else:
                    self.joint.table[idx] = p * pool[value - 1] / pool.sum()
            self._renormalize(f"drawing {Card(value).name}")
        self.account_for(value)
        self.my_cards.append(value)

    # ------------------------------------------------------------------
    # Derived distributions
    # ------------------------------------------------------------------

    def recalculate_marginals(self):
        """Recompute every hand distribution and the deck distribution."""
        base = np.array(base_deck_distribution(self.card_counts))

        if self.strategy is BeliefStrategy.PRIORI:
            self.hand_distributions = {seat: base.copy() for seat in self.joint.seats}
            self.deck_distribution = base.copy()
            return

        if self.strategy is BeliefStrategy.NAIVE:
            unseen = self._remaining()
            if normalize_probabilities(unseen) <= 0:
                unseen = base.copy()
            self.hand_distributions = {seat: unseen.copy() for seat in self.joint.seats}
            self.deck_distribution = unseen
            return

        hands = {}
        for seat in self.joint.seats:
            marginal = self.joint.marginal(seat)
            if normalize_probabilities(marginal) <= 0:
                self._warn(f"empty hand distribution for P{seat}")
                marginal = base.copy()
            hands[seat] = marginal

        deck = np.zeros(self.n_values)
        remaining = self._remaining()
        for idx, p in self.joint.assignments():
            pool = self._deck_pool(remaining, idx)
            if pool is None:
                continue
            deck_size = pool.sum()
            if deck_size > 0:
                deck += p * pool / deck_size
        if normalize_probabilities(deck) <= 0 and self.deck_size() > 0:
            self._warn("empty deck distribution")
            deck = base.copy()

        self.hand_distributions = hands
        self.deck_distribution = deck

    def hand_distribution(self, seat: int) -> np.ndarray:
        """
        Distribution of a seat's hand. The owner's own hand is certain
        (split evenly while holding two cards).
        """
        if seat == self.my_seat:
            distribution = np.zeros(self.n_values)
            for value in self.my_cards:
                distribution[value - 1] += 1.0 / len(self.my_cards)
            return distribution
        if seat in self.eliminated:
            raise PreconditionViolation(f"Seat {seat} is knocked out, its hand is not tracked")
        if seat not in self.hand_distributions:
            raise PreconditionViolation(f"Seat {seat} is not at the table")
        return self.hand_distributions[seat]

    def __repr__(self):
        return (f"KnowledgeState(P{self.my_seat}, {self.strategy.value}, hidden={self.joint.seats}, "
                f"unaccounted={self.counter.remaining()})")
