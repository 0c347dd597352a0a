"""
Player class represents a seat at the Love Letter table.
Each player holds its cards and one perceptor per belief strategy.
"""

from typing import Dict, List, Optional, Sequence

from config.game_config import GameConfig
from loveletter.belief.perceptor import Perceptor
from loveletter.data_structures import BeliefStrategy, TurnLog


class Player:
    """
    Represents a player in the game.

    Each player has:
    - A seat
    - A hand (one card between turns, two while playing)
    - Round status (active, protected by a Handmaid)
    - One perceptor per belief strategy, all following the same turn log

    Attributes:
        seat: Seat index around the table
        hand: Cards currently held (private)
        active: False once knocked out this round
        protected: True while a Handmaid protects the player
        discards: Cards this player put face up this round
        perceptors: Perceptor per strategy (created by Game)
        config: Game configuration
    """

    def __init__(self, seat: int, config: GameConfig,
                 strategies: Sequence[BeliefStrategy] = (BeliefStrategy.POSTERIORI,)):
        """
        Initialize a player.

        Args:
            seat: Seat index (player 0 starts the round)
            config: Game configuration
            strategies: Belief strategies to track; the first one is the main perceptor
        """
        if not strategies:
            raise ValueError("A player needs at least one belief strategy")
        self.seat = seat
        self.config = config
        self.strategies = tuple(strategies)
        self.hand: List[int] = []
        self.active = True
        self.protected = False
        self.discards: List[int] = []
        self.perceptors: Dict[BeliefStrategy, Perceptor] = {}

    def attach_turn_log(self, turn_log: TurnLog):
        """Create the perceptors. Called once by Game."""
        self.perceptors = {
            strategy: Perceptor(self.seat, turn_log, self.config, strategy)
            for strategy in self.strategies
        }

    @property
    def perceptor(self) -> Optional[Perceptor]:
        """Perceptor of the first strategy."""
        return self.perceptors.get(self.strategies[0])

    def reset_for_round(self):
        self.hand = []
        self.active = True
        self.protected = False
        self.discards = []
        for perceptor in self.perceptors.values():
            perceptor.reset_for_new_round()

    def draw(self, card: int):
        self.hand.append(card)
        for perceptor in self.perceptors.values():
            perceptor.observe_draw(card)

    def play(self, card: int):
        """
        Remove a card from the hand and put it face up.

        Raises:
            ValueError: If the card is not in hand
        """
        if card not in self.hand:
            raise ValueError(f"Player {self.seat} does not hold card {card} (hand: {self.hand})")
        self.hand.remove(card)
        self.discards.append(card)
        for perceptor in self.perceptors.values():
            perceptor.observe_play(card)

    def learn_hand(self, seat: int, card: int):
        for perceptor in self.perceptors.values():
            perceptor.observe_learned_hand(seat, card)

    def swap_hand(self, card: int) -> int:
        """Give away the held card and take `card`. Returns the card given away."""
        given = self.hand[0]
        for perceptor in self.perceptors.values():
            perceptor.observe_swap(card)
        self.hand = [card]
        return given

    def discard_hand(self) -> int:
        card = self.hand.pop()
        self.discards.append(card)
        return card

    def redraw(self, card: int):
        """Take a replacement card after a Prince discard."""
        self.hand = [card]
        for perceptor in self.perceptors.values():
            perceptor.observe_prince_redraw(card)

    def knock_out(self):
        self.discards.extend(self.hand)
        self.hand = []
        self.active = False
        self.protected = False

    def on_turn_available(self):
        for perceptor in self.perceptors.values():
            perceptor.notify_turn_available()

    def __repr__(self):
        status = "active" if self.active else "out"
        if self.protected:
            status += ", protected"
        return f"Player {self.seat} ({status}): {self.hand}"
