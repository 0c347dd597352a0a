"""
Agent interface for Love Letter seats.
Agents decide which card to play, on whom, and what to guess.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from loveletter.data_structures import Card
from loveletter.game import Game
from loveletter.player import Player

Action = Tuple[int, Optional[int], Optional[int]]


class BaseAgent(ABC):
    """
    Decides the plays of one seat.

    The agent reads the public game state and its player's perceptor; the
    Game applies and validates whatever it chooses.

    Attributes:
        player: The Player object this agent controls
        name: Human-readable name for this agent type
    """

    def __init__(self, player: Player, name: str = "BaseAgent"):
        """
        Bind the agent to its seat.

        Args:
            player: The Player object to control
            name: Name of this agent type
        """
        self.player = player
        self.name = name

    @abstractmethod
    def choose_action(self, game: Game) -> Action:
        """
        Choose what to play based on current game state.

        Args:
            game: Current game state (the player holds two cards)

        Returns:
            Tuple of (card, target, guess); target and guess may be None
        """
        pass

    def get_playable_cards(self) -> List[int]:
        """
        Cards the rules allow to play. The Countess is forced next to the
        King or a Prince; the Princess is only played if nothing else is.
        """
        hand = self.player.hand
        if Card.COUNTESS in hand and (Card.KING in hand or Card.PRINCE in hand):
            return [Card.COUNTESS]
        playable = sorted(set(c for c in hand if c != Card.PRINCESS))
        return playable if playable else list(hand)

    def get_valid_targets(self, game: Game, card: int) -> List[int]:
        return game.valid_targets(self.player.seat, card)

    def __repr__(self):
        return f"{self.name}(Player {self.player.seat})"
