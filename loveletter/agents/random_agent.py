"""
Random agent that makes random legal plays.
Useful for testing and as a baseline strategy.
"""

import random
from typing import Optional

from loveletter.agents.base_agent import Action, BaseAgent
from loveletter.data_structures import Card, TARGETED_CARDS
from loveletter.game import Game
from loveletter.player import Player


class RandomAgent(BaseAgent):
    """
    Agent that makes random legal plays.

    Strategy:
    1. Pick a random playable card (never the Princess unless forced)
    2. Pick a random valid target for it
    3. Guards guess a random value in 2..8
    """

    def __init__(self, player: Player, seed: Optional[int] = None):
        """
        Initialize a random agent.

        Args:
            player: The Player object to control
            seed: Seed of the agent's own random generator
        """
        super().__init__(player, name="RandomAgent")
        self.rng = random.Random(seed)

    def choose_action(self, game: Game) -> Action:
        card = self.rng.choice(self.get_playable_cards())

        target = None
        if card in TARGETED_CARDS:
            targets = self.get_valid_targets(game, card)
            if targets:
                target = self.rng.choice(targets)

        guess = None
        if card == Card.GUARD and target is not None:
            guess = self.rng.randint(2, game.config.n_values)

        return card, target, guess
