"""
Smart agent that plays from its perceptor's beliefs.
"""

from typing import List, Optional

from loveletter.agents.base_agent import Action, BaseAgent
from loveletter.data_structures import Card
from loveletter.game import Game
from loveletter.player import Player


class SmartAgent(BaseAgent):
    """
    Agent that uses its main perceptor to aim Guards and Barons.

    Strategy:
    1. Play a Guard if some opponent's hand is nearly certain (and name it).
    2. Play a Baron if the card kept beats the lowest expected opponent hand.
    3. Otherwise keep the higher card.
    Targets: Princes go to the likeliest Princess holder, Priests and Kings to
    the opponent we know least about.
    """

    def __init__(self, player: Player):
        super().__init__(player, name="SmartAgent")

    def choose_action(self, game: Game) -> Action:
        playable = self.get_playable_cards()
        if len(playable) == 1:
            card = playable[0]
        elif Card.GUARD in playable and self._guard_target(game) is not None:
            card = Card.GUARD
        elif Card.BARON in playable and self._baron_target(game, self._kept(Card.BARON)) is not None:
            card = Card.BARON
        else:
            card = min(playable)
        return self._aim(game, card)

    def _kept(self, card: int) -> int:
        hand = self.player.hand
        return hand[1] if hand[0] == card else hand[0]

    def _opponents(self, game: Game, card: int) -> List[int]:
        return [s for s in self.get_valid_targets(game, card) if s != self.player.seat]

    def _guard_target(self, game: Game) -> Optional[int]:
        perceptor = self.player.perceptor
        best, best_p = None, 0.0
        for seat in self._opponents(game, Card.GUARD):
            p = float(perceptor.hand_distribution(seat)[1:].max())
            if p > best_p:
                best, best_p = seat, p
        return best if best_p >= game.config.certainty_threshold else None

    def _baron_target(self, game: Game, kept: int) -> Optional[int]:
        perceptor = self.player.perceptor
        candidates = self._opponents(game, Card.BARON)
        if not candidates:
            return None
        seat = min(candidates, key=perceptor.expected_hand_value)
        return seat if perceptor.expected_hand_value(seat) < kept else None

    def _aim(self, game: Game, card: int) -> Action:
        perceptor = self.player.perceptor
        opponents = self._opponents(game, card)

        if card == Card.PRINCE:
            if not opponents:
                return card, self.player.seat, None
            seat = max(opponents, key=lambda s: perceptor.probability_in_hand(s, Card.PRINCESS))
            return card, seat, None

        if card not in (Card.GUARD, Card.PRIEST, Card.BARON, Card.KING) or not opponents:
            return card, None, None

        if card == Card.GUARD:
            seat = self._guard_target(game)
            if seat is None:
                seat = max(opponents, key=lambda s: perceptor.hand_distribution(s)[1:].max())
            guess = int(perceptor.hand_distribution(seat)[1:].argmax()) + 2
            return card, seat, guess

        if card == Card.BARON:
            seat = self._baron_target(game, self._kept(card))
            if seat is None:
                seat = min(opponents, key=perceptor.expected_hand_value)
            return card, seat, None

        seat = min(opponents, key=lambda s: perceptor.hand_distribution(s).max())
        return card, seat, None
