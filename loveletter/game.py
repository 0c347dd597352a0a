"""
Game class manages a Love Letter round, enforces the rules, and publishes
every resolved turn to the players' perceptors.
"""

import random
from typing import Callable, List, Optional

import numpy as np

from config.game_config import GameConfig
from loveletter.data_structures import Card, TARGETED_CARDS, TurnLog, TurnRecord
from loveletter.player import Player
from loveletter.statistics import PlayStatistics
from loveletter.utils import build_deck


class Game:
    """
    Manages round state, validates plays, and broadcasts turns to all players.

    A round:
    - Every player is dealt one card, seat `first_seat` starts
    - On its turn a player draws, plays one of its two cards and resolves it
    - The round ends when at most one card is left in the deck at the start of
      a turn, or when only one player is still in

    The Game class is the single source of truth for:
    - The deck and the real hands
    - The public turn log
    - Rule enforcement

    Attributes:
        players: List of Player objects, indexed by seat
        config: Game configuration
        turn_log: Public log of the current round
        deck: Remaining cards, drawn from the end
        current_seat: Seat whose turn it is
        round_over: Whether the round has ended
        winner: Seat of the round winner, once decided
        play_statistics: (played, retained) counts if config.collect_play_statistics
    """

    def __init__(self, players: List[Player], config: GameConfig, seed: Optional[int] = None):
        """
        Initialize a game and attach every player's perceptors to its turn log.

        Args:
            players: List of Player objects, one per seat
            config: Game configuration
            seed: Random seed for the shuffles
        """
        if len(players) != config.n_players:
            raise ValueError(f"Expected {config.n_players} players, got {len(players)}")
        self.players = players
        self.config = config
        self.rng = random.Random(seed)
        self.turn_log = TurnLog()
        self.deck: List[int] = []
        self.current_seat = 0
        self.round_over = True
        self.winner: Optional[int] = None
        self.play_statistics = PlayStatistics(config.n_values) if config.collect_play_statistics else None
        self.turn_listeners: List[Callable[["Game", TurnRecord], None]] = []

        for player in self.players:
            player.attach_turn_log(self.turn_log)

    # ------------------------------------------------------------------
    # Round flow
    # ------------------------------------------------------------------

    def start_round(self, first_seat: int = 0, deck: Optional[List[int]] = None):
        """
        Shuffle (or use the given deck), reset every player and deal.

        Args:
            first_seat: Seat playing first
            deck: Optional fixed deck, drawn from the end
        """
        if deck is not None:
            expected = sorted(v for v in self.config.card_values for _ in range(self.config.get_copies(v)))
            if sorted(deck) != expected:
                raise ValueError("Deck does not match the configured card distribution")
            self.deck = list(deck)
        else:
            self.deck = build_deck(self.config, self.rng)
        self.turn_log.clear()
        self.round_over = False
        self.winner = None
        for player in self.players:
            player.reset_for_round()
        for offset in range(self.config.n_players):
            seat = (first_seat + offset) % self.config.n_players
            self.players[seat].draw(self.deck.pop())
        self.current_seat = first_seat

    def begin_turn(self) -> Player:
        """
        Draw a card for the current player.

        Returns:
            The player who must now play
        """
        if self.is_round_over():
            raise ValueError("Round is over")
        player = self.players[self.current_seat]
        player.protected = False
        player.draw(self.deck.pop())
        return player

    def play_turn(self, card: int, target: Optional[int] = None, guess: Optional[int] = None) -> TurnRecord:
        """
        Resolve the current player's play and publish it.

        Args:
            card: Card played (must be in the player's hand)
            target: Targeted seat, for Guard/Priest/Baron/Prince/King
            guess: Value named by a Guard

        Returns:
            The published TurnRecord

        Raises:
            ValueError: If the play breaks the rules
        """
        player = self.players[self.current_seat]
        no_effect = self._validate_play(player, card, target, guess)

        player.play(card)
        if self.play_statistics is not None:
            self.play_statistics.record(card, player.hand[0])

        knocked_out = None
        additional_discard = None
        if not no_effect:
            knocked_out, additional_discard = self._resolve(player, card, target, guess)
        else:
            target = None
            guess = None

        record = TurnRecord(
            turn_number=len(self.turn_log),
            player=player.seat,
            card=card,
            target=target,
            guess=guess if card == Card.GUARD else None,
            no_effect=no_effect,
            knocked_out=knocked_out,
            additional_discard=additional_discard,
        )
        self.turn_log.append(record)
        self._broadcast_turn(record)

        if self.config.verbose:
            print(record)

        self._advance()
        return record

    def _resolve(self, player: Player, card: int, target: Optional[int], guess: Optional[int]):
        """Apply the card effect. Returns (knocked_out, additional_discard)."""
        victim = self.players[target] if target is not None else None

        if card == Card.GUARD:
            if victim.hand[0] == guess:
                discarded = victim.hand[0]
                victim.knock_out()
                return victim.seat, discarded

        elif card == Card.PRIEST:
            player.learn_hand(victim.seat, victim.hand[0])

        elif card == Card.BARON:
            mine, theirs = player.hand[0], victim.hand[0]
            if mine != theirs:
                loser = player if mine < theirs else victim
                discarded = loser.hand[0]
                loser.knock_out()
                return loser.seat, discarded

        elif card == Card.HANDMAID:
            player.protected = True

        elif card == Card.PRINCE:
            discarded = victim.discard_hand()
            if discarded == Card.PRINCESS:
                victim.knock_out()
                return victim.seat, discarded
            victim.redraw(self.deck.pop())
            return None, discarded

        elif card == Card.KING:
            given = player.hand[0]
            received = victim.hand[0]
            player.swap_hand(received)
            victim.swap_hand(given)

        elif card == Card.PRINCESS:
            discarded = player.hand[0]
            player.knock_out()
            return player.seat, discarded

        return None, None

    def _validate_play(self, player: Player, card: int, target: Optional[int], guess: Optional[int]) -> bool:
        """
        Check a play against the rules.

        Returns:
            True if the card is played without effect (no valid target)
        """
        if self.round_over:
            raise ValueError("Round is over")
        if len(player.hand) != 2:
            raise ValueError(f"Player {player.seat} must draw before playing")
        if card not in player.hand:
            raise ValueError(f"Player {player.seat} does not hold card {card}")
        if card != Card.COUNTESS and Card.COUNTESS in player.hand and \
                (Card.KING in player.hand or Card.PRINCE in player.hand):
            raise ValueError("The Countess must be played when held with the King or a Prince")

        if card not in TARGETED_CARDS:
            if target is not None:
                raise ValueError(f"{Card(card).name} takes no target")
            return False

        targets = self.valid_targets(player.seat, card)
        if not targets:
            if target is not None:
                raise ValueError(f"Every opponent is protected, {Card(card).name} has no target")
            return True
        if target not in targets:
            raise ValueError(f"Invalid target {target} for {Card(card).name} (valid: {targets})")
        if card == Card.GUARD and (guess is None or not 2 <= guess <= self.config.n_values):
            raise ValueError(f"Guard must guess a value in 2..{self.config.n_values}, got {guess}")
        return False

    def valid_targets(self, seat: int, card: int) -> List[int]:
        """Seats `card` may target when played by `seat`."""
        targets = [p.seat for p in self.players
                   if p.seat != seat and p.active and not p.protected]
        if card == Card.PRINCE:
            targets.append(seat)
        return targets

    def _broadcast_turn(self, record: TurnRecord):
        for player in self.players:
            player.on_turn_available()
        for listener in self.turn_listeners:
            listener(self, record)

    def _advance(self):
        if self.is_round_over():
            self._finish_round()
            return
        seat = self.current_seat
        for _ in range(self.config.n_players):
            seat = (seat + 1) % self.config.n_players
            if self.players[seat].active:
                break
        self.current_seat = seat

    def _finish_round(self):
        self.round_over = True
        contenders = self.active_seats()
        # Highest card wins, ties go to the highest total of discards
        self.winner = max(
            contenders,
            key=lambda s: (self.players[s].hand[0], sum(self.players[s].discards))
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def is_round_over(self) -> bool:
        return self.round_over or len(self.deck) <= 1 or len(self.active_seats()) <= 1

    def active_seats(self) -> List[int]:
        return [p.seat for p in self.players if p.active]

    def deck_composition(self) -> Optional[np.ndarray]:
        """Share of each value in the remaining deck (None if empty)."""
        if not self.deck:
            return None
        counts = np.bincount(self.deck, minlength=self.config.n_values + 1)[1:]
        return counts / counts.sum()

    def get_game_state(self):
        return {
            "current_seat": self.current_seat,
            "deck_size": len(self.deck),
            "active": self.active_seats(),
            "turns": len(self.turn_log),
            "round_over": self.round_over,
            "winner": self.winner,
        }
