"""
Utility functions for Love Letter game setup and printing.
"""

import random
from typing import List, Optional

from config.game_config import GameConfig, CARD_NAMES, PLAYER_NAMES
from loveletter.data_structures import TurnLog


def build_deck(config: GameConfig, rng: Optional[random.Random] = None) -> List[int]:
    """
    Build and shuffle the deck. Cards are drawn from the end of the list.

    Args:
        config: Game configuration
        rng: Random generator (a fresh one if omitted)

    Returns:
        Shuffled list of card values
    """
    rng = rng if rng is not None else random.Random()
    deck = []
    for value, count in config.card_distribution.items():
        deck.extend([value] * count)
    rng.shuffle(deck)
    return deck


def card_name(value: Optional[int]) -> str:
    if value is None:
        return "-"
    return CARD_NAMES.get(value, f"Card {value}")


def format_hand(hand: List[int]) -> str:
    return ", ".join(card_name(v) for v in hand) if hand else "(empty)"


def player_name(seat: int) -> str:
    return PLAYER_NAMES[seat] if seat < len(PLAYER_NAMES) else f"Player {seat}"


def print_turn_log(turn_log: TurnLog):
    """Print every record of the round."""
    print("\n" + "="*80)
    print("TURN LOG")
    print("="*80)
    for record in turn_log:
        print(f"  {record}")


def print_table(players):
    """Print the real hands (simulation only)."""
    for player in players:
        status = "" if player.active else " [OUT]"
        shield = " [PROTECTED]" if player.protected else ""
        print(f"  {player_name(player.seat):>8}: {format_hand(player.hand)}{status}{shield}")
