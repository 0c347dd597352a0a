"""
Core data structures for the Love Letter belief tracker.
These classes represent the fundamental information units in the game.
"""

from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, asdict
from enum import Enum, IntEnum

from loveletter.errors import ExhaustedCard, PreconditionViolation


class Card(IntEnum):
    """Card values of the base game. 0 means no/unknown card."""
    NONE = 0
    GUARD = 1
    PRIEST = 2
    BARON = 3
    HANDMAID = 4
    PRINCE = 5
    KING = 6
    COUNTESS = 7
    PRINCESS = 8


# Cards that must name another player as target
TARGETED_CARDS = (Card.GUARD, Card.PRIEST, Card.BARON, Card.PRINCE, Card.KING)


class BeliefStrategy(Enum):
    """
    How a perceptor turns observations into beliefs.

    PRIORI: base deck distribution, observations ignored
    NAIVE: share of each value among the cards not yet seen
    POSTERIORI: joint Bayesian filtering of the hidden hands
    """
    PRIORI = "priori"
    NAIVE = "naive"
    POSTERIORI = "posteriori"


@dataclass(frozen=True)
class TurnRecord:
    """
    Public record of a single resolved turn.
    This is observable by all players and forms the basis of belief updates.

    Attributes:
        turn_number: Index of the turn in the round (0-indexed)
        player: Seat of the player who played the card
        card: Value of the card played
        target: Seat targeted by the card, if any
        guess: Value named by a Guard, if any
        no_effect: True if the card was played without effect (every target protected)
        knocked_out: Seat knocked out by this turn, if any
        additional_discard: Card discarded as a side effect (knocked out hand, Prince discard)
    """
    turn_number: int
    player: int
    card: int
    target: Optional[int] = None
    guess: Optional[int] = None
    no_effect: bool = False
    knocked_out: Optional[int] = None
    additional_discard: Optional[int] = None

    @property
    def there_was_a_knockout(self) -> bool:
        return self.knocked_out is not None

    def to_dict(self) -> Dict:
        return asdict(self)

    def __repr__(self):
        text = f"Turn {self.turn_number}: P{self.player} plays {Card(self.card).name}"
        if self.target is not None:
            text += f" on P{self.target}"
        if self.guess is not None:
            text += f" guessing {Card(self.guess).name}"
        if self.no_effect:
            text += " [NO EFFECT]"
        if self.knocked_out is not None:
            text += f" [P{self.knocked_out} OUT]"
        if self.additional_discard is not None:
            text += f" (discards {Card(self.additional_discard).name})"
        return text


class TurnLog:
    """
    Append-only ordered list of turn records.
    Every perceptor reads it at its own pace through a cursor.
    """

    def __init__(self):
        self._records: List[TurnRecord] = []

    def append(self, record: TurnRecord):
        if record.turn_number != len(self._records):
            raise ValueError(
                f"Turn record out of order: expected turn {len(self._records)}, got {record.turn_number}"
            )
        self._records.append(record)

    def record(self, index: int) -> TurnRecord:
        return self._records[index]

    def clear(self):
        """Start a new round."""
        self._records = []

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self._records)


class UnaccountedCardCounter:
    """
    Tracks, per card value, how many copies have not been publicly observed.

    A card is accounted for once it is discarded face up or lands in the
    owner's own hand. Opponents' hands stay in the unaccounted pool, their
    content is described by the joint belief instead.

    Key formula:
    remaining(v) = copies(v) - discarded(v) - in_my_hand(v)
    """

    def __init__(self, card_counts: Tuple[int, ...]):
        """
        Initialize the counter with the full deck.

        Args:
            card_counts: Number of copies per card value, indexed by value - 1
        """
        self.card_counts = tuple(card_counts)
        self._remaining = list(self.card_counts)

    def _check_value(self, value: int):
        if not 1 <= value <= len(self.card_counts):
            raise PreconditionViolation(f"Card value {value} outside 1..{len(self.card_counts)}")

    def account_for(self, value: int):
        """
        Remove one copy of a value from the unaccounted pool.

        Raises:
            ExhaustedCard: If every copy of the value is already accounted for
        """
        self._check_value(value)
        if self._remaining[value - 1] <= 0:
            raise ExhaustedCard(value)
        self._remaining[value - 1] -= 1

    def return_to_pool(self, value: int):
        """
        Put one copy back into the pool.
        Only a King swap hides a card that was accounted for.
        """
        self._check_value(value)
        if self._remaining[value - 1] >= self.card_counts[value - 1]:
            raise PreconditionViolation(f"Card {value} was never accounted for")
        self._remaining[value - 1] += 1

    def count(self, value: int) -> int:
        self._check_value(value)
        return self._remaining[value - 1]

    def remaining(self) -> Tuple[int, ...]:
        """Read-only snapshot, indexed by value - 1."""
        return tuple(self._remaining)

    def total(self) -> int:
        return sum(self._remaining)

    def is_fully_accounted(self, value: int) -> bool:
        return self.count(value) == 0

    def reset(self):
        self._remaining = list(self.card_counts)

    def __repr__(self):
        counts = ", ".join(f"{v}:{c}" for v, c in enumerate(self._remaining, start=1))
        return f"UnaccountedCardCounter({counts})"
