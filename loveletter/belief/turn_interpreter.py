"""
TurnEventInterpreter: replays the public turn log into a KnowledgeState.

Each record is analysed exactly once, in order. The owner's private
observations (what a Priest revealed, what a King swap gave, what a Prince
made it redraw) are reported beforehand through the note_* methods and
consumed by the matching record.
"""

import threading
from typing import Optional, Tuple

from config.game_config import GameConfig
from loveletter.belief.knowledge_state import KnowledgeState
from loveletter.data_structures import Card, TurnLog, TurnRecord
from loveletter.errors import AnalysisInProgress, PreconditionViolation


class TurnEventInterpreter:
    """
    Drives the filters of a KnowledgeState from turn records.

    States: Idle -> Analyzing -> Idle. Analysis is not reentrant.

    Attributes:
        knowledge: Belief state being updated
        cursor: Index of the next record to analyse
        finished: True once the owner is knocked out (later records are skipped)
    """

    def __init__(self, knowledge: KnowledgeState, config: GameConfig):
        self.knowledge = knowledge
        self.config = config
        self.my_seat = knowledge.my_seat
        self._lock = threading.Lock()
        self.reset()

    def reset(self):
        self.cursor = 0
        self.finished = False
        self._learned: Optional[Tuple[int, int]] = None
        self._swap: Optional[Tuple[int, int]] = None
        self._prince_redraw: Optional[int] = None

    @property
    def analyzing(self) -> bool:
        return self._lock.locked()

    # Private observations, consumed by the next matching record

    def note_learned_hand(self, seat: int, value: int):
        self._learned = (seat, value)

    def note_swap(self, my_before: int, my_after: int):
        self._swap = (my_before, my_after)

    def note_prince_redraw(self, value: int):
        self._prince_redraw = value

    def process_pending(self, turn_log: TurnLog) -> int:
        """
        Analyse every record not seen yet.

        Returns:
            Number of records analysed

        Raises:
            AnalysisInProgress: If called while already analysing
        """
        if not self._lock.acquire(blocking=False):
            raise AnalysisInProgress(f"P{self.my_seat} is already analysing turn {self.cursor}")
        try:
            analysed = 0
            while self.cursor < len(turn_log):
                record = turn_log.record(self.cursor)
                if not self.finished:
                    self.analyze(record)
                self.cursor += 1
                analysed += 1
            return analysed
        finally:
            self._lock.release()

    def analyze(self, record: TurnRecord):
        """Apply one turn record to the knowledge state."""
        know = self.knowledge
        me = self.my_seat

        if self.config.verbose:
            print(f"  P{me} analysing {record}")

        if record.knocked_out == me:
            # Nothing left to decide this round
            self.finished = True
            return

        my_turn = record.player == me
        if my_turn:
            know.forget_my_hand_knowledge()
        else:
            # Playing the Princess is never voluntary
            if record.card != Card.PRINCESS:
                know.filter_on_played_card(record.player, record.card)
            know.account_for(record.card)
            if record.target == me:
                know.note_targeted_me(record.player)
        if record.knocked_out is not None and record.knocked_out != record.player:
            know.note_knockout(record.player)
        know.record_discard(record.card)

        if record.there_was_a_knockout and record.card != Card.BARON:
            know.knockout_filter(record.knocked_out, record.additional_discard)
            know.record_discard(record.additional_discard)
        elif not record.no_effect:
            self._dispatch(record)

        know.recalculate_marginals()

    def _dispatch(self, record: TurnRecord):
        card = record.card
        if card == Card.GUARD:
            self._guard(record)
        elif card == Card.PRIEST:
            self._priest(record)
        elif card == Card.BARON:
            self._baron(record)
        elif card == Card.PRINCE:
            self._prince(record)
        elif card == Card.KING:
            self._king(record)
        # Handmaid, Countess and Princess reveal nothing more

    def _guard(self, record: TurnRecord):
        if record.target != self.my_seat:
            self.knowledge.guard_filter(record.target, record.guess)

    def _priest(self, record: TurnRecord):
        know = self.knowledge
        if record.player == self.my_seat:
            if self._learned is None or self._learned[0] != record.target:
                raise PreconditionViolation(f"Priest on P{record.target} played without the peeked card")
            know.certainty_filter(record.target, self._learned[1])
            self._learned = None
        elif record.target == self.my_seat:
            know.knows_my_hand[record.player] = know.my_cards[0]

    def _baron(self, record: TurnRecord):
        know = self.knowledge
        me = self.my_seat
        if record.there_was_a_knockout:
            loser = record.knocked_out
            winner = record.target if loser == record.player else record.player
            know.record_discard(record.additional_discard)
            if winner == me:
                know.knockout_filter(loser, record.additional_discard)
            else:
                know.baron_filter_knockout(winner, loser, record.additional_discard)
        elif me in (record.player, record.target):
            other = record.target if record.player == me else record.player
            my_value = know.my_cards[0]
            know.certainty_filter(other, my_value)
            know.knows_my_hand[other] = my_value
        else:
            know.baron_filter_draw(record.player, record.target)

    def _prince(self, record: TurnRecord):
        know = self.knowledge
        know.record_discard(record.additional_discard)
        if record.target == self.my_seat:
            if self._prince_redraw is None:
                raise PreconditionViolation("Prince on the owner played without the redrawn card")
            if record.additional_discard not in know.my_cards:
                raise PreconditionViolation(
                    f"Owner discarded {record.additional_discard} but holds {know.my_cards}"
                )
            know.my_cards.remove(record.additional_discard)
            know.condition_on_own_draw(self._prince_redraw)
            self._prince_redraw = None
        else:
            know.prince_filter(record.target, record.additional_discard)

    def _king(self, record: TurnRecord):
        me = self.my_seat
        if me in (record.player, record.target):
            if self._swap is None:
                raise PreconditionViolation("King involving the owner played without the swapped cards")
            other = record.target if record.player == me else record.player
            my_before, my_after = self._swap
            self.knowledge.king_filter_with_me(other, my_before, my_after)
            self._swap = None
        else:
            self.knowledge.king_filter(record.player, record.target)
