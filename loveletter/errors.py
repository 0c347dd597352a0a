"""
Exception types raised by the belief engine.
"""


class BeliefError(Exception):
    """Base class for belief engine errors."""


class InvariantViolation(BeliefError):
    """
    The belief state reached a state that a consistent game cannot produce.
    Fatal to the current round; recovered by resetting the beliefs.
    """


class ExhaustedCard(InvariantViolation):
    """A card value was accounted for more times than it exists in the deck."""

    def __init__(self, value: int):
        super().__init__(f"All copies of card {value} are already accounted for")
        self.value = value


class AnalysisInProgress(InvariantViolation):
    """Beliefs were queried or re-entered while a turn is being analysed."""


class PreconditionViolation(BeliefError, AssertionError):
    """A caller broke the contract of a belief operation (wrong seat, bad card value...)."""
