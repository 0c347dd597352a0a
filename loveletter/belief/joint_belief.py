"""
Joint probability table over the hands of the hidden opponents.

A JointBelief of rank k holds an array of shape (V,)*k (V distinct card
values) where entry [i_1, ..., i_k] is the probability that the opponent on
axis j holds card value i_j + 1. Rank reductions return a new JointBelief,
every other operation mutates the table in place and leaves it
unnormalized; call normalize() once the update is complete.
"""

from functools import lru_cache
from typing import Iterator, Sequence, Tuple

import numpy as np

from loveletter.errors import PreconditionViolation


def draw_probabilities(card_counts: Sequence[int], rank: int) -> np.ndarray:
    """
    Probability of every ordered sequence of `rank` cards drawn without
    replacement from a pool with the given per-value counts.

    Args:
        card_counts: Copies per card value, indexed by value - 1
        rank: Number of cards drawn

    Returns:
        Array of shape (len(card_counts),) * rank summing to 1
        (all zeros if the pool holds fewer than `rank` cards)
    """
    n_values = len(card_counts)
    total = sum(card_counts)
    table = np.zeros((n_values,) * rank)
    for idx in np.ndindex(*table.shape):
        remaining = list(card_counts)
        left = total
        p = 1.0
        for i in idx:
            if remaining[i] <= 0 or left <= 0:
                p = 0.0
                break
            p *= remaining[i] / left
            remaining[i] -= 1
            left -= 1
        table[idx] = p
    return table


@lru_cache(maxsize=None)
def base_joint_prior(card_counts: Tuple[int, ...], rank: int) -> np.ndarray:
    """Joint prior of `rank` hands dealt from the full deck (read-only, memoized)."""
    table = draw_probabilities(card_counts, rank)
    table.setflags(write=False)
    return table


@lru_cache(maxsize=None)
def base_deck_distribution(card_counts: Tuple[int, ...]) -> np.ndarray:
    """Share of each card value in the full deck (read-only, memoized)."""
    counts = np.array(card_counts, dtype=float)
    distribution = counts / counts.sum()
    distribution.setflags(write=False)
    return distribution


def normalize_probabilities(values: np.ndarray) -> float:
    """
    Clamp negative entries to zero and scale the array in place to sum to 1.

    Returns:
        The sum before scaling. Nothing is scaled when it is not positive.
    """
    np.clip(values, 0.0, None, out=values)
    total = float(values.sum())
    if total > 0.0 and np.isfinite(total):
        values /= total
    return total


class JointBelief:
    """
    Joint distribution over the hands of the currently hidden opponents.

    Attributes:
        seats: Seat owning each axis, in axis order
        table: Probability array of shape (V,)*len(seats)
        card_counts: Copies per card value in the full deck (used for priors)
    """

    def __init__(self, seats: Sequence[int], table: np.ndarray, card_counts: Tuple[int, ...]):
        self.seats = tuple(seats)
        self.table = np.array(table, dtype=float)
        self.card_counts = tuple(card_counts)
        if self.table.ndim != len(self.seats):
            raise PreconditionViolation(
                f"Table of rank {self.table.ndim} does not match {len(self.seats)} seats"
            )

    @classmethod
    def prior(cls, seats: Sequence[int], card_counts: Tuple[int, ...]) -> "JointBelief":
        """Joint belief for hands dealt from the full deck."""
        return cls(seats, base_joint_prior(tuple(card_counts), len(seats)), card_counts)

    @property
    def rank(self) -> int:
        return len(self.seats)

    @property
    def n_values(self) -> int:
        return len(self.card_counts)

    def axis(self, seat: int) -> int:
        """
        Axis index of a seat.

        Raises:
            PreconditionViolation: If the seat is not hidden in this belief
        """
        if seat not in self.seats:
            raise PreconditionViolation(f"Seat {seat} is not a hidden opponent (hidden: {self.seats})")
        return self.seats.index(seat)

    def _check_value(self, value: int):
        if not 1 <= value <= self.n_values:
            raise PreconditionViolation(f"Card value {value} outside 1..{self.n_values}")

    def _slice(self, axis: int, index) -> tuple:
        idx = [slice(None)] * self.rank
        idx[axis] = index
        return tuple(idx)

    def assignments(self) -> Iterator[Tuple[Tuple[int, ...], float]]:
        """Yield (index tuple, probability) for every assignment with nonzero probability."""
        for idx in np.ndindex(*self.table.shape):
            p = self.table[idx]
            if p > 0.0:
                yield idx, float(p)

    def total(self) -> float:
        return float(self.table.sum())

    def normalize(self) -> bool:
        """
        Renormalize the table to sum to 1.

        Returns:
            False if the table had no mass and was reset to the deck prior
        """
        total = normalize_probabilities(self.table)
        if total > 0.0 and np.isfinite(total):
            return True
        self.table = np.array(base_joint_prior(self.card_counts, self.rank))
        return False

    def marginal(self, seat: int) -> np.ndarray:
        """Distribution of one seat's hand, summing out every other axis."""
        axis = self.axis(seat)
        other_axes = tuple(a for a in range(self.rank) if a != axis)
        return self.table.sum(axis=other_axes)

    def without(self, seat: int, value: int) -> "JointBelief":
        """
        Condition on `seat` holding `value` and drop its axis.

        Returns:
            A new, unnormalized JointBelief of rank - 1
        """
        self._check_value(value)
        axis = self.axis(seat)
        table = np.take(self.table, value - 1, axis=axis)
        seats = self.seats[:axis] + self.seats[axis + 1:]
        return JointBelief(seats, table, self.card_counts)

    def keep_only(self, seat: int, value: int):
        """Zero every slice of the seat's axis except `value`."""
        self._check_value(value)
        axis = self.axis(seat)
        kept = self.table[self._slice(axis, value - 1)].copy()
        self.table[...] = 0.0
        self.table[self._slice(axis, value - 1)] = kept

    def clear_value(self, seat: int, value: int):
        """Zero the slice where the seat holds `value`."""
        self._check_value(value)
        self.table[self._slice(self.axis(seat), value - 1)] = 0.0

    def clear_up_to(self, seat: int, value: int):
        """Zero every slice where the seat holds a value <= `value`."""
        self._check_value(value)
        self.table[self._slice(self.axis(seat), slice(0, value))] = 0.0

    def keep_diagonal(self, seat_a: int, seat_b: int):
        """Keep only assignments where both seats hold the same value."""
        axis_a, axis_b = self.axis(seat_a), self.axis(seat_b)
        if axis_a == axis_b:
            raise PreconditionViolation("Diagonal needs two distinct seats")
        shape = [1] * self.rank
        shape[axis_a] = self.n_values
        shape[axis_b] = self.n_values
        self.table *= np.eye(self.n_values).reshape(shape)

    def swap_values(self, seat: int, value_a: int, value_b: int):
        """Exchange the slices of two values along the seat's axis."""
        self._check_value(value_a)
        self._check_value(value_b)
        order = list(range(self.n_values))
        order[value_a - 1], order[value_b - 1] = order[value_b - 1], order[value_a - 1]
        self.table = np.take(self.table, order, axis=self.axis(seat))

    def transpose(self, seat_a: int, seat_b: int):
        """Exchange the roles of two seats (their hands were swapped)."""
        axis_a, axis_b = self.axis(seat_a), self.axis(seat_b)
        if axis_a == axis_b:
            raise PreconditionViolation("Transpose needs two distinct seats")
        self.table = np.swapaxes(self.table, axis_a, axis_b).copy()

    def __repr__(self):
        return f"JointBelief(seats={self.seats}, rank={self.rank}, total={self.total():.4f})"
