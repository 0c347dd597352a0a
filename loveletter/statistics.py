"""
Statistics and analysis module for the Love Letter belief tracker.
Measures uncertainty and calibration of the perceptors against the real
cards of simulated rounds.
"""

import math
from typing import Dict, List, Optional, Sequence

import numpy as np

from config.game_config import GameConfig, CARD_NAMES
from loveletter.belief.perceptor import Perceptor
from loveletter.data_structures import BeliefStrategy
from loveletter.errors import PreconditionViolation

CROSS_ENTROPY_FLOOR = 1e-5


def mean_squared_error(predicted: Sequence[float], actual: Sequence[float]) -> float:
    """
    Mean squared difference between two distributions.

    Raises:
        PreconditionViolation: If the lengths differ
    """
    if len(predicted) != len(actual):
        raise PreconditionViolation(f"Length mismatch: {len(predicted)} vs {len(actual)}")
    predicted = np.asarray(predicted, dtype=float)
    actual = np.asarray(actual, dtype=float)
    return float(np.mean((predicted - actual) ** 2))


def cross_entropy_error(predicted: Sequence[float], actual: Sequence[float]) -> float:
    """
    Binary cross-entropy averaged over the entries, with every predicted
    probability kept inside [floor, 1 - floor].

    Raises:
        PreconditionViolation: If the lengths differ
    """
    if len(predicted) != len(actual):
        raise PreconditionViolation(f"Length mismatch: {len(predicted)} vs {len(actual)}")
    predicted = np.clip(np.asarray(predicted, dtype=float), CROSS_ENTROPY_FLOOR, 1.0 - CROSS_ENTROPY_FLOOR)
    actual = np.asarray(actual, dtype=float)
    losses = -(actual * np.log(predicted) + (1.0 - actual) * np.log(1.0 - predicted))
    return float(np.mean(losses))


def distribution_entropy(distribution: Sequence[float]) -> float:
    """
    Shannon entropy in bits.

    H = -Σ P(value) × log₂(P(value))
    """
    return -sum(p * math.log2(p) for p in distribution if p > 0)


class PerceptorStatistics:
    """
    Running calibration errors of one belief strategy.

    Deck errors compare the predicted next-card distribution with the real
    composition of the deck; hand errors compare each predicted opponent
    hand with a one-hot vector of the real card.
    """

    def __init__(self, strategy: BeliefStrategy):
        self.strategy = strategy
        self.deck_squared_error = 0.0
        self.deck_samples = 0
        self.hand_squared_error = 0.0
        self.hand_cross_entropy = 0.0
        self.hand_samples = 0
        self.hand_hits = 0

    def add_deck_sample(self, predicted: Sequence[float], actual: Sequence[float]):
        self.deck_squared_error += mean_squared_error(predicted, actual)
        self.deck_samples += 1

    def add_hand_sample(self, predicted: Sequence[float], actual_value: int):
        actual = np.zeros(len(predicted))
        actual[actual_value - 1] = 1.0
        self.hand_squared_error += mean_squared_error(predicted, actual)
        self.hand_cross_entropy += cross_entropy_error(predicted, actual)
        self.hand_samples += 1
        if int(np.argmax(predicted)) + 1 == actual_value:
            self.hand_hits += 1

    @property
    def deck_rmse(self) -> float:
        return math.sqrt(self.deck_squared_error / self.deck_samples) if self.deck_samples else 0.0

    @property
    def hand_rmse(self) -> float:
        return math.sqrt(self.hand_squared_error / self.hand_samples) if self.hand_samples else 0.0

    @property
    def hand_xee(self) -> float:
        return self.hand_cross_entropy / self.hand_samples if self.hand_samples else 0.0

    @property
    def hand_accuracy(self) -> float:
        return self.hand_hits / self.hand_samples if self.hand_samples else 0.0

    def to_dict(self) -> Dict:
        return {
            "strategy": self.strategy.value,
            "deck_rmse": self.deck_rmse,
            "deck_samples": self.deck_samples,
            "hand_rmse": self.hand_rmse,
            "hand_xee": self.hand_xee,
            "hand_accuracy": self.hand_accuracy,
            "hand_samples": self.hand_samples,
        }

    def __repr__(self):
        return (f"{self.strategy.value:>10}: deck RMSE {self.deck_rmse:.4f} | hand RMSE {self.hand_rmse:.4f} | "
                f"hand XEE {self.hand_xee:.4f} | hand accuracy {100 * self.hand_accuracy:.1f}%")


class PerceptorEvaluator:
    """
    Compares the perceptors of one seat with the real cards after every turn.

    Attributes:
        seat: Seat whose perceptors are evaluated
        statistics: Running errors per strategy
    """

    def __init__(self, seat: int, strategies: Sequence[BeliefStrategy]):
        self.seat = seat
        self.statistics: Dict[BeliefStrategy, PerceptorStatistics] = {
            strategy: PerceptorStatistics(strategy) for strategy in strategies
        }

    def evaluate(self, game) -> int:
        """
        Score every perceptor of the evaluated seat against the game state.

        Args:
            game: Game between turns (every active player holds one card)

        Returns:
            Number of perceptors scored
        """
        player = game.players[self.seat]
        if not player.active:
            return 0

        deck_truth = game.deck_composition()
        scored = 0
        for strategy, perceptor in player.perceptors.items():
            if strategy not in self.statistics or not perceptor.is_ready() or perceptor.round_abandoned:
                continue
            stats = self.statistics[strategy]
            if deck_truth is not None:
                stats.add_deck_sample(perceptor.deck_distribution(), deck_truth)
            for opponent in game.players:
                if opponent.seat == self.seat or not opponent.active:
                    continue
                stats.add_hand_sample(perceptor.hand_distribution(opponent.seat), opponent.hand[0])
            scored += 1
        return scored

    def print_report(self):
        print("\n" + "="*80)
        print(f"PERCEPTOR CALIBRATION (seat {self.seat})")
        print("="*80)
        for stats in self.statistics.values():
            print(stats)

    def to_dict(self) -> Dict:
        return {strategy.value: stats.to_dict() for strategy, stats in self.statistics.items()}


class PlayStatistics:
    """
    Counts which card players keep when they play a given card.
    Used to re-estimate the likelihood-of-play table from simulated rounds.
    """

    def __init__(self, n_values: int = 8):
        self.n_values = n_values
        self.counts = np.zeros((n_values, n_values), dtype=int)

    def record(self, played: int, retained: int):
        self.counts[played - 1, retained - 1] += 1

    def likelihood_matrix(self) -> List[List[float]]:
        """Counts scaled so that each row peaks at 1 (rows never seen stay 0)."""
        matrix = self.counts.astype(float)
        peaks = matrix.max(axis=1, keepdims=True)
        np.divide(matrix, peaks, out=matrix, where=peaks > 0)
        return [[round(float(x), 3) for x in row] for row in matrix]

    def print_matrix(self):
        print("\n" + "="*80)
        print("OBSERVED LIKELIHOOD OF PLAY (rows: played, columns: retained)")
        print("="*80)
        print(f"{'':>10} " + " ".join(f"{CARD_NAMES[v][:6]:>7}" for v in range(1, self.n_values + 1)))
        for played, row in enumerate(self.likelihood_matrix(), start=1):
            print(f"{CARD_NAMES[played]:>10} " + " ".join(f"{x:7.3f}" for x in row))


class BeliefStatistics:
    """
    Uncertainty metrics for the beliefs held by one perceptor.

    This class provides:
    - Entropy of every hidden hand and of the deck
    - Most likely and certain values per opponent
    """

    def __init__(self, perceptor: Perceptor, config: GameConfig):
        self.perceptor = perceptor
        self.config = config

    def calculate_hand_entropy(self, seat: int) -> float:
        return distribution_entropy(self.perceptor.hand_distribution(seat))

    def calculate_deck_entropy(self) -> float:
        return distribution_entropy(self.perceptor.deck_distribution())

    def calculate_system_entropy(self) -> float:
        """Sum of the entropies of every hidden hand."""
        return sum(self.calculate_hand_entropy(seat) for seat in self.perceptor.hidden_opponents)

    def get_player_statistics(self, seat: int) -> Dict:
        """
        Returns:
            Dict with keys:
            - 'entropy': Entropy of the hand (bits)
            - 'entropy_normalized': Entropy over the maximum log2(V)
            - 'expected_value': Expected card value
            - 'most_likely': Most likely card value
            - 'certain': Certain card value or None
        """
        entropy = self.calculate_hand_entropy(seat)
        max_entropy = math.log2(self.config.n_values)
        return {
            'entropy': entropy,
            'entropy_normalized': entropy / max_entropy if max_entropy > 0 else 0.0,
            'expected_value': self.perceptor.expected_hand_value(seat),
            'most_likely': self.perceptor.most_likely_hand_value(seat),
            'certain': self.perceptor.certain_hand_value(seat),
        }

    def print_statistics(self, player_names: Optional[Dict[int, str]] = None):
        print("\n" + "="*80)
        print(f"BELIEF STATISTICS (P{self.perceptor.my_seat})")
        print("="*80)
        print(f"Deck entropy: {self.calculate_deck_entropy():.3f} bits "
              f"| expected next card {self.perceptor.expected_deck_value():.2f}")
        for seat in self.perceptor.hidden_opponents:
            name = player_names.get(seat, f"P{seat}") if player_names else f"P{seat}"
            stats = self.get_player_statistics(seat)
            certain = CARD_NAMES[stats['certain']] if stats['certain'] else "?"
            print(f"  {name:>8}: H={stats['entropy']:.3f} bits ({100 * stats['entropy_normalized']:.0f}%) "
                  f"| E={stats['expected_value']:.2f} | likely {CARD_NAMES[stats['most_likely']]} | certain {certain}")
        print(f"System entropy: {self.calculate_system_entropy():.3f} bits")
