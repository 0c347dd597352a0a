"""
Tests for the calibration metrics, the play statistics and the belief
entropy summaries.
"""
import math
import sys
from pathlib import Path

# Add parent directory to path so imports work from tests folder
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from config.game_config import GameConfig
from loveletter.agents.random_agent import RandomAgent
from loveletter.belief.perceptor import Perceptor
from loveletter.data_structures import BeliefStrategy, Card, TurnLog, TurnRecord
from loveletter.errors import PreconditionViolation
from loveletter.game import Game
from loveletter.player import Player
from loveletter.statistics import (
    BeliefStatistics,
    PerceptorEvaluator,
    PerceptorStatistics,
    PlayStatistics,
    cross_entropy_error,
    distribution_entropy,
    mean_squared_error,
)

ALL_STRATEGIES = (BeliefStrategy.POSTERIORI, BeliefStrategy.NAIVE, BeliefStrategy.PRIORI)


def test_error_metrics():
    assert mean_squared_error([0.5, 0.5], [1.0, 0.0]) == pytest.approx(0.25)
    assert cross_entropy_error([0.5, 0.5], [1.0, 0.0]) == pytest.approx(math.log(2))
    # Certain and right stays close to zero, certain and wrong is bounded by the floor
    assert cross_entropy_error([1.0, 0.0], [1.0, 0.0]) < 1e-4
    assert cross_entropy_error([0.0, 1.0], [1.0, 0.0]) == pytest.approx(-math.log(1e-5), rel=1e-3)


def test_metrics_reject_mismatched_lengths():
    with pytest.raises(PreconditionViolation):
        mean_squared_error([0.5, 0.5], [1.0])
    with pytest.raises(PreconditionViolation):
        cross_entropy_error([1.0], [0.5, 0.5])


def test_distribution_entropy():
    assert distribution_entropy([0.125] * 8) == pytest.approx(3.0)
    assert distribution_entropy([1.0, 0.0, 0.0]) == 0.0


def test_perceptor_statistics_accumulate():
    stats = PerceptorStatistics(BeliefStrategy.NAIVE)
    assert stats.hand_rmse == 0.0
    stats.add_hand_sample([0.5, 0.5], 1)
    stats.add_deck_sample([0.5, 0.5], [0.5, 0.5])
    assert stats.hand_rmse == pytest.approx(0.5)
    assert stats.hand_xee == pytest.approx(math.log(2))
    assert stats.hand_accuracy == 1.0
    assert stats.deck_rmse == 0.0
    assert stats.to_dict()["strategy"] == "naive"
    assert "naive" in repr(stats)


def test_play_statistics_matrix():
    stats = PlayStatistics(8)
    stats.record(Card.GUARD, Card.PRIEST)
    stats.record(Card.GUARD, Card.PRIEST)
    stats.record(Card.GUARD, Card.BARON)
    for _ in range(4):
        stats.record(Card.PRINCE, Card.HANDMAID)

    matrix = stats.likelihood_matrix()
    assert matrix[0][:3] == [0.0, 1.0, 0.5]
    assert matrix[4][3] == 1.0
    assert sum(matrix[4]) == 1.0
    # Rows never observed stay empty
    assert matrix[1] == [0.0] * 8


def test_evaluator_scores_every_strategy():
    config = GameConfig(n_players=3, collect_play_statistics=True)
    players = [Player(seat, config, ALL_STRATEGIES) for seat in range(3)]
    agents = [RandomAgent(p, seed=p.seat) for p in players]
    game = Game(players, config, seed=5)
    evaluator = PerceptorEvaluator(0, ALL_STRATEGIES)

    game.start_round()
    assert evaluator.evaluate(game) == 3
    while not game.is_round_over():
        player = game.begin_turn()
        game.play_turn(*agents[player.seat].choose_action(game))
        if not game.round_over:
            evaluator.evaluate(game)

    report = evaluator.to_dict()
    assert set(report) == {"posteriori", "naive", "priori"}
    for stats in evaluator.statistics.values():
        assert stats.hand_samples > 0
        assert stats.deck_samples > 0
        assert 0.0 <= stats.hand_rmse <= 1.0
        assert 0.0 <= stats.deck_rmse <= 1.0
        assert 0.0 <= stats.hand_accuracy <= 1.0
    assert game.play_statistics.counts.sum() == len(game.turn_log)


def test_belief_statistics_entropy():
    config = GameConfig()
    log = TurnLog()
    perceptor = Perceptor(0, log, config)
    perceptor.reset_for_new_round()
    perceptor.observe_draw(Card.GUARD)

    stats = BeliefStatistics(perceptor, config)
    before = stats.get_player_statistics(2)
    assert 0.0 < before['entropy'] < 3.0
    assert 0.0 < before['entropy_normalized'] < 1.0
    assert before['certain'] is None
    assert before['most_likely'] == Card.GUARD

    perceptor.observe_draw(Card.PRIEST)
    perceptor.observe_play(Card.PRIEST)
    perceptor.observe_learned_hand(2, Card.KING)
    log.append(TurnRecord(turn_number=0, player=0, card=Card.PRIEST, target=2))
    perceptor.notify_turn_available()

    after = stats.get_player_statistics(2)
    assert after['entropy'] == pytest.approx(0.0)
    assert after['certain'] == Card.KING
    assert after['expected_value'] == pytest.approx(6.0)
    assert stats.calculate_system_entropy() < 3 * before['entropy']
