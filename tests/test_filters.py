"""
Tests for the per-card filters of KnowledgeState.
Covers normalization, conservation, certainty collapse, knockouts,
Baron draws, the King swap and the Prince redraw.
"""
import sys
from pathlib import Path

# Add parent directory to path so imports work from tests folder
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest

from config.game_config import GameConfig, LIKELIHOOD_OF_PLAY
from loveletter.belief.knowledge_state import KnowledgeState
from loveletter.data_structures import BeliefStrategy, Card
from loveletter.errors import ExhaustedCard, PreconditionViolation


def make_state(n_players=4, my_card=Card.GUARD, seat=0):
    config = GameConfig(n_players=n_players)
    state = KnowledgeState(seat, config)
    state.condition_on_own_draw(my_card)
    state.recalculate_marginals()
    return state


def assert_normalized(state):
    for seat, distribution in state.hand_distributions.items():
        assert distribution.sum() == pytest.approx(1.0, abs=1e-4), f"P{seat} hand"
        assert (distribution >= 0).all()
    if state.deck_size() > 0:
        assert state.deck_distribution.sum() == pytest.approx(1.0, abs=1e-4)
    assert state.joint.total() == pytest.approx(1.0, abs=1e-4)


def assert_conserved(state):
    total = state.counter.total() + len(state.my_cards) + len(state.discard_pile)
    assert total == state.config.total_cards


def test_own_draw_rules_out_single_copies():
    """Holding the Princess means nobody else does."""
    state = make_state(my_card=Card.PRINCESS)
    for seat in (1, 2, 3):
        assert state.hand_distribution(seat)[Card.PRINCESS - 1] == 0.0
    assert state.deck_distribution[Card.PRINCESS - 1] == 0.0
    # Remaining Guards: 5 of the 15 unseen cards
    assert state.hand_distribution(1)[0] == pytest.approx(5 / 15)
    assert_normalized(state)
    assert_conserved(state)


def test_normalization_down_to_no_hidden_opponent():
    """Every distribution stays normalized while opponents drop out one by one."""
    state = make_state(my_card=Card.HANDMAID)
    assert state.joint.rank == 3

    state.filter_on_played_card(1, Card.GUARD)
    state.account_for(Card.GUARD)
    state.record_discard(Card.GUARD)
    state.guard_filter(2, Card.PRIEST)
    state.recalculate_marginals()
    assert_normalized(state)

    state.filter_on_played_card(2, Card.BARON)
    state.account_for(Card.BARON)
    state.record_discard(Card.BARON)
    state.baron_filter_knockout(winner=2, loser=3, losers_value=Card.PRIEST)
    state.record_discard(Card.PRIEST)
    state.recalculate_marginals()
    assert state.joint.rank == 2
    assert state.hand_distribution(2)[:2].sum() == 0.0
    assert_normalized(state)
    assert_conserved(state)

    state.filter_on_played_card(1, Card.PRINCE)
    state.account_for(Card.PRINCE)
    state.record_discard(Card.PRINCE)
    state.prince_filter(2, Card.KING)
    state.record_discard(Card.KING)
    state.recalculate_marginals()
    assert_normalized(state)
    assert_conserved(state)

    state.knockout_filter(1, Card.PRINCESS)
    state.record_discard(Card.PRINCESS)
    state.recalculate_marginals()
    assert state.joint.rank == 1
    assert_normalized(state)

    state.knockout_filter(2, Card.GUARD)
    state.record_discard(Card.GUARD)
    state.recalculate_marginals()
    assert state.joint.rank == 0
    assert state.hand_distributions == {}
    assert_normalized(state)
    assert_conserved(state)


def test_certainty_collapse():
    state = make_state()
    state.certainty_filter(2, Card.PRINCE)
    state.recalculate_marginals()
    distribution = state.hand_distribution(2)
    assert distribution[Card.PRINCE - 1] == pytest.approx(1.0)
    assert np.delete(distribution, Card.PRINCE - 1).sum() == pytest.approx(0.0)
    # Only one Prince is left for the others
    assert state.hand_distribution(1)[Card.PRINCE - 1] < 2 / 15


def test_knockout_reduces_rank_and_hides_seat():
    state = make_state()
    state.knockout_filter(3, Card.BARON)
    state.recalculate_marginals()
    assert state.joint.rank == 2
    assert 3 in state.eliminated
    assert state.counter.count(Card.BARON) == 1
    with pytest.raises(PreconditionViolation):
        state.hand_distribution(3)
    with pytest.raises(PreconditionViolation):
        state.guard_filter(3, Card.KING)


def test_filters_reject_the_owner_and_bad_guesses():
    state = make_state()
    with pytest.raises(PreconditionViolation):
        state.certainty_filter(0, Card.KING)
    with pytest.raises(PreconditionViolation):
        state.guard_filter(1, Card.GUARD)
    with pytest.raises(PreconditionViolation):
        state.filter_on_played_card(1, 9)


def test_guard_miss_clears_the_guess():
    state = make_state()
    state.guard_filter(1, Card.COUNTESS)
    state.recalculate_marginals()
    assert state.hand_distribution(1)[Card.COUNTESS - 1] == 0.0
    # The Countess has to be somewhere else now
    assert state.hand_distribution(2)[Card.COUNTESS - 1] > 1 / 15
    assert_normalized(state)


def test_baron_draw_symmetry():
    state = make_state(my_card=Card.PRIEST)
    state.filter_on_played_card(1, Card.HANDMAID)
    state.account_for(Card.HANDMAID)
    state.record_discard(Card.HANDMAID)
    state.baron_filter_draw(2, 3)
    state.recalculate_marginals()
    assert np.allclose(state.hand_distribution(2), state.hand_distribution(3))
    # Single-copy cards cannot be tied
    for value in (Card.KING, Card.COUNTESS, Card.PRINCESS):
        assert state.hand_distribution(2)[value - 1] == 0.0
    assert_normalized(state)


def test_two_player_guard_endgame():
    """
    One hidden opponent, hand uniform over the 13 unaccounted cards (two
    Guards discarded, owner holds a Priest). The opponent plays a Guard: the
    hand it kept follows the likelihood of play, and a second Guard becomes
    unlikely because only three are left.
    """
    state = make_state(n_players=2, my_card=Card.PRIEST)
    for _ in range(2):
        state.account_for(Card.GUARD)
        state.record_discard(Card.GUARD)
    pool = np.array(state.counter.remaining(), dtype=float)
    assert pool.tolist() == [3, 1, 2, 2, 2, 1, 1, 1]
    state.joint.table = pool / pool.sum()
    state.recalculate_marginals()
    prior_guard = state.hand_distribution(1)[0]
    assert prior_guard == pytest.approx(3 / 13)

    state.filter_on_played_card(1, Card.GUARD)
    state.account_for(Card.GUARD)
    state.record_discard(Card.GUARD)
    state.recalculate_marginals()

    # Held Guard + drawn r, or held r + drawn Guard: 2 * c1 * cr * L(1, r);
    # both Guards: c1 * (c1 - 1) * L(1, 1)
    guards = pool[0]
    expected = np.array([2 * guards * pool[r] * LIKELIHOOD_OF_PLAY[0][r] for r in range(8)])
    expected[0] = guards * (guards - 1) * LIKELIHOOD_OF_PLAY[0][0]
    expected /= expected.sum()

    posterior = state.hand_distribution(1)
    assert np.allclose(posterior, expected)
    assert posterior.sum() == pytest.approx(1.0)
    assert posterior[0] < prior_guard
    # Keeping a Priest after playing a Guard is discouraged by the table
    assert posterior[Card.PRIEST - 1] < posterior[Card.KING - 1]
    assert_conserved(state)


def test_king_swap_round_trip():
    """Owner holds the King's 6, swaps it for the opponent's card."""
    state = make_state(my_card=Card.KING)
    assert state.counter.count(Card.KING) == 0
    baron_before = state.counter.count(Card.BARON)

    state.king_filter_with_me(1, my_before=Card.KING, my_after=Card.BARON)
    state.recalculate_marginals()

    assert state.hand_distribution(1)[Card.KING - 1] == pytest.approx(1.0)
    assert state.counter.count(Card.KING) == 1
    assert state.counter.count(Card.BARON) == baron_before - 1
    assert state.my_cards == [Card.BARON]
    assert state.knows_my_hand[1] == Card.BARON
    # Nobody else can hold the single King
    assert state.hand_distribution(2)[Card.KING - 1] == 0.0
    assert_normalized(state)
    assert_conserved(state)


def test_prince_then_certainty_is_history_independent():
    """Whatever the redraw looked like, learning the new card wins."""
    plain = make_state(my_card=Card.GUARD)
    filtered = make_state(my_card=Card.GUARD)
    filtered.guard_filter(1, Card.PRIEST)
    filtered.filter_on_played_card(2, Card.HANDMAID)
    filtered.account_for(Card.HANDMAID)

    for state in (plain, filtered):
        state.prince_filter(1, Card.BARON)
        state.recalculate_marginals()
        assert state.hand_distribution(1).sum() == pytest.approx(1.0)
        state.certainty_filter(1, Card.COUNTESS)
        state.recalculate_marginals()

    expected = np.zeros(8)
    expected[Card.COUNTESS - 1] = 1.0
    assert np.allclose(plain.hand_distribution(1), expected)
    assert np.allclose(filtered.hand_distribution(1), expected)


def test_prince_redraw_follows_the_deck():
    """With one hidden opponent the redraw is the unaccounted pool minus the discard."""
    state = make_state(n_players=2, my_card=Card.GUARD)
    state.prince_filter(1, Card.HANDMAID)
    state.recalculate_marginals()
    # Pool before accounting: Guard 4, Priest 2, Baron 2, Handmaid 2, Prince 2, 1, 1, 1
    # The discarded Handmaid leaves the deck with one Handmaid out of 14 cards
    expected = np.array([4, 2, 2, 1, 2, 1, 1, 1], dtype=float) / 14
    assert np.allclose(state.hand_distribution(1), expected)
    assert state.counter.count(Card.HANDMAID) == 1


def test_degenerate_update_falls_back_to_prior():
    state = make_state(n_players=2, my_card=Card.GUARD)
    for value in range(2, 9):
        state.guard_filter(1, value)
    assert state.consistency_warnings == 0
    state.certainty_filter(1, Card.PRINCESS)
    assert state.consistency_warnings == 1
    state.recalculate_marginals()
    assert not np.isnan(state.hand_distribution(1)).any()
    assert_normalized(state)


def test_exhausted_card_propagates():
    state = make_state(my_card=Card.PRINCESS)
    with pytest.raises(ExhaustedCard):
        state.knockout_filter(1, Card.PRINCESS)


def test_naive_and_priori_strategies():
    config = GameConfig(n_players=3)
    naive = KnowledgeState(0, config, BeliefStrategy.NAIVE)
    priori = KnowledgeState(0, config, BeliefStrategy.PRIORI)
    for state in (naive, priori):
        state.condition_on_own_draw(Card.PRINCESS)
        state.filter_on_played_card(1, Card.GUARD)
        state.account_for(Card.GUARD)
        state.guard_filter(2, Card.BARON)
        state.recalculate_marginals()

    unseen = np.array([4, 2, 2, 2, 2, 1, 1, 0], dtype=float) / 14
    assert np.allclose(naive.hand_distribution(2), unseen)
    assert np.allclose(naive.deck_distribution, unseen)
    base = np.array(config.card_counts, dtype=float) / 16
    assert np.allclose(priori.hand_distribution(1), base)
    assert np.allclose(priori.deck_distribution, base)
