"""
Plays one Love Letter round between smart agents and shows how the beliefs
of player 0 evolve turn by turn.
"""

from config.game_config import GameConfig
from loveletter.player import Player
from loveletter.game import Game
from loveletter.agents.smart_agent import SmartAgent
from loveletter.statistics import BeliefStatistics
from loveletter.utils import format_hand, player_name, print_table, print_turn_log


def run_demo_round(seed: int = 7):
    """Play one round and print player 0's beliefs after every turn."""
    print("\n" + "="*70)
    print("DEMO: One Love Letter round")
    print("="*70)

    config = GameConfig()
    print(f"\nGame Config: {config}")

    players = [Player(seat, config) for seat in range(config.n_players)]
    agents = [SmartAgent(p) for p in players]
    game = Game(players, config, seed=seed)
    game.start_round()

    observer = players[0]
    print("\nInitial hands:")
    print_table(players)
    observer.perceptor.print_beliefs()

    while not game.is_round_over():
        player = game.begin_turn()
        card, target, guess = agents[player.seat].choose_action(game)
        record = game.play_turn(card, target, guess)
        print(f"\n{record}")
        print_table(players)
        if observer.active:
            observer.perceptor.print_beliefs()
            BeliefStatistics(observer.perceptor, config).print_statistics(
                {p.seat: player_name(p.seat) for p in players}
            )

    print_turn_log(game.turn_log)
    winner = players[game.winner]
    print(f"\nRound won by {player_name(winner.seat)} holding {format_hand(winner.hand)}")


if __name__ == "__main__":
    run_demo_round()
