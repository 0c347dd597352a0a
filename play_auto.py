import json
import os
import time
from typing import List, Tuple

from config.game_config import GameConfig, N_GAMES
from loveletter.player import Player
from loveletter.game import Game
from loveletter.agents.base_agent import BaseAgent
from loveletter.agents.random_agent import RandomAgent
from loveletter.agents.smart_agent import SmartAgent
from loveletter.data_structures import BeliefStrategy
from loveletter.statistics import PerceptorEvaluator


EVALUATED_SEAT = 0
STRATEGIES = (BeliefStrategy.POSTERIORI, BeliefStrategy.NAIVE, BeliefStrategy.PRIORI)
USE_SMART_AGENTS = True


def setup_game(config: GameConfig, seed: int = None) -> Tuple[Game, List[Player], List[BaseAgent]]:
    players = []
    agents = []
    for seat in range(config.n_players):
        strategies = STRATEGIES if seat == EVALUATED_SEAT else (BeliefStrategy.POSTERIORI,)
        player = Player(seat, config, strategies)
        players.append(player)
        if USE_SMART_AGENTS:
            agents.append(SmartAgent(player))
        else:
            agents.append(RandomAgent(player, seed=None if seed is None else seed + seat))

    game = Game(players, config, seed=seed)
    return game, players, agents


def run_round(game: Game, agents: List[BaseAgent], evaluator: PerceptorEvaluator, first_seat: int = 0):
    game.start_round(first_seat=first_seat)
    evaluator.evaluate(game)
    while not game.is_round_over():
        player = game.begin_turn()
        card, target, guess = agents[player.seat].choose_action(game)
        game.play_turn(card, target, guess)
        if not game.round_over:
            evaluator.evaluate(game)
    return game.winner


def save_game_logs(logs: List[dict], evaluator: PerceptorEvaluator):
    timestamp = time.strftime("%Y%m%d_%H%M%S")
    log_folder = f"logs/game_{timestamp}"

    if not os.path.exists(log_folder):
        os.makedirs(log_folder)

    with open(f"{log_folder}/turn_logs.json", "w") as f:
        json.dump(logs, f, indent=2)

    with open(f"{log_folder}/calibration.json", "w") as f:
        json.dump(evaluator.to_dict(), f, indent=2)

    print(f"\nSaved logs to {log_folder}")


def run_simulation(n_games: int = N_GAMES, seed: int = 0):
    config = GameConfig(collect_play_statistics=True)
    game, players, agents = setup_game(config, seed=seed)
    evaluator = PerceptorEvaluator(EVALUATED_SEAT, STRATEGIES)

    wins = [0] * config.n_players
    logs = []
    start_time = time.time()
    print(f"Simulating {n_games} rounds with {config.n_players} players...")
    for i in range(n_games):
        winner = run_round(game, agents, evaluator, first_seat=i % config.n_players)
        wins[winner] += 1
        logs.append({
            "round": i,
            "winner": winner,
            "turns": [record.to_dict() for record in game.turn_log],
        })
    duration = time.time() - start_time

    print("\n=== Simulation Over ===")
    print(f"Rounds: {n_games} in {duration:.1f}s")
    for seat, count in enumerate(wins):
        print(f"  Player {seat}: {count} wins")
    evaluator.print_report()
    if game.play_statistics is not None:
        game.play_statistics.print_matrix()
    save_game_logs(logs, evaluator)


if __name__ == "__main__":
    run_simulation()
