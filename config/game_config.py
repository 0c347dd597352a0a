"""
Game configuration parameters for the Love Letter belief tracker.
Defines the deck composition, seating, and the tunable inference priors.
"""

# Format: {value: number_of_copies}
CARD_DISTRIBUTION = {
    1: 5,  # Guard
    2: 2,  # Priest
    3: 2,  # Baron
    4: 2,  # Handmaid
    5: 2,  # Prince
    6: 1,  # King
    7: 1,  # Countess
    8: 1,  # Princess
}

CARD_NAMES = {
    1: "Guard",
    2: "Priest",
    3: "Baron",
    4: "Handmaid",
    5: "Prince",
    6: "King",
    7: "Countess",
    8: "Princess",
}

# Player names (in seating order)
PLAYER_NAMES = [
    "Alice",
    "Bob",
    "Carol",
    "Dave",
]

# Most-likely hand value is reported as certain above this probability
CERTAINTY_THRESHOLD = 0.7

# LIKELIHOOD_OF_PLAY[played - 1][retained - 1]: how likely a player is to play
# `played` while keeping `retained`. Empirical priors, tune freely.
LIKELIHOOD_OF_PLAY = [
    # Guard  Priest Baron  Handm. Prince King   Countess Princess   (retained)
    [1.000, 0.100, 0.995, 0.990, 0.950, 0.990, 0.990, 1.000],  # played Guard
    [0.900, 1.000, 0.990, 0.990, 0.900, 0.900, 0.900, 1.000],  # played Priest
    [0.005, 0.010, 1.000, 0.850, 0.850, 0.900, 0.990, 1.000],  # played Baron
    [0.010, 0.010, 0.150, 1.000, 0.005, 0.650, 0.800, 1.000],  # played Handmaid
    [0.050, 0.100, 0.150, 0.995, 1.000, 0.750, 0.000, 1.000],  # played Prince
    [0.010, 0.100, 0.100, 0.350, 0.250, 0.000, 0.000, 1.000],  # played King
    [0.010, 0.100, 0.010, 0.200, 1.000, 1.000, 0.000, 1.000],  # played Countess
    [0.000, 0.000, 0.000, 0.000, 0.000, 0.000, 0.000, 0.000],  # played Princess
]

# Options
VERBOSE = False                  # Print every analysed turn and filter
COLLECT_PLAY_STATISTICS = False  # Count (played, retained) pairs during simulation
N_GAMES = 200                    # Rounds simulated by play_auto.py

# Derived parameters
CARD_VALUES = sorted(CARD_DISTRIBUTION.keys())
K = len(CARD_VALUES)                          # Number of distinct card values
TOTAL_CARDS = sum(CARD_DISTRIBUTION.values())
NUM_PLAYERS = len(PLAYER_NAMES)


class GameConfig:
    """
    Configuration class for game parameters.
    Encapsulates the deck composition, seating and inference priors.
    """

    def __init__(
        self,
        card_distribution: dict = None,
        n_players: int = NUM_PLAYERS,
        certainty_threshold: float = CERTAINTY_THRESHOLD,
        likelihood_of_play: list = None,
        verbose: bool = VERBOSE,
        collect_play_statistics: bool = COLLECT_PLAY_STATISTICS
    ):
        """
        Initialize game configuration.

        Args:
            card_distribution: Dict mapping card values to their copy counts {value: count}
            n_players: Number of seats at the table (2-4)
            certainty_threshold: Probability above which a most-likely hand value is
                                 reported as certain
            likelihood_of_play: 8x8 nested list, [played - 1][retained - 1]
            verbose: Whether perceptors print every analysed turn
            collect_play_statistics: Whether the simulator counts (played, retained) pairs
        """
        self.card_distribution = card_distribution if card_distribution is not None else CARD_DISTRIBUTION
        self.n_players = n_players
        self.certainty_threshold = certainty_threshold
        self.likelihood_of_play = likelihood_of_play if likelihood_of_play is not None else LIKELIHOOD_OF_PLAY
        self.verbose = verbose
        self.collect_play_statistics = collect_play_statistics

        # Derived values
        self.card_values = sorted(self.card_distribution.keys())
        self.n_values = len(self.card_values)
        self.total_cards = sum(self.card_distribution.values())
        self.card_counts = tuple(self.card_distribution[v] for v in self.card_values)

        self._validate()

    def _validate(self):
        """Validate configuration parameters."""
        assert 2 <= self.n_players <= 4, "Love Letter is played by 2 to 4 players"
        assert self.card_values == list(range(1, self.n_values + 1)), \
            "Card values must be consecutive integers starting at 1"
        assert all(count > 0 for count in self.card_counts), "Every card value needs at least one copy"
        assert self.total_cards > self.n_players + 1, "Deck too small for the number of players"
        assert 0.0 < self.certainty_threshold <= 1.0, "Certainty threshold must be in (0, 1]"

        assert len(self.likelihood_of_play) == self.n_values, \
            f"Likelihood of play needs {self.n_values} rows"
        for row in self.likelihood_of_play:
            assert len(row) == self.n_values, f"Likelihood of play needs {self.n_values} columns"
            assert all(0.0 <= x <= 1.0 for x in row), "Likelihood of play entries must be in [0, 1]"

    def get_copies(self, value: int) -> int:
        """
        Get the number of copies for a specific card value.

        Args:
            value: The card value

        Returns:
            Number of copies of this value in the deck
        """
        return self.card_distribution.get(value, 0)

    def __repr__(self):
        return (f"GameConfig(n_players={self.n_players}, total_cards={self.total_cards}, "
                f"counts={self.card_counts}, certainty_threshold={self.certainty_threshold})")


def validate_config():
    """
    Validate the module-level configuration.

    Raises:
        AssertionError: If the constants are inconsistent
    """
    assert CARD_VALUES == list(range(1, K + 1)), "Card values must be 1..K"
    assert TOTAL_CARDS == 16, f"Expected a 16 card deck, got {TOTAL_CARDS}"
    assert 2 <= NUM_PLAYERS <= 4, f"Expected 2-4 players, got {NUM_PLAYERS}"
    assert len(LIKELIHOOD_OF_PLAY) == K and all(len(row) == K for row in LIKELIHOOD_OF_PLAY), \
        "Likelihood of play must be a KxK table"
    assert set(CARD_NAMES) == set(CARD_VALUES), "Every card value needs a name"


if __name__ == "__main__":
    validate_config()
    print("Configuration valid!")
    print(f"  Card distribution: {CARD_DISTRIBUTION}")
    print(f"  Total cards: {TOTAL_CARDS}")
    print(f"  Players: {NUM_PLAYERS} ({', '.join(PLAYER_NAMES)})")
    print(f"  Certainty threshold: {CERTAINTY_THRESHOLD}")
