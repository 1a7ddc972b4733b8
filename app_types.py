# app_types.py
"""
Type aliases for the Badminton App.

This module defines type aliases to improve code readability and provide
semantic meaning to complex type hints.
"""

from dataclasses import dataclass, field
from enum import Enum

# =============================================================================
# Basic Type Aliases
# =============================================================================


class Gender(str, Enum):
    """Player gender enumeration for strict type checking."""

    MALE = "M"
    FEMALE = "F"


class Severity(str, Enum):
    """How strongly a selection warning should stop the user."""

    BLOCKING = "blocking"
    ADVISORY = "advisory"


# A player's store-assigned identifier
PlayerId = int

# A player's display name (unique key for partner lookup)
PlayerName = str

# An unordered pair of player ids, always stored sorted
PlayerPair = tuple[PlayerId, PlayerId]

# =============================================================================
# Engine Type Aliases
# =============================================================================

# How many completed games each pair of players has shared
PairHistory = dict[PlayerPair, int]

# Ids of the four players recommended for the next game (empty if none)
RecommendedGroup = list[PlayerId]


# =============================================================================
# Result Data Classes
# =============================================================================


@dataclass
class SelectionWarning:
    """A warning raised against a manual selection of players.

    Attributes:
        severity: BLOCKING for a missing partner, ADVISORY for a repeat pairing
        message: Human readable description
        players: Names of the players involved
        count: Number of shared games (advisory warnings only)
    """

    severity: Severity
    message: str
    players: tuple[PlayerName, ...] = ()
    count: int = 0


@dataclass
class GroupScore:
    """Breakdown of a candidate group's score. Lower is better.

    Attributes:
        games: Weighted sum of games played
        level: Weighted population standard deviation of levels
        gender: Odd gender split penalty
        partner: Partner rewards and penalties
        history: Raw count of shared games over all pairs
    """

    games: float = 0.0
    level: float = 0.0
    gender: float = 0.0
    partner: float = 0.0
    history: float = 0.0
    total: float = field(init=False)

    def __post_init__(self) -> None:
        self.total = self.games + self.level + self.gender + self.partner + self.history


@dataclass
class RecommenderConfig:
    """Caller-supplied switch for the matchup recommender.

    Attributes:
        enabled: When False the recommender returns no group without searching
    """

    enabled: bool = True
