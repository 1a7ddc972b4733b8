"""
Pairing history lookups shared by the warning evaluator and the recommender.

History records list the four player ids of a finished game. Both engine
functions need to know how often two players have shared a court, so the
records are folded once per call into a pair -> count mapping.
"""

from collections import defaultdict
from itertools import combinations
from typing import Iterable, Protocol

from app_types import PairHistory, PlayerId, PlayerPair


class HistoryLike(Protocol):
    """Protocol for objects with history-record-like attributes."""

    player_ids: tuple[PlayerId, ...]


def pair_key(a: PlayerId, b: PlayerId) -> PlayerPair:
    """Returns the canonical (sorted) key for an unordered pair."""
    return (a, b) if a <= b else (b, a)


def build_pair_history(history: Iterable[HistoryLike]) -> PairHistory:
    """Counts, for every pair of players, the history records containing both.

    Args:
        history: Completed games, each listing the ids that played together

    Returns:
        Mapping of sorted id pairs to number of shared games.
    """
    counts: PairHistory = defaultdict(int)
    for record in history:
        # A malformed record repeating an id still counts each pair once
        for a, b in combinations(sorted(set(record.player_ids)), 2):
            counts[(a, b)] += 1
    return dict(counts)


def count_shared_games(pair_history: PairHistory, a: PlayerId, b: PlayerId) -> int:
    """Number of completed games in which a and b were on court together."""
    return pair_history.get(pair_key(a, b), 0)
