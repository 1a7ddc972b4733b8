# optimizer.py
"""
Matchup recommender.

Picks the next group of four from the players who are free, by scoring
every 4-player group among the least-played candidates. Terms are weighted
so that each criterion dominates all those after it for realistic inputs:

    games played  >  level spread  >  gender split  >  partners  >  history
"""

import logging
import random
from itertools import combinations
from statistics import pstdev
from typing import Iterable

from app_types import Gender, GroupScore, PairHistory, RecommendedGroup
from constants import (
    CANDIDATE_POOL_SIZE,
    GAMES_WEIGHT,
    LEVEL_WEIGHT,
    ODD_GENDER_PENALTY,
    PARTNER_EXCLUDED_PENALTY,
    PARTNER_TOGETHER_REWARD,
    PLAYERS_PER_GROUP,
)
from history_service import HistoryLike, build_pair_history, count_shared_games
from logger import log_recommendation_debug
from session_logic import Player

logger = logging.getLogger("app.optimizer")


def build_candidate_pool(
    players: list[Player],
    rng: random.Random | None = None,
    pool_size: int = CANDIDATE_POOL_SIZE,
) -> list[Player]:
    """
    Returns the least-played players, at most pool_size of them.

    Players with the same games played are shuffled relative to each other
    so that ties rotate between calls. Pass a seeded rng for repeatable order.
    """
    rng = rng or random
    shuffled = list(players)
    rng.shuffle(shuffled)
    # sort is stable, so the shuffle survives within equal game counts
    shuffled.sort(key=lambda p: p.games_played)
    return shuffled[:pool_size]


def score_group(
    group: tuple[Player, ...],
    available_names: set[str],
    pair_history: PairHistory,
) -> GroupScore:
    """
    Scores a candidate group. Lower is better.

    Args:
        group: The four players being considered
        available_names: Names of every available player, not only the pool
        pair_history: Shared-game counts per pair

    Returns:
        GroupScore with the weighted terms and their total.
    """
    games = sum(p.games_played for p in group) * GAMES_WEIGHT
    level = pstdev([p.level for p in group]) * LEVEL_WEIGHT

    num_male = sum(1 for p in group if p.gender == Gender.MALE)
    gender = ODD_GENDER_PENALTY if num_male % 2 == 1 else 0

    group_names = {p.name for p in group}
    partner = 0
    for p in group:
        if not p.partner:
            continue
        if p.partner in group_names:
            partner += PARTNER_TOGETHER_REWARD
        elif p.partner in available_names:
            partner += PARTNER_EXCLUDED_PENALTY

    history = sum(
        count_shared_games(pair_history, a.player_id, b.player_id)
        for a, b in combinations(group, 2)
    )

    return GroupScore(
        games=games, level=level, gender=gender, partner=partner, history=history
    )


def recommend_matchup(
    available_players: list[Player],
    history: Iterable[HistoryLike],
    rng: random.Random | None = None,
) -> RecommendedGroup:
    """
    Recommends the four players for the next game.

    Args:
        available_players: Players free to play (not staged, not on court)
        history: Completed games
        rng: Random source for the equal-games shuffle (default: module random)

    Returns:
        The ids of the best group, or an empty list if fewer than four
        players are available.
    """
    if len(available_players) < PLAYERS_PER_GROUP:
        logger.info(
            "Not enough players to recommend a matchup (%d available, %d needed)",
            len(available_players),
            PLAYERS_PER_GROUP,
        )
        return []

    pool = build_candidate_pool(available_players, rng)
    available_names = {p.name for p in available_players}
    pair_history = build_pair_history(history)

    best_group = None
    best_score = None
    groups_searched = 0
    for group in combinations(pool, PLAYERS_PER_GROUP):
        groups_searched += 1
        score = score_group(group, available_names, pair_history)
        if best_score is None or score.total < best_score.total:
            best_group, best_score = group, score

    log_recommendation_debug(
        logger,
        pool_size=len(pool),
        groups_searched=groups_searched,
        best_names=[p.name for p in best_group],
        best_score=best_score,
    )
    return [p.player_id for p in best_group]
