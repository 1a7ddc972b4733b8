"""
Service layer for checks on a manual player selection.

This module holds the warning evaluator run whenever the selection on the
players page changes, plus roster checks for the name-keyed partner field.
"""

import logging
from collections import Counter
from itertools import combinations
from typing import Iterable

from app_types import PlayerName, SelectionWarning, Severity
from history_service import HistoryLike, build_pair_history, count_shared_games
from session_logic import Player

logger = logging.getLogger("app.player_service")


def are_declared_partners(p1: Player, p2: Player) -> bool:
    """True if either player names the other as partner."""
    return p1.partner == p2.name or p2.partner == p1.name


def evaluate_selection(
    selected: list[Player], history: Iterable[HistoryLike]
) -> list[SelectionWarning]:
    """
    Checks a manual selection for partner and repeat-pairing problems.

    1. Blocking: a selected player declares a partner who is not selected.
    2. Advisory: two selected players already shared a court, unless they
       are declared partners (repeats are expected for fixed pairs).

    All blocking warnings come first, then advisory ones, each in the order
    of the selected list.

    Args:
        selected: Players currently selected, in selection order
        history: Completed games

    Returns:
        List of warnings, empty if the selection raises no concerns.
    """
    if not selected:
        return []

    warnings: list[SelectionWarning] = []
    selected_names = {p.name for p in selected}

    for player in selected:
        if player.partner and player.partner not in selected_names:
            warnings.append(
                SelectionWarning(
                    severity=Severity.BLOCKING,
                    message=f"{player.name}'s partner is {player.partner}, but they are not selected!",
                    players=(player.name, player.partner),
                )
            )

    pair_history = build_pair_history(history)
    for p1, p2 in combinations(selected, 2):
        count = count_shared_games(pair_history, p1.player_id, p2.player_id)
        if count > 0 and not are_declared_partners(p1, p2):
            warnings.append(
                SelectionWarning(
                    severity=Severity.ADVISORY,
                    message=f"{p1.name} and {p2.name} have already played together {count} time(s)",
                    players=(p1.name, p2.name),
                    count=count,
                )
            )

    logger.debug(
        "Selection %s raised %d warning(s)", [p.name for p in selected], len(warnings)
    )
    return warnings


def has_blocking_warning(warnings: list[SelectionWarning]) -> bool:
    return any(w.severity == Severity.BLOCKING for w in warnings)


def find_duplicate_names(players: Iterable[Player]) -> set[PlayerName]:
    """Names shared by more than one player. Partner lookups are ambiguous for these."""
    counts = Counter(p.name for p in players)
    return {name for name, count in counts.items() if count > 1}

