"""
Service layer for orchestrating session operations that involve the
record store, the matchup engine and persistence.

This module sits between the UI (pages) and the lower-level logic modules,
ensuring that business rules are applied consistently regardless of where
the operation is initiated (UI or Tests). Every mutating call saves the
session afterwards.
"""

import logging
import random

from app_types import PlayerId, RecommendedGroup, RecommenderConfig, SelectionWarning
from constants import PLAYERS_PER_GROUP
from exceptions import SessionError, ValidationError
from optimizer import recommend_matchup
from player_registry import parse_roster_text
from player_service import evaluate_selection, find_duplicate_names
from session_logic import ClubNightSession, Court, HistoryRecord, Matchup, Player, SessionManager

logger = logging.getLogger("app.session_service")


def load_or_create_session(session_name: str) -> ClubNightSession:
    """Loads the named session, or creates and saves an empty one."""
    session = SessionManager.load(session_name)
    if session is None:
        session = ClubNightSession()
        SessionManager.save(session, session_name)
        logger.info("Created new session '%s'", session_name)
    return session


def check_selection(
    session: ClubNightSession, player_ids: list[PlayerId]
) -> list[SelectionWarning]:
    """Runs the warning evaluator for the players selected on the players page."""
    selected = [session.players[pid] for pid in player_ids if pid in session.players]
    return evaluate_selection(selected, session.history)


def add_missing_partners(
    session: ClubNightSession, player_ids: list[PlayerId]
) -> list[PlayerId]:
    """
    Extends a selection with the free partners of its players, up to four.

    Partners who are staged, on court or already selected are not added.
    """
    selected = list(player_ids)
    free_ids = {p.player_id for p in session.available_players()}
    for pid in player_ids:
        for partner_id in sorted(session.partner_ids(session.players[pid])):
            if len(selected) >= PLAYERS_PER_GROUP:
                return selected
            if partner_id in free_ids and partner_id not in selected:
                selected.append(partner_id)
    return selected


def recommend_next_matchup(
    session: ClubNightSession,
    config: RecommenderConfig,
    rng: random.Random | None = None,
) -> RecommendedGroup:
    """
    Recommends four available players, or returns [] when the recommender is
    disabled or too few players are free.

    Players who are staged or on court are never considered, so a partner who
    is mid-game does not count as "available but excluded".
    """
    if not config.enabled:
        logger.debug("Recommender disabled; skipping search")
        return []
    return recommend_matchup(session.available_players(), session.history, rng)


def stage_recommended_matchup(
    session: ClubNightSession,
    session_name: str,
    config: RecommenderConfig,
    rng: random.Random | None = None,
) -> Matchup | None:
    """Stages the recommended group. Returns None if nothing was recommended."""
    group = recommend_next_matchup(session, config, rng)
    if not group:
        return None

    matchup = session.stage_matchup(group)
    SessionManager.save(session, session_name)
    return matchup


def stage_selection(
    session: ClubNightSession, session_name: str, player_ids: list[PlayerId]
) -> Matchup:
    """
    Stages a manual selection of four players.

    Warnings do not prevent staging; the UI shows them before the user
    confirms.

    Raises:
        ValidationError: If the selection is not four available players.
    """
    matchup = session.stage_matchup(player_ids)
    SessionManager.save(session, session_name)
    return matchup


def delete_matchup(session: ClubNightSession, session_name: str, matchup_id: int) -> None:
    session.delete_matchup(matchup_id)
    SessionManager.save(session, session_name)


def assign_to_court(
    session: ClubNightSession,
    session_name: str,
    matchup_id: int,
    court_id: int | None = None,
) -> Court:
    """
    Puts a staged matchup on a court and persists the change.

    Raises:
        SessionError: If the matchup or court is unknown, or no court is free.
    """
    court = session.assign_matchup(matchup_id, court_id)
    SessionManager.save(session, session_name)
    return court


def finish_game(
    session: ClubNightSession, session_name: str, court_id: int
) -> HistoryRecord | None:
    """Ends the game on a court, logging it to history."""
    record = session.end_game(court_id)
    if record is not None:
        SessionManager.save(session, session_name)
    return record


def update_court_count(session: ClubNightSession, session_name: str, delta: int) -> None:
    """
    Adds (delta > 0) or removes (delta < 0) courts from the end of the list.

    Raises:
        SessionError: If any court to be removed is in use; no court is removed.
    """
    for _ in range(delta):
        session.add_court()
    if delta < 0:
        session.remove_courts(-delta)
    SessionManager.save(session, session_name)


def reset_games(session: ClubNightSession, session_name: str) -> None:
    """Zeroes all games-played counters, keeping the players."""
    session.reset_games_played()
    SessionManager.save(session, session_name)
    logger.info("Reset games played for %d player(s)", len(session.players))


def clear_history(session: ClubNightSession, session_name: str) -> None:
    session.clear_history()
    SessionManager.save(session, session_name)
    logger.info("Cleared game history")


def import_roster_text(
    session: ClubNightSession, session_name: str, text: str
) -> list[Player]:
    """
    Adds the players described in batch roster text.

    Returns:
        The players actually added (duplicates of existing names are skipped).
    """
    parsed = parse_roster_text(text)
    added = session.add_players(parsed)
    if added:
        SessionManager.save(session, session_name)
    logger.info("Imported %d of %d roster line(s)", len(added), len(parsed))
    return added


def sync_roster(
    session: ClubNightSession, session_name: str, edited_players: list[Player]
) -> None:
    """
    Applies the roster editor's table to the store.

    Rows whose player_id disappeared are deleted, rows with a player_id are
    updated (renames cascade to partner fields), rows without one are added.
    The whole table is checked before the store is touched, so a rejected
    edit leaves the session unchanged.

    Raises:
        ValidationError: If the edited table repeats a name or has an empty one.
        SessionError: If a deleted player is staged or on court.
    """
    if any(not p.name.strip() for p in edited_players):
        raise ValidationError("Player name must not be empty.")
    duplicates = find_duplicate_names(edited_players)
    if duplicates:
        raise ValidationError(f"Duplicate player names: {', '.join(sorted(duplicates))}")

    existing = [p for p in edited_players if p.player_id in session.players]
    kept_ids = {p.player_id for p in existing}
    deleted_ids = [pid for pid in session.players if pid not in kept_ids]
    busy_ids = session.busy_player_ids()
    busy = [session.players[pid].name for pid in deleted_ids if pid in busy_ids]
    if busy:
        raise SessionError(
            f"Cannot remove players who are staged or on court: {', '.join(busy)}"
        )

    # Unchanged partner cells may hold a name that is about to be renamed
    stored_partners = {p.player_id: session.players[p.player_id].partner for p in existing}

    if deleted_ids:
        logger.info("Deleting %d player(s) from roster", len(deleted_ids))
        session.remove_players(deleted_ids)
    session.rename_players({p.player_id: p.name for p in existing})

    for edited in edited_players:
        if edited.player_id in kept_ids:
            partner_edited = edited.partner != stored_partners[edited.player_id]
            session.update_player(
                edited.player_id,
                gender=edited.gender,
                level=edited.level,
                partner=(edited.partner or "") if partner_edited else None,
            )
        else:
            session.add_player(edited.name, edited.gender, edited.level, edited.partner)

    SessionManager.save(session, session_name)
    logger.info("Synced %d player(s) to roster", len(edited_players))
