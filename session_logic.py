# session_logic.py
import itertools
import logging
import os
import pickle
import time
from collections import Counter
from dataclasses import dataclass, field

from app_types import Gender, PlayerId
from constants import (
    COURT_NAME_FORMAT,
    DEFAULT_LEVEL,
    DEFAULT_NUM_COURTS,
    PLAYERS_PER_GROUP,
    SESSIONS_DIR,
)
from exceptions import SessionError, ValidationError

logger = logging.getLogger("app.session_logic")


@dataclass
class Player:
    """A club member on the roster.

    The partner is stored by display name; the store keeps it in step with
    renames (see ClubNightSession.rename_player).
    """

    name: str
    gender: Gender
    level: int = DEFAULT_LEVEL
    partner: str | None = None
    games_played: int = 0
    player_id: PlayerId | None = None

    def __post_init__(self):
        self.gender = Gender(self.gender)
        self.level = int(self.level)
        # Editors hand back "" for an empty partner cell
        if not self.partner:
            self.partner = None


@dataclass
class HistoryRecord:
    """A finished game. Never edited once written."""

    record_id: int
    player_ids: tuple[PlayerId, ...]
    timestamp: float


@dataclass
class Matchup:
    """Four players staged for the next free court."""

    matchup_id: int
    player_ids: tuple[PlayerId, ...]
    timestamp: float


@dataclass
class Court:
    court_id: int
    name: str
    player_ids: list[PlayerId] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.player_ids


class SessionManager:
    """Handles loading, saving, and clearing named session states."""

    @staticmethod
    def _get_session_path(session_name: str) -> str:
        """Returns the file path for a given session name."""
        os.makedirs(SESSIONS_DIR, exist_ok=True)
        return os.path.join(SESSIONS_DIR, f"{session_name}.pkl")

    @staticmethod
    def save(session_instance, session_name: str):
        """Saves the given session instance to a named file."""
        path = SessionManager._get_session_path(session_name)
        with open(path, "wb") as f:
            pickle.dump(session_instance, f)
        logger.debug("Session '%s' saved", session_name)

    @staticmethod
    def load(session_name: str):
        """
        Loads a session from a named file if it exists.
        Returns the session object or None.
        """
        path = SessionManager._get_session_path(session_name)
        if os.path.exists(path):
            try:
                with open(path, "rb") as f:
                    session = pickle.load(f)
                    logger.info("Session '%s' loaded", session_name)
                    return session
            except (pickle.UnpicklingError, EOFError):
                logger.exception(
                    "Failed to load session '%s'. It might be corrupted.", session_name
                )
                os.remove(path)
                return None
        return None

    @staticmethod
    def clear(session_name: str):
        """Clears a named session by deleting its file."""
        path = SessionManager._get_session_path(session_name)
        if os.path.exists(path):
            os.remove(path)
            logger.info("Session '%s' cleared", session_name)

    @staticmethod
    def list_sessions():
        """Returns a list of all available session names."""
        if not os.path.exists(SESSIONS_DIR):
            return []
        files = [f for f in os.listdir(SESSIONS_DIR) if f.endswith(".pkl")]
        return [f[:-4] for f in files]  # Remove .pkl extension


class ClubNightSession:
    """
    The club night's record store: Players, staged Matchups, Courts and History.

    This class only contains state transitions and no persistence code.
    It keeps the invariant that a player is in at most one staged matchup
    and on at most one court.
    """

    def __init__(self, players=None, num_courts=DEFAULT_NUM_COURTS):
        self.players: dict[PlayerId, Player] = {}
        self.matchups: dict[int, Matchup] = {}
        self.courts: dict[int, Court] = {}
        self.history: list[HistoryRecord] = []
        self._next_ids = {"player": 1, "matchup": 1, "court": 1, "history": 1}

        for _ in range(num_courts):
            self.add_court()
        if players:
            self.add_players(players)

    def _take_id(self, kind: str) -> int:
        new_id = self._next_ids[kind]
        self._next_ids[kind] += 1
        return new_id

    # ------------------------------------------------------------------ #
    # Players
    # ------------------------------------------------------------------ #

    def names_for(self, player_ids) -> list[str]:
        return [self.players[pid].name for pid in player_ids if pid in self.players]

    def players_named(self, name: str) -> list[Player]:
        return [p for p in self.players.values() if p.name == name]

    def partner_ids(self, player: Player) -> set[PlayerId]:
        """Ids of the players matching this player's partner name (empty if none)."""
        if not player.partner:
            return set()
        return {
            p.player_id for p in self.players_named(player.partner)
        } - {player.player_id}

    def add_player(
        self,
        name: str,
        gender: Gender,
        level: int = DEFAULT_LEVEL,
        partner: str | None = None,
        games_played: int = 0,
    ) -> Player | None:
        """
        Adds a player to the roster.

        Returns the stored player, or None if the name already exists.
        """
        name = name.strip()
        if not name:
            raise ValidationError("Player name must not be empty.")
        if self.players_named(name):
            return None

        player = Player(
            name=name,
            gender=gender,
            level=level,
            partner=partner,
            games_played=games_played,
            player_id=self._take_id("player"),
        )
        self.players[player.player_id] = player
        logger.info("Added player %s (level %s)", player.name, player.level)
        return player

    def add_players(self, players: list[Player]) -> list[Player]:
        """Bulk add; players whose name already exists are skipped."""
        added = []
        for p in players:
            stored = self.add_player(
                p.name, p.gender, p.level, p.partner, p.games_played
            )
            if stored is None:
                logger.warning("Skipped duplicate player name %s", p.name)
            else:
                added.append(stored)
        return added

    def update_player(
        self,
        player_id: PlayerId,
        gender: Gender | None = None,
        level: int | None = None,
        partner: str | None = None,
    ) -> Player:
        """Updates gender, level or partner. Pass partner="" to clear it."""
        player = self._get_player(player_id)
        if gender is not None:
            player.gender = Gender(gender)
        if level is not None:
            player.level = int(level)
        if partner is not None:
            player.partner = partner or None
        return player

    def rename_player(self, player_id: PlayerId, new_name: str) -> Player:
        """Renames a player and rewrites partner fields that pointed at the old name."""
        self.rename_players({player_id: new_name})
        return self.players[player_id]

    def rename_players(self, new_names: dict[PlayerId, str]) -> dict[str, str]:
        """
        Renames several players in one step, so names may be swapped or chained.

        All names are checked against the roster as it will look afterwards
        before anything changes. Partner fields follow the renames.

        Returns:
            Mapping of old name to new name for the players actually renamed.

        Raises:
            ValidationError: If a name is empty or would be shared by two players.
        """
        changes: dict[PlayerId, str] = {}
        for player_id, new_name in new_names.items():
            player = self._get_player(player_id)
            new_name = new_name.strip()
            if not new_name:
                raise ValidationError("Player name must not be empty.")
            if new_name != player.name:
                changes[player_id] = new_name
        if not changes:
            return {}

        final_names = Counter(changes.get(pid, p.name) for pid, p in self.players.items())
        clashes = sorted(changes[pid] for pid in changes if final_names[changes[pid]] > 1)
        if clashes:
            raise ValidationError(f"A player named {clashes[0]} already exists.")

        renames = {self.players[pid].name: new_name for pid, new_name in changes.items()}
        for other in self.players.values():
            if other.partner in renames:
                other.partner = renames[other.partner]
        for pid, new_name in changes.items():
            self.players[pid].name = new_name
        for old_name, new_name in renames.items():
            logger.info("Renamed player %s to %s", old_name, new_name)
        return renames

    def remove_players(self, player_ids: list[PlayerId]) -> None:
        """Deletes players. Players staged or on court must be released first."""
        busy = self.busy_player_ids()
        blocked = [self.players[pid].name for pid in player_ids if pid in busy]
        if blocked:
            raise SessionError(
                f"Cannot remove players who are staged or on court: {', '.join(blocked)}"
            )
        for pid in player_ids:
            if self.players.pop(pid, None) is not None:
                logger.info("Removed player id %s", pid)

    def _get_player(self, player_id: PlayerId) -> Player:
        try:
            return self.players[player_id]
        except KeyError:
            raise ValidationError(f"Unknown player id {player_id}") from None

    # ------------------------------------------------------------------ #
    # Availability
    # ------------------------------------------------------------------ #

    def staged_player_ids(self) -> set[PlayerId]:
        return {pid for m in self.matchups.values() for pid in m.player_ids}

    def on_court_player_ids(self) -> set[PlayerId]:
        return {pid for c in self.courts.values() for pid in c.player_ids}

    def busy_player_ids(self) -> set[PlayerId]:
        return self.staged_player_ids() | self.on_court_player_ids()

    def available_players(self) -> list[Player]:
        """Roster minus staged and on-court players, in roster order."""
        busy = self.busy_player_ids()
        return [p for pid, p in self.players.items() if pid not in busy]

    # ------------------------------------------------------------------ #
    # Staging area
    # ------------------------------------------------------------------ #

    def stage_matchup(self, player_ids: list[PlayerId]) -> Matchup:
        """Stages exactly four distinct, available players as a matchup."""
        ids = tuple(player_ids)
        if len(ids) != PLAYERS_PER_GROUP or len(set(ids)) != PLAYERS_PER_GROUP:
            raise ValidationError(
                f"A matchup needs exactly {PLAYERS_PER_GROUP} different players."
            )
        for pid in ids:
            self._get_player(pid)
        busy = self.busy_player_ids() & set(ids)
        if busy:
            names = ", ".join(self.players[pid].name for pid in ids if pid in busy)
            raise ValidationError(f"Already staged or on court: {names}")

        matchup = Matchup(
            matchup_id=self._take_id("matchup"), player_ids=ids, timestamp=time.time()
        )
        self.matchups[matchup.matchup_id] = matchup
        logger.info(
            "Staged matchup %s: %s",
            matchup.matchup_id,
            [self.players[pid].name for pid in ids],
        )
        return matchup

    def delete_matchup(self, matchup_id: int) -> None:
        if self.matchups.pop(matchup_id, None) is None:
            raise SessionError(f"Unknown matchup {matchup_id}")

    # ------------------------------------------------------------------ #
    # Courts
    # ------------------------------------------------------------------ #

    def add_court(self) -> Court:
        """Adds a court named after the lowest court number not in use."""
        taken = {c.name for c in self.courts.values()}
        number = next(
            n for n in itertools.count(1) if COURT_NAME_FORMAT.format(n) not in taken
        )
        court_id = self._take_id("court")
        court = Court(court_id=court_id, name=COURT_NAME_FORMAT.format(number))
        self.courts[court_id] = court
        return court

    def remove_courts(self, count: int) -> None:
        """Removes the last `count` courts, or none if any of them is in use."""
        if count > len(self.courts):
            raise SessionError(
                f"Cannot remove {count} court(s); only {len(self.courts)} exist."
            )
        doomed = list(self.courts.values())[len(self.courts) - count:]
        in_use = [c.name for c in doomed if not c.is_empty]
        if in_use:
            raise SessionError(f"{', '.join(in_use)} in use and cannot be removed.")
        for court in doomed:
            del self.courts[court.court_id]

    def remove_court(self, court_id: int | None = None) -> None:
        """Removes the given court, or the last one. Courts in use are kept."""
        if not self.courts:
            raise SessionError("There are no courts to remove.")
        if court_id is None:
            court_id = list(self.courts)[-1]
        court = self._get_court(court_id)
        if not court.is_empty:
            raise SessionError(f"{court.name} is in use and cannot be removed.")
        del self.courts[court_id]

    def first_free_court(self) -> Court | None:
        return next((c for c in self.courts.values() if c.is_empty), None)

    def assign_matchup(self, matchup_id: int, court_id: int | None = None) -> Court:
        """
        Moves a staged matchup onto a court and counts the game for each player.

        Uses the first free court when court_id is not given.
        """
        matchup = self.matchups.get(matchup_id)
        if matchup is None:
            raise SessionError(f"Unknown matchup {matchup_id}")

        if court_id is None:
            court = self.first_free_court()
            if court is None:
                raise SessionError("No free court available.")
        else:
            court = self._get_court(court_id)
            if not court.is_empty:
                raise SessionError(f"{court.name} is already in use.")

        court.player_ids = list(matchup.player_ids)
        del self.matchups[matchup_id]
        for pid in court.player_ids:
            if pid in self.players:
                self.players[pid].games_played += 1

        logger.info("Matchup %s assigned to %s", matchup_id, court.name)
        return court

    def end_game(self, court_id: int) -> HistoryRecord | None:
        """Logs the court's players to history and frees the court. A free court is a no-op."""
        court = self._get_court(court_id)
        if court.is_empty:
            return None

        record = HistoryRecord(
            record_id=self._take_id("history"),
            player_ids=tuple(court.player_ids),
            timestamp=time.time(),
        )
        self.history.append(record)
        court.player_ids = []
        logger.info("Game on %s finished", court.name)
        return record

    def _get_court(self, court_id: int) -> Court:
        try:
            return self.courts[court_id]
        except KeyError:
            raise SessionError(f"Unknown court {court_id}") from None

    # ------------------------------------------------------------------ #
    # Resets
    # ------------------------------------------------------------------ #

    def reset_games_played(self):
        """Zeroes every player's games counter. Players are kept."""
        for player in self.players.values():
            player.games_played = 0

    def clear_history(self):
        self.history.clear()
