# player_registry.py
"""
Player registry data processing utilities.

This module handles conversion between Player objects and the two
formats the roster is edited in: the plain-text batch format and the
pandas DataFrames behind the Streamlit data editor.

Batch text format (one entry per line):

    M
    Alice 12 Bob
    Carl 8
    F
    Bob 11 Alice

A line holding only a gender marker switches the gender of the lines that
follow (male until the first marker). Other lines are "Name Level [Partner]".
Lines with fewer than two fields or a non-numeric level are skipped.
"""

import logging

import pandas as pd

from app_types import Gender
from constants import DEFAULT_LEVEL, GENDER_MARKERS
from session_logic import Player

logger = logging.getLogger("app.player_registry")

ROSTER_COLUMNS = ["#", "Player Name", "Gender", "Level", "Partner", "Games", "player_id"]


def parse_roster_text(text: str) -> list[Player]:
    """Parses batch roster text into (unsaved) Player objects."""
    players = []
    current_gender = Gender.MALE

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line in GENDER_MARKERS:
            current_gender = Gender(GENDER_MARKERS[line])
            continue

        parts = line.split()
        if len(parts) < 2:
            logger.debug("Skipping roster line without a level: %r", line)
            continue
        try:
            level = int(parts[1])
        except ValueError:
            logger.debug("Skipping roster line with invalid level: %r", line)
            continue

        players.append(
            Player(
                name=parts[0],
                gender=current_gender,
                level=level,
                partner=parts[2] if len(parts) > 2 else None,
            )
        )

    return players


def format_roster_text(players: list[Player]) -> str:
    """Writes players back out in the batch text format, grouped by gender."""
    lines = []
    for gender in Gender:
        members = [p for p in players if p.gender == gender]
        if not members:
            continue
        lines.append(gender.value)
        for p in members:
            fields = [p.name, str(p.level)]
            if p.partner:
                fields.append(p.partner)
            lines.append(" ".join(fields))
    return "\n".join(lines)


def create_roster_dataframe(players: list[Player]) -> pd.DataFrame:
    """Creates a DataFrame for the roster editor."""
    df_data = {
        "#": range(1, len(players) + 1),
        "Player Name": [p.name for p in players],
        "Gender": [p.gender.value for p in players],
        "Level": [p.level for p in players],
        "Partner": [p.partner or "" for p in players],
        "Games": [p.games_played for p in players],
        "player_id": [p.player_id for p in players],
    }
    return pd.DataFrame(df_data, columns=ROSTER_COLUMNS)


def dataframe_to_players(edited_df: pd.DataFrame) -> list[Player]:
    """
    Converts an edited roster DataFrame into Player objects.

    New rows (added in the editor) have no player_id and no game count; those
    come back as None and 0 respectively. Rows without a name are dropped.

    Args:
        edited_df: DataFrame from the Streamlit data_editor

    Returns:
        List of Player objects in table order
    """
    players = []
    for _, row in edited_df.dropna(subset=["Player Name"]).iterrows():
        name = str(row["Player Name"]).strip()
        if not name:
            continue

        # Convert NaN to None / defaults for cells the editor leaves empty
        player_id = None if pd.isna(row.get("player_id")) else int(row["player_id"])
        level = DEFAULT_LEVEL if pd.isna(row.get("Level")) else int(row["Level"])
        games = 0 if pd.isna(row.get("Games")) else int(row["Games"])
        partner = row.get("Partner")
        partner = None if partner is None or pd.isna(partner) else str(partner).strip()
        gender = row.get("Gender")
        gender = Gender.MALE if gender is None or pd.isna(gender) else Gender(gender)

        players.append(
            Player(
                name=name,
                gender=gender,
                level=level,
                partner=partner,
                games_played=games,
                player_id=player_id,
            )
        )

    return players
