from app_types import Gender
from session_logic import HistoryRecord, Player


def make_player(player_id, name, gender=Gender.MALE, level=10, partner=None, games_played=0):
    """Builds a Player with an id already assigned, as the store would."""
    return Player(
        name=name,
        gender=gender,
        level=level,
        partner=partner,
        games_played=games_played,
        player_id=player_id,
    )


def make_history(*groups):
    """
    Builds history records from groups of player ids.

    Example:
        make_history((1, 2, 3, 4), (1, 2, 5, 6))
    """
    return [
        HistoryRecord(record_id=i, player_ids=tuple(group), timestamp=float(i))
        for i, group in enumerate(groups, start=1)
    ]


def generate_players(n, games_played=0, start_id=1):
    """
    Generates N players named P<id> with equal levels and alternating genders.

    Returns:
        List of Player objects.
    """
    players = []
    for player_id in range(start_id, start_id + n):
        gender = Gender.MALE if player_id % 2 == 1 else Gender.FEMALE
        players.append(
            make_player(player_id, f"P{player_id}", gender, games_played=games_played)
        )
    return players
