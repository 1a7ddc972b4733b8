import pytest

from app_types import Gender
from session_logic import ClubNightSession
from tests.utils import make_player


@pytest.fixture
def sample_players():
    """Returns a list of eight players with ids 1-8, none of whom has played."""
    return [
        make_player(1, "Alice", Gender.FEMALE, level=10, partner="Bob"),
        make_player(2, "Bob", Gender.MALE, level=10, partner="Alice"),
        make_player(3, "Charlie", Gender.MALE, level=12),
        make_player(4, "Dave", Gender.MALE, level=12),
        make_player(5, "Eve", Gender.FEMALE, level=8),
        make_player(6, "Frank", Gender.MALE, level=8),
        make_player(7, "Grace", Gender.FEMALE, level=11),
        make_player(8, "Heidi", Gender.FEMALE, level=11),
    ]


@pytest.fixture
def sample_session(sample_players):
    """A store holding the sample players (ids 1-8, in the same order) and 3 courts."""
    return ClubNightSession(players=sample_players)


@pytest.fixture
def sessions_dir(tmp_path, monkeypatch):
    """Points session persistence at a temporary directory."""
    import session_logic

    monkeypatch.setattr(session_logic, "SESSIONS_DIR", str(tmp_path / "sessions"))
    return tmp_path / "sessions"
