"""
Tests for the session service layer.

These tests verify that service calls apply store changes, consult the
recommender configuration, and persist the session afterwards.
"""

import random
from unittest.mock import patch

import pytest

from app_types import Gender, RecommenderConfig, Severity
from exceptions import SessionError, ValidationError
from session_logic import ClubNightSession, SessionManager
import session_service
from tests.utils import make_history, make_player


SESSION_NAME = "test-night"


@pytest.fixture
def mock_save():
    with patch.object(SessionManager, "save") as save:
        yield save


class TestRecommendations:
    def test_disabled_recommender_returns_nothing(self, sample_session):
        with patch("session_service.recommend_matchup") as recommend:
            result = session_service.recommend_next_matchup(
                sample_session, RecommenderConfig(enabled=False)
            )

        assert result == []
        recommend.assert_not_called()

    def test_recommendation_skips_busy_players(self, sample_session):
        sample_session.stage_matchup([1, 2, 3, 4])

        result = session_service.recommend_next_matchup(
            sample_session, RecommenderConfig(), rng=random.Random(0)
        )

        assert sorted(result) == [5, 6, 7, 8]

    def test_mid_game_partner_is_not_penalised(self):
        """Bob is on court, so Alice's partner does not count as available."""
        session = ClubNightSession(
            players=[
                make_player(None, "Alice", Gender.FEMALE, partner="Bob"),
                make_player(None, "Bob", Gender.MALE, partner="Alice"),
                make_player(None, "C", Gender.MALE),
                make_player(None, "D", Gender.MALE),
                make_player(None, "E", Gender.MALE),
                make_player(None, "F", Gender.MALE),
                make_player(None, "G", Gender.FEMALE),
                make_player(None, "H", Gender.FEMALE),
                make_player(None, "I", Gender.MALE),
            ]
        )
        matchup = session.stage_matchup([2, 3, 4, 5])
        session.assign_matchup(matchup.matchup_id)
        for pid in (1, 6, 7, 8, 9):
            session.players[pid].games_played = 1
        # G and H have met, so the only even group without Alice scores 1
        session.history.extend(make_history((2, 3, 7, 8)))

        for seed in range(5):
            result = session_service.recommend_next_matchup(
                session, RecommenderConfig(), rng=random.Random(seed)
            )
            # Counting Bob as excluded would add 25,000 to every group with Alice
            assert 1 in result
            assert sorted(result) != [6, 7, 8, 9]

    def test_stage_recommended_matchup_saves(self, sample_session, mock_save):
        matchup = session_service.stage_recommended_matchup(
            sample_session, SESSION_NAME, RecommenderConfig(), rng=random.Random(1)
        )

        assert matchup.matchup_id in sample_session.matchups
        mock_save.assert_called_once_with(sample_session, SESSION_NAME)

    def test_stage_recommended_with_too_few_players(self, mock_save):
        session = ClubNightSession(players=[make_player(None, "Solo")])

        assert session_service.stage_recommended_matchup(
            session, SESSION_NAME, RecommenderConfig()
        ) is None
        mock_save.assert_not_called()


class TestSelection:
    def test_check_selection_uses_session_history(self, sample_session):
        matchup = sample_session.stage_matchup([3, 4, 5, 6])
        court = sample_session.assign_matchup(matchup.matchup_id)
        sample_session.end_game(court.court_id)

        warnings = session_service.check_selection(sample_session, [1, 3, 4])

        assert [w.severity for w in warnings] == [Severity.BLOCKING, Severity.ADVISORY]
        assert warnings[1].players == ("Charlie", "Dave")

    def test_add_missing_partners(self, sample_session):
        assert session_service.add_missing_partners(sample_session, [1, 3, 4]) == [1, 3, 4, 2]

    def test_add_missing_partners_skips_busy_partner(self, sample_session):
        sample_session.stage_matchup([2, 5, 6, 7])

        assert session_service.add_missing_partners(sample_session, [1, 3, 4]) == [1, 3, 4]

    def test_add_missing_partners_respects_group_size(self, sample_session):
        assert session_service.add_missing_partners(sample_session, [1, 3, 4, 5]) == [1, 3, 4, 5]

    def test_stage_selection_validates(self, sample_session, mock_save):
        with pytest.raises(ValidationError):
            session_service.stage_selection(sample_session, SESSION_NAME, [1, 2, 3])
        mock_save.assert_not_called()

    def test_full_game_cycle(self, sample_session, mock_save):
        matchup = session_service.stage_selection(sample_session, SESSION_NAME, [1, 2, 3, 4])
        court = session_service.assign_to_court(sample_session, SESSION_NAME, matchup.matchup_id)
        record = session_service.finish_game(sample_session, SESSION_NAME, court.court_id)

        assert record.player_ids == (1, 2, 3, 4)
        assert sample_session.players[1].games_played == 1
        assert mock_save.call_count == 3

    def test_finish_game_on_free_court_does_not_save(self, sample_session, mock_save):
        assert session_service.finish_game(sample_session, SESSION_NAME, 1) is None
        mock_save.assert_not_called()


class TestCourtsAndResets:
    def test_update_court_count(self, sample_session, mock_save):
        session_service.update_court_count(sample_session, SESSION_NAME, 2)
        assert len(sample_session.courts) == 5

        session_service.update_court_count(sample_session, SESSION_NAME, -3)
        assert len(sample_session.courts) == 2

    def test_remove_court_in_use_raises(self, sample_session, mock_save):
        for court_id in list(sample_session.courts)[:-1]:
            sample_session.remove_court(court_id)
        matchup = sample_session.stage_matchup([1, 2, 3, 4])
        sample_session.assign_matchup(matchup.matchup_id)

        with pytest.raises(SessionError):
            session_service.update_court_count(sample_session, SESSION_NAME, -1)

    def test_removing_several_courts_is_all_or_nothing(self, sample_session, mock_save):
        matchup = sample_session.stage_matchup([1, 2, 3, 4])
        sample_session.assign_matchup(matchup.matchup_id, court_id=2)

        with pytest.raises(SessionError):
            session_service.update_court_count(sample_session, SESSION_NAME, -2)

        assert list(sample_session.courts) == [1, 2, 3]
        mock_save.assert_not_called()

    def test_reset_games(self, sample_session, mock_save):
        sample_session.players[1].games_played = 5
        session_service.reset_games(sample_session, SESSION_NAME)

        assert sample_session.players[1].games_played == 0
        mock_save.assert_called_once()


class TestRoster:
    def test_import_roster_text_skips_existing(self, sample_session, mock_save):
        added = session_service.import_roster_text(
            sample_session, SESSION_NAME, "M\nAlice 10\nZed 9 Yara\nF\nYara 9 Zed"
        )

        assert [p.name for p in added] == ["Zed", "Yara"]
        assert added[1].gender == Gender.FEMALE
        assert len(sample_session.players) == 10

    def test_sync_roster_adds_updates_and_deletes(self, sample_session, mock_save):
        edited = [
            make_player(p.player_id, p.name, p.gender, p.level, p.partner)
            for p in sample_session.players.values()
            if p.player_id != 8
        ]
        edited[1].name = "Robert"  # Bob; Alice's row still says "Bob"
        edited[2].level = 14
        edited.append(make_player(None, "Newbie", Gender.FEMALE, 6, partner="Charlie"))

        session_service.sync_roster(sample_session, SESSION_NAME, edited)

        assert 8 not in sample_session.players
        assert sample_session.players[2].name == "Robert"
        assert sample_session.players[1].partner == "Robert"
        assert sample_session.players[3].level == 14
        newbie = sample_session.players_named("Newbie")[0]
        assert newbie.partner == "Charlie"
        mock_save.assert_called_once()

    def test_sync_roster_rejects_duplicate_names(self, sample_session, mock_save):
        edited = list(sample_session.players.values()) + [make_player(None, "Alice")]

        with pytest.raises(ValidationError):
            session_service.sync_roster(sample_session, SESSION_NAME, edited)
        assert len(sample_session.players) == 8

    def test_sync_roster_swaps_names_and_deletes(self, sample_session, mock_save):
        edited = [
            make_player(p.player_id, p.name, p.gender, p.level, p.partner)
            for p in sample_session.players.values()
            if p.player_id != 8
        ]
        edited[2].name = "Dave"
        edited[3].name = "Charlie"

        session_service.sync_roster(sample_session, SESSION_NAME, edited)

        assert sample_session.names_for([3, 4]) == ["Dave", "Charlie"]
        assert 8 not in sample_session.players
        mock_save.assert_called_once()

    def test_rejected_sync_leaves_roster_untouched(self, sample_session, mock_save):
        sample_session.stage_matchup([5, 6, 7, 8])
        edited = [
            make_player(p.player_id, p.name, p.gender, p.level, p.partner)
            for p in sample_session.players.values()
            if p.player_id not in (3, 8)
        ]
        edited[1].name = "Robert"

        with pytest.raises(SessionError):
            session_service.sync_roster(sample_session, SESSION_NAME, edited)

        assert len(sample_session.players) == 8
        assert sample_session.players[2].name == "Bob"
        mock_save.assert_not_called()


def test_load_or_create_session(sessions_dir):
    created = session_service.load_or_create_session(SESSION_NAME)
    created.add_player("Alice", Gender.FEMALE)
    SessionManager.save(created, SESSION_NAME)

    loaded = session_service.load_or_create_session(SESSION_NAME)

    assert [p.name for p in loaded.players.values()] == ["Alice"]
