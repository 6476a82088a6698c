"""
Match repository: sport-scoped loads and compare-and-swap saves.
"""
import pytest
from sqlalchemy.exc import OperationalError

from live_scoring.models import MatchRecord, TennisMatchRecord
from live_scoring.services.errors import MatchNotFoundError, PersistenceError, VersionConflictError
from live_scoring.services.match_repository import MatchRepository

from tests.factories import build_match, make_event


@pytest.mark.unit
class TestMatchRepository:

    def test_create_then_find_returns_same_document(self, repository, stored_match):
        match = stored_match('badminton')

        loaded = repository.find_by_id(match.id)

        assert loaded is not match
        assert loaded.version == 1
        assert loaded.to_dict()['teams'] == match.to_dict()['teams']
        assert type(loaded).__name__ == 'BadmintonMatch'

    def test_lookup_scoped_to_another_sport_misses(self, repository, stored_match):
        match = stored_match('badminton')

        assert repository.find_by_id(match.id, TennisMatchRecord) is None
        with pytest.raises(MatchNotFoundError):
            repository.get(match.id, TennisMatchRecord)

    def test_save_advances_version(self, repository, stored_match):
        match = stored_match('pickleball')

        saved = repository.save(match.apply(make_event('Dink', pointTo=1)))

        assert saved.version == 2
        reloaded = repository.find_by_id(match.id)
        assert reloaded.version == 2
        assert reloaded.games[0].team1_points == 1

    def test_stale_save_is_a_version_conflict(self, repository, stored_match):
        """
        GIVEN two writers that loaded the same version
        WHEN both save
        THEN the second save is rejected and the first one's point stands
        """
        match = stored_match('badminton')
        first = repository.find_by_id(match.id)
        second = repository.find_by_id(match.id)

        repository.save(first.apply(make_event('Smash', pointTo=1)))
        with pytest.raises(VersionConflictError):
            repository.save(second.apply(make_event('Smash', pointTo=2)))

        stored = repository.find_by_id(match.id)
        assert (stored.games[0].team1_points, stored.games[0].team2_points) == (1, 0)

    def test_save_of_missing_match_is_not_found(self, repository):
        match = build_match('tennis', version=1)

        with pytest.raises(MatchNotFoundError):
            repository.save(match)

    def test_status_column_follows_document(self, db, repository, stored_match):
        match = stored_match('football')

        repository.save(match.apply(make_event('full_time')))

        record = db.session.get(MatchRecord, match.id)
        assert record.status == 'completed'
        assert record.sport == 'football'
        assert [m.id for m in repository.find_completed('football')] == [match.id]
        assert repository.find_completed('basketball') == []

    def test_transient_errors_are_retried_then_reported(self, monkeypatch, stored_match):
        repository = MatchRepository(max_attempts=3, wait_min=0, wait_max=0)
        match = stored_match('badminton')
        calls = []

        def failing_swap(m):
            calls.append(m.id)
            raise OperationalError('UPDATE matches', {}, Exception('database is locked'))

        monkeypatch.setattr(repository, '_compare_and_swap', failing_swap)

        with pytest.raises(PersistenceError):
            repository.save(match.apply(make_event('Smash', pointTo=1)))
        assert len(calls) == 3
