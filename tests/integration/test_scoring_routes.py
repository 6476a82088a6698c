"""
HTTP endpoints: match creation and lookup, cancellation, leaderboard and
metrics.
"""
import pytest

from live_scoring.models import Goal, MatchStatus, ScoreEvent

from tests.factories import SCORER_ID, TeamRefFactory, build_match, persist


@pytest.fixture
def app_repository(app):
    return app.extensions['live_scoring']['repository']


def create_payload(sport='football'):
    return {
        'sport': sport,
        'title': 'Derby',
        'teams': [{'name': 'Rovers'}, {'name': 'United'}]
    }


@pytest.mark.integration
class TestMatchEndpoints:

    def test_create_requires_token(self, client):
        response = client.post('/api/matches', json=create_payload())

        assert response.status_code == 401

    def test_create_and_read_back(self, client, auth_headers):
        """
        GIVEN an authenticated organiser
        WHEN they create a football match and read it back
        THEN the match is scheduled, scorable by them and readable by sport and id
        """
        response = client.post('/api/matches', json=create_payload(), headers=auth_headers('organiser-1'))

        assert response.status_code == 201
        body = response.get_json()
        assert body['success'] is True
        created = body['data']
        assert created['status'] == 'scheduled'
        assert created['scoringUpdatedBy'] == ['organiser-1']
        assert created['score'] == {'team1': 0, 'team2': 0}

        read = client.get(f"/api/matches/football/{created['_id']}", headers=auth_headers())
        assert read.status_code == 200
        assert read.get_json()['data']['_id'] == created['_id']

    def test_read_under_wrong_sport_is_404(self, client, auth_headers, app_repository):
        match = persist(app_repository, build_match('badminton'))

        response = client.get(f'/api/matches/tennis/{match.id}', headers=auth_headers())

        assert response.status_code == 404
        assert response.get_json() == {
            'success': False, 'message': f'Match {match.id} not found', 'error_code': 'MATCH_NOT_FOUND'
        }

    def test_unknown_sport_is_400(self, client, auth_headers):
        response = client.post('/api/matches', json=create_payload('cricket'), headers=auth_headers())

        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'UNKNOWN_SPORT'

    def test_cancel(self, client, auth_headers, app_repository):
        match = persist(app_repository, build_match('basketball'))

        refused = client.post(f'/api/matches/{match.id}/cancel', json={}, headers=auth_headers('stranger'))
        assert refused.status_code == 403

        response = client.post(f'/api/matches/{match.id}/cancel', json={'reason': 'storm'},
                               headers=auth_headers(SCORER_ID))
        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'cancelled'

        again = client.post(f'/api/matches/{match.id}/cancel', json={}, headers=auth_headers(SCORER_ID))
        assert again.status_code == 409
        assert again.get_json()['error_code'] == 'MATCH_CLOSED'


@pytest.mark.integration
class TestLeaderboardEndpoint:

    def test_leaderboard_rows(self, client, auth_headers, app_repository):
        teams = TeamRefFactory.build_batch(2)
        persist(app_repository, build_match('football', teams=teams, status=MatchStatus.COMPLETED, goals=[
            Goal(team_id=teams[0].id, player_id='p-1'),
            Goal(team_id=teams[0].id, player_id='p-1'),
            Goal(team_id=teams[1].id, player_id='p-2'),
        ]))

        response = client.get('/api/leaderboard?sport=Football&limit=1', headers=auth_headers())

        assert response.status_code == 200
        body = response.get_json()
        assert body['sport'] == 'football'
        assert [(row['playerId'], row['goals']) for row in body['data']] == [('p-1', 2)]

    def test_negative_limit_keeps_the_top_row(self, client, auth_headers, app_repository):
        teams = TeamRefFactory.build_batch(2)
        persist(app_repository, build_match('basketball', teams=teams, status=MatchStatus.COMPLETED, score_events=[
            ScoreEvent(team_id=teams[0].id, points=3, quarter=1, player_id='p-1', type='3_pointer'),
            ScoreEvent(team_id=teams[1].id, points=2, quarter=1, player_id='p-2', type='2_pointer'),
        ]))

        response = client.get('/api/leaderboard?sport=basketball&limit=-1', headers=auth_headers())

        assert response.status_code == 200
        assert [row['playerId'] for row in response.get_json()['data']] == ['p-1']

    def test_leaderboard_needs_sport(self, client, auth_headers):
        response = client.get('/api/leaderboard', headers=auth_headers())

        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'UNKNOWN_SPORT'


@pytest.mark.integration
def test_metrics_endpoint_is_prometheus_text(client):
    response = client.get('/metrics')

    assert response.status_code == 200
    assert response.mimetype == 'text/plain'
    assert b'scoring_events_processed_total' in response.data
