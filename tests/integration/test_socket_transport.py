"""
Socket.IO transport end to end: authentication, match rooms, scoring events
and error delivery, against the real dispatcher and database.
"""
import jwt as pyjwt
import pytest

from live_scoring.models import MatchStatus, RallyGame
from live_scoring.sockets.auth import TokenVerificationError, verify_token

from tests.factories import SCORER_ID


def events_named(received, name):
    return [message['args'][0] for message in received if message['name'] == name]


@pytest.fixture
def service_match(app, db):
    """Persist a match through the app's own repository."""
    from tests.factories import build_match, persist

    def _service_match(sport, **kwargs):
        return persist(app.extensions['live_scoring']['repository'], build_match(sport, **kwargs))
    return _service_match


@pytest.mark.integration
class TestConnect:

    def test_valid_token_connects(self, socket_client):
        client = socket_client(SCORER_ID)

        assert client.is_connected()
        connected = events_named(client.get_received(), 'connected')
        assert connected[0]['user_id'] == SCORER_ID

    def test_missing_token_is_refused(self, socket_client):
        client = socket_client(user_id=None)

        assert not client.is_connected()

    def test_garbage_token_is_refused(self, socket_client):
        client = socket_client(auth={'token': 'not-a-jwt'})

        assert not client.is_connected()

    def test_token_with_id_claim_from_another_service(self, app):
        token = pyjwt.encode({'id': 'legacy-7'}, app.config['JWT_SECRET_KEY'], algorithm='HS256')

        assert verify_token(token) == 'legacy-7'

    def test_token_signed_with_other_secret_fails(self, app):
        token = pyjwt.encode({'id': 'legacy-7'}, 'some-other-secret', algorithm='HS256')

        with pytest.raises(TokenVerificationError):
            verify_token(token)


@pytest.mark.integration
class TestMatchRooms:

    def test_join_acknowledges_room(self, socket_client, service_match):
        match = service_match('badminton')
        client = socket_client(SCORER_ID)
        client.get_received()

        ack = client.emit('join_match', {'matchId': match.id, 'sport': 'Badminton'}, callback=True)

        assert ack == {'success': True, 'room': f'match_{match.id}'}
        joined = events_named(client.get_received(), 'joined_match')
        assert joined == [{'matchId': match.id, 'sport': 'badminton', 'room': f'match_{match.id}'}]

    def test_join_with_unknown_sport_is_an_error(self, socket_client):
        client = socket_client(SCORER_ID)
        client.get_received()

        ack = client.emit('join_match', {'matchId': 'm1', 'sport': 'cricket'}, callback=True)

        assert ack['success'] is False
        errors = events_named(client.get_received(), 'match_error')
        assert errors[0]['code'] == 'UNKNOWN_SPORT'


@pytest.mark.integration
class TestScoringEvents:

    def test_accepted_event_reaches_every_room_member(self, socket_client, service_match):
        """
        GIVEN a scorer and a watcher in the same match room
        WHEN the scorer sends a Smash
        THEN both receive match_updated with the new score, including the sender
        """
        match = service_match('badminton', games=[RallyGame(number=1, team1_points=20, team2_points=19)])
        scorer = socket_client(SCORER_ID)
        watcher = socket_client('watcher-9')
        for client in (scorer, watcher):
            client.emit('join_match', {'matchId': match.id, 'sport': 'badminton'}, callback=True)
            client.get_received()

        ack = scorer.emit('match_event', {
            'matchId': match.id, 'sport': 'badminton', 'type': 'Smash', 'payload': {'pointTo': 1}
        }, callback=True)

        assert ack == {'success': True, 'matchId': match.id, 'version': 2}
        for client in (scorer, watcher):
            updates = events_named(client.get_received(), 'match_updated')
            assert len(updates) == 1
            assert updates[0]['type'] == 'Smash'
            assert updates[0]['sport'] == 'badminton'
            assert updates[0]['match']['games'][0]['team1Points'] == 21
            assert updates[0]['match']['games'][0]['winnerTeamId'] == match.teams[0].id

    def test_rejected_event_goes_to_sender_only(self, socket_client, service_match):
        match = service_match('football')
        scorer = socket_client(SCORER_ID)
        intruder = socket_client('intruder')
        for client in (scorer, intruder):
            client.emit('join_match', {'matchId': match.id, 'sport': 'football'}, callback=True)
            client.get_received()

        ack = intruder.emit('match_event', {
            'matchId': match.id, 'sport': 'football', 'type': 'goal', 'payload': {'teamId': match.teams[0].id}
        }, callback=True)

        assert ack['success'] is False
        assert ack['code'] == 'NOT_AUTHORIZED'
        errors = events_named(intruder.get_received(), 'match_error')
        assert errors == [{
            'code': 'NOT_AUTHORIZED', 'message': errors[0]['message'], 'matchId': match.id, 'type': 'goal'
        }]
        assert scorer.get_received() == []

    def test_closed_match_error(self, socket_client, service_match):
        match = service_match('tennis', status=MatchStatus.COMPLETED)
        scorer = socket_client(SCORER_ID)
        scorer.get_received()

        scorer.emit('match_event', {
            'matchId': match.id, 'sport': 'tennis', 'type': 'Ace', 'payload': {'pointTo': 1}
        }, callback=True)

        errors = events_named(scorer.get_received(), 'match_error')
        assert errors[0]['code'] == 'MATCH_CLOSED'

    def test_update_score_without_type_is_a_rally(self, socket_client, service_match):
        match = service_match('pickleball')
        scorer = socket_client(SCORER_ID)
        scorer.emit('join_match', {'matchId': match.id, 'sport': 'pickleball'}, callback=True)
        scorer.get_received()

        ack = scorer.emit('update_score', {
            'matchId': match.id, 'sport': 'pickleball', 'payload': {'eventType': 'Dink', 'pointTo': 2}
        }, callback=True)

        assert ack['success'] is True
        updates = events_named(scorer.get_received(), 'match_updated')
        assert updates[0]['type'] == 'rally'
        assert updates[0]['match']['games'][0]['team2Points'] == 1

    def test_left_room_receives_nothing(self, socket_client, service_match):
        match = service_match('volleyball')
        scorer = socket_client(SCORER_ID)
        watcher = socket_client('watcher-9')
        for client in (scorer, watcher):
            client.emit('join_match', {'matchId': match.id, 'sport': 'volleyball'}, callback=True)
        watcher.emit('leave_match', {'matchId': match.id}, callback=True)
        watcher.get_received()

        scorer.emit('match_event', {
            'matchId': match.id, 'sport': 'volleyball', 'type': 'Ace', 'payload': {'pointTo': 1}
        }, callback=True)

        assert events_named(watcher.get_received(), 'match_updated') == []
