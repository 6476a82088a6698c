"""
Rally-point scoring behavior for badminton, pickleball and volleyball.

Every rally scores exactly one point for exactly one side; games close on
target and lead, and the match closes once a side holds a majority of games.
"""
import pytest

from live_scoring.models import MatchStatus, RallyGame, TeamRef
from live_scoring.services.errors import InvalidEventPayloadError, UnknownTeamError

from tests.factories import TeamRefFactory, build_match, make_event


def match_with_game(sport, team1_points, team2_points, **kwargs):
    return build_match(sport, games=[RallyGame(number=1, team1_points=team1_points, team2_points=team2_points)],
                       **kwargs)


@pytest.mark.unit
class TestBadmintonRally:
    """Badminton rallies: 21 points, win by 2, capped at 30."""

    def test_smash_closes_game_at_21_with_two_point_lead(self):
        """
        GIVEN a badminton match at 20-19 in game one
        WHEN team 1 wins a Smash rally
        THEN the rally is logged, team 1 reaches 21 and takes the game
        """
        match = match_with_game('badminton', 20, 19)

        updated = match.apply(make_event('Smash', pointTo=1))

        game = updated.games[0]
        assert len(game.rally_log) == 1
        assert game.team1_points == 21
        assert game.winner_team_id == match.teams[0].id
        assert updated.current_game == 2
        assert len(updated.games) == 2
        assert updated.status == MatchStatus.LIVE

    def test_apply_leaves_loaded_match_untouched(self):
        match = match_with_game('badminton', 20, 19)

        match.apply(make_event('Smash', pointTo=1))

        assert match.games[0].team1_points == 20
        assert match.games[0].rally_log == []
        assert match.games[0].winner_team_id is None

    def test_one_point_lead_at_target_keeps_game_open(self):
        match = match_with_game('badminton', 20, 20)

        updated = match.apply(make_event('Drop', pointTo=1))

        assert updated.games[0].team1_points == 21
        assert updated.games[0].winner_team_id is None
        assert updated.current_game == 1

    def test_cap_decides_game_at_30(self):
        """
        GIVEN a badminton game at 29-29
        WHEN team 2 wins the next rally
        THEN team 2 takes the game 30-29 without a two point lead
        """
        match = match_with_game('badminton', 29, 29)

        updated = match.apply(make_event('Clear', pointTo=2))

        assert updated.games[0].team2_points == 30
        assert updated.games[0].winner_team_id == match.teams[1].id

    def test_error_gives_point_to_opponent_of_player(self):
        teams = TeamRefFactory.build_batch(2)
        match = build_match('badminton', teams=teams)
        player_id = teams[0].players[0].id

        updated = match.apply(make_event('Out', playerId=player_id))

        assert updated.games[0].team1_points == 0
        assert updated.games[0].team2_points == 1
        assert updated.serving_team_id == teams[1].id

    def test_winning_shot_without_point_to_credits_player_side(self):
        teams = TeamRefFactory.build_batch(2)
        match = build_match('badminton', teams=teams)

        updated = match.apply(make_event('Smash', playerId=teams[1].players[2].id))

        assert updated.games[0].team2_points == 1
        entry = updated.games[0].rally_log[0]
        assert entry.event_type == 'Smash'
        assert entry.player_id == teams[1].players[2].id
        assert entry.point_to == 1

    def test_generic_rally_event_uses_payload_event_type(self):
        match = build_match('badminton')

        updated = match.apply(make_event('rally', eventType='smash', pointTo=2))

        assert updated.games[0].rally_log[0].event_type == 'Smash'
        assert updated.games[0].team2_points == 1

    def test_point_to_accepts_team_id(self):
        match = build_match('badminton')

        updated = match.apply(make_event('Ace', pointTo=match.teams[1].id))

        assert updated.games[0].team2_points == 1

    def test_unknown_team_is_rejected(self):
        match = build_match('badminton')

        with pytest.raises(UnknownTeamError):
            match.apply(make_event('Ace', pointTo='not-a-team'))

    @pytest.mark.parametrize('point_to', [True, False])
    def test_boolean_point_to_is_rejected(self, point_to):
        match = build_match('badminton')

        with pytest.raises(InvalidEventPayloadError, match='pointTo must be'):
            match.apply(make_event('Smash', pointTo=point_to))

        assert match.games[0].team1_points == 0

    def test_unsupported_rally_type_is_rejected(self):
        match = build_match('badminton')

        with pytest.raises(InvalidEventPayloadError, match='Unsupported rally event type'):
            match.apply(make_event('KitchenFault', pointTo=1))

    def test_missing_point_to_without_known_player_is_rejected(self):
        match = build_match('badminton')

        with pytest.raises(InvalidEventPayloadError, match='pointTo is required'):
            match.apply(make_event('Smash', playerId='stranger'))

    def test_game_number_must_match_current_game(self):
        match = build_match('badminton')

        with pytest.raises(InvalidEventPayloadError, match='not in progress'):
            match.apply(make_event('Smash', pointTo=1, game=2))

    def test_two_games_win_the_match(self):
        """
        GIVEN team 1 has won game one and leads game two 20-10
        WHEN team 1 wins the next rally
        THEN the match is completed with team 1 as winner
        """
        teams = TeamRefFactory.build_batch(2)
        match = build_match('badminton', teams=teams, current_game=2, games=[
            RallyGame(number=1, team1_points=21, team2_points=15, winner_team_id=teams[0].id),
            RallyGame(number=2, team1_points=20, team2_points=10),
        ])

        updated = match.apply(make_event('Smash', pointTo=1))

        assert updated.status == MatchStatus.COMPLETED
        assert updated.winner == teams[0].id
        assert updated.current_game == 2
        assert len(updated.games) == 2
        assert updated.feed[-1].type == 'match_completed'

    def test_every_rally_scores_exactly_one_side(self):
        match = build_match('badminton')
        events = [make_event('Smash', pointTo=1), make_event('Out', pointTo=2), make_event('Ace', pointTo=2)]

        for event in events:
            before = (match.current.team1_points, match.current.team2_points)
            match = match.apply(event)
            after = (match.current.team1_points, match.current.team2_points)
            deltas = [after[0] - before[0], after[1] - before[1]]
            assert sorted(deltas) == [0, 1]

        assert match.current.log_totals() == (match.current.team1_points, match.current.team2_points)


@pytest.mark.unit
class TestPickleballRally:

    def test_eleven_needs_two_point_lead(self):
        match = match_with_game('pickleball', 10, 10)

        updated = match.apply(make_event('Dink', pointTo=1))
        assert updated.games[0].winner_team_id is None

        updated = updated.apply(make_event('Volley', pointTo=1))
        assert updated.games[0].team1_points == 12
        assert updated.games[0].winner_team_id == match.teams[0].id

    def test_kitchen_fault_is_an_error(self):
        teams = TeamRefFactory.build_batch(2)
        match = build_match('pickleball', teams=teams)

        updated = match.apply(make_event('KitchenFault', playerId=teams[1].players[0].id))

        assert updated.games[0].team1_points == 1


@pytest.mark.unit
class TestVolleyballSets:

    def test_sets_are_played_to_25(self):
        match = match_with_game('volleyball', 24, 20)

        updated = match.apply(make_event('Attack', pointTo=1))

        assert updated.sets[0].winner_team_id == match.teams[0].id
        assert updated.current_set == 2
        assert updated.to_dict()['currentSet'] == 2
        assert updated.to_dict()['totalSetsWon'] == {'team1': 1, 'team2': 0}

    def test_deciding_fifth_set_is_played_to_15(self):
        """
        GIVEN a volleyball match at two sets all, 14-10 in the fifth
        WHEN team 1 wins the rally
        THEN the fifth set and the match go to team 1
        """
        teams = TeamRefFactory.build_batch(2)
        t1, t2 = teams[0].id, teams[1].id
        match = build_match('volleyball', teams=teams, current_game=5, games=[
            RallyGame(number=1, team1_points=25, team2_points=20, winner_team_id=t1),
            RallyGame(number=2, team1_points=20, team2_points=25, winner_team_id=t2),
            RallyGame(number=3, team1_points=25, team2_points=23, winner_team_id=t1),
            RallyGame(number=4, team1_points=23, team2_points=25, winner_team_id=t2),
            RallyGame(number=5, team1_points=14, team2_points=10),
        ])

        updated = match.apply(make_event('Block', pointTo=1))

        assert updated.status == MatchStatus.COMPLETED
        assert updated.winner == t1
        assert updated.total_sets_won == {'team1': 3, 'team2': 2}

    def test_wire_shape_uses_set_keys(self):
        match = build_match('volleyball')

        data = match.apply(make_event('Ace', pointTo=2)).to_dict()

        assert data['sets'][0]['setNumber'] == 1
        assert data['sets'][0]['team2Points'] == 1
        assert data['matchBestOf'] == 5
        assert 'games' not in data


@pytest.mark.unit
def test_match_requires_two_teams():
    with pytest.raises(ValueError):
        build_match('badminton', teams=[TeamRef(id='solo', name='Solo')])
