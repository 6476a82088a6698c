# live_scoring/models/volleyball.py

"""
Volleyball

Same rally-point scoring as badminton but counted in sets: 25 points, win by
two, best of five with a deciding fifth set to 15.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict

from live_scoring.models.rally import RallyPointMatch, RallyVocabulary

VOLLEYBALL_VOCABULARY = RallyVocabulary(
    winning=('Attack', 'Block', 'Ace', 'Tip'),
    errors=('ServiceError', 'AttackError', 'Net', 'Out', 'Fault')
)


@dataclass
class VolleyballMatch(RallyPointMatch):

    SPORT: ClassVar[str] = 'volleyball'
    VOCABULARY: ClassVar[RallyVocabulary] = VOLLEYBALL_VOCABULARY
    GAMES_KEY: ClassVar[str] = 'sets'
    CURRENT_KEY: ClassVar[str] = 'currentSet'
    NUMBER_KEY: ClassVar[str] = 'setNumber'
    BEST_OF_KEY: ClassVar[str] = 'matchBestOf'
    DEFAULT_RULES: ClassVar[Dict[str, Any]] = {
        'pointsToWin': 25,
        'winBy': 2,
        'cap': None,
        'bestOf': 5,
        'decidingGamePoints': 15
    }

    @property
    def sets(self):
        return self.games

    @property
    def current_set(self) -> int:
        return self.current_game

    @property
    def total_sets_won(self) -> Dict[str, int]:
        return {'team1': self.games_won(0), 'team2': self.games_won(1)}

    def _variant_dict(self) -> Dict[str, Any]:
        data = super()._variant_dict()
        data['totalSetsWon'] = self.total_sets_won
        return data
