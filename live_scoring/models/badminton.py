# live_scoring/models/badminton.py

from dataclasses import dataclass
from typing import Any, ClassVar, Dict

from live_scoring.models.rally import RallyPointMatch, RallyVocabulary

BADMINTON_VOCABULARY = RallyVocabulary(
    winning=('Smash', 'Drop', 'Clear', 'Drive', 'Net', 'Ace'),
    errors=('Out', 'ServiceFault')
)


@dataclass
class BadmintonMatch(RallyPointMatch):
    """Rally scoring to 21, win by 2, capped at 30, best of three games."""

    SPORT: ClassVar[str] = 'badminton'
    VOCABULARY: ClassVar[RallyVocabulary] = BADMINTON_VOCABULARY
    DEFAULT_RULES: ClassVar[Dict[str, Any]] = {
        'pointsToWin': 21,
        'winBy': 2,
        'cap': 30,
        'bestOf': 3,
        'decidingGamePoints': 21
    }
