# live_scoring/models/pickleball.py

from dataclasses import dataclass
from typing import Any, ClassVar, Dict

from live_scoring.models.rally import RallyPointMatch, RallyVocabulary

PICKLEBALL_VOCABULARY = RallyVocabulary(
    winning=('Dink', 'Drive', 'Volley', 'Smash', 'Lob', 'Drop', 'Ace'),
    errors=('Net', 'Out', 'ServiceFault', 'KitchenFault')
)


@dataclass
class PickleballMatch(RallyPointMatch):
    """Rally scoring to 11, win by 2, no cap, best of three games."""

    SPORT: ClassVar[str] = 'pickleball'
    VOCABULARY: ClassVar[RallyVocabulary] = PICKLEBALL_VOCABULARY
    DEFAULT_RULES: ClassVar[Dict[str, Any]] = {
        'pointsToWin': 11,
        'winBy': 2,
        'cap': None,
        'bestOf': 3,
        'decidingGamePoints': 11
    }
