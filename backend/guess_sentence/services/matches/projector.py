from typing import Any, Dict, Optional

from guess_sentence.models import Match
from . import mask as masks
from .timeouts import reconcile_timeout

# The solution is shown only for matches that ended by playing them out.
SOLUTION_VISIBLE_STATUSES = frozenset(('won', 'lost'))


def project_match(match: Match, now: Optional[float] = None) -> Dict[str, Any]:
    """Build the client-safe view of a match.

    Reconciles the timeout first, so an expired match is reported as lost.
    ``sentence`` stays None while playing and after an abandon.
    """
    reconcile_timeout(match, now)
    solution = match.solution
    mask = match.revealed_mask
    return {
        'id': match.id,
        'status': match.status,
        'is_guest': match.is_guest,
        'started_at': match.started_at,
        'ends_at': match.ends_at,
        'revealed_mask': mask,
        'guessed_letters': list(match.guessed_letters or ''),
        'used_vowel': bool(match.used_vowel),
        'spaces': masks.space_positions(solution),
        'revealed': masks.project_revealed_characters(solution, mask),
        'sentence': solution if match.status in SOLUTION_VISIBLE_STATUSES else None,
    }
