import random
import string
from typing import Dict, List, Optional

VOWELS = frozenset('AEIOU')
VOWEL_COST = 10
DEFAULT_COST = 2

# Indicative English frequencies (percent), shown to players next to the price
LETTER_FREQUENCY: Dict[str, float] = {
    'E': 12.7, 'T': 9.1, 'A': 8.2, 'O': 7.5, 'I': 7.0, 'N': 6.7, 'S': 6.3, 'H': 6.1, 'R': 6.0, 'D': 4.3,
    'L': 4.0, 'C': 2.8, 'U': 2.8, 'M': 2.4, 'W': 2.4, 'F': 2.2, 'G': 2.0, 'Y': 2.0, 'P': 1.9, 'B': 1.5,
    'V': 1.0, 'K': 0.8, 'J': 0.15, 'X': 0.15, 'Q': 0.1, 'Z': 0.07,
}

# Consonant price tiers, most frequent (most useful) first
CONSONANT_TIERS = (
    (5, frozenset('TNSHR')),
    (4, frozenset('DL')),
    (3, frozenset('CMWFGYP')),
    (2, frozenset('BVK')),
    (1, frozenset('JXQZ')),
)


def is_vowel(letter: str) -> bool:
    return letter.upper() in VOWELS


def letter_cost(letter: str) -> int:
    """Coins charged for guessing ``letter`` when it is in the sentence."""
    c = letter.upper()
    if c in VOWELS:
        return VOWEL_COST
    for cost, tier in CONSONANT_TIERS:
        if c in tier:
            return cost
    return DEFAULT_COST


def letter_frequency(letter: str) -> float:
    return LETTER_FREQUENCY.get(letter.upper(), 0.0)


def letter_costs() -> Dict[str, int]:
    return {c: letter_cost(c) for c in string.ascii_uppercase}


def random_butterfly(n: int = 10, rng: Optional[random.Random] = None) -> List[dict]:
    """Pick ``n`` distinct letters with their frequency and cost.

    Used by the informational "butterfly" panel; has no effect on matches.
    """
    rng = rng or random
    n = max(0, min(n, len(LETTER_FREQUENCY)))
    picked = rng.sample(sorted(LETTER_FREQUENCY), n)
    return [
        {'letter': c, 'frequency': LETTER_FREQUENCY[c], 'cost': letter_cost(c)}
        for c in picked
    ]
