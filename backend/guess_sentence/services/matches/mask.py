"""Reveal masks.

A mask is a string of ``'0'``/``'1'`` with one character per sentence
position. Spaces are always ``'1'``; letters start at ``'0'`` and flip once
guessed. All functions are pure and expect ``len(mask) == len(sentence)``.
"""
from typing import List, Optional

HIDDEN = '0'
REVEALED = '1'


def build_initial_mask(sentence: str) -> str:
    return ''.join(REVEALED if ch == ' ' else HIDDEN for ch in sentence)


def apply_reveal(sentence: str, mask: str, letter: str) -> str:
    """Reveal every position holding ``letter``; other positions are untouched."""
    return ''.join(
        REVEALED if ch == letter else bit
        for ch, bit in zip(sentence, mask)
    )


def reveal_all(sentence: str) -> str:
    return REVEALED * len(sentence)


def is_fully_revealed(mask: str, sentence: str) -> bool:
    return all(bit == REVEALED for ch, bit in zip(sentence, mask) if ch != ' ')


def space_positions(sentence: str) -> List[bool]:
    return [ch == ' ' for ch in sentence]


def project_revealed_characters(sentence: str, mask: str) -> List[Optional[str]]:
    """Per position: the letter if revealed, else None.

    Spaces are None as well; clients read them from ``space_positions``.
    """
    return [
        ch if (ch != ' ' and bit == REVEALED) else None
        for ch, bit in zip(sentence, mask)
    ]
