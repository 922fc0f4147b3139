from typing import Iterable, List, Tuple

from guess_sentence import db
from guess_sentence.models import Sentence, User

SEED_USERS: List[Tuple[str, int]] = [
    ('testuser150', 150),
    ('testuser0', 0),
    ('testuser45', 45),
]
SEED_PASSWORD = 'pwd'

REGULAR_SENTENCES: List[str] = [
    'PRACTICE MAKES PERFECT ONLY WITH FEEDBACK',
    'EVERY PUZZLE STARTS SIMPLE THEN TURNS TRICKY',
    'KEEP CALM AND CODE YOUR WAY TO VICTORY',
    'LOGIC IS THE ART OF MAKING GOOD GUESSES',
    'SHORT STEPS BUILD LONG AND LASTING JOURNEYS',
    'NOTHING GREAT COMES WITHOUT SMALL FAILURES',
    'DEBUGGING IS TWICE AS HARD AS CODING',
    'TESTS HELP YOU TRUST WHAT YOU CANNOT SEE',
    'FOCUS BEATS TALENT WHEN TALENT IS UNFOCUSED',
    'CHOOSE CLARITY OVER CLEVERNESS EVERY TIME',
    'GOOD NAMES EXPLAIN WHAT CODE ACTUALLY DOES',
    'YOUR FUTURE IS BUILT ONE COMMIT AT A TIME',
    'MOVE SLOW WHEN YOU WANT TO MOVE FAST',
    'PRACTICE PATIENCE PRECISION AND PERSISTENCE',
    'TODAY IS A GOOD DAY TO LEARN SOMETHING',
    'ASSUMPTIONS ARE THE MOTHER OF ALL MISTAKES',
    'READING CODE IS HARDER THAN WRITING CODE',
    'CLEAN CODE IS LIKE A WELL TOLD STORY',
    'SIMPLE IS NOT EASY BUT ALWAYS WORTH IT',
    'GREAT SOFTWARE IS BUILT BY GREAT HABITS',
]

GUEST_SENTENCES: List[str] = [
    'GUESS THE SENTENCE WITHOUT ANY COINS',
    'THREE SECRET PHRASES AWAIT THE BRAVE',
    'PLAY FOR FUN AND LEARN THE RULES HERE',
]


def add_sentences(texts: Iterable[str], is_guest: bool) -> int:
    count = 0
    for text in texts:
        db.session.add(Sentence(text=text, is_guest=is_guest))
        count += 1
    return count


def seed_database() -> Tuple[int, int]:
    """Insert demo users and both sentence pools when the tables are empty.

    Safe to run repeatedly. Returns (users inserted, sentences inserted).
    """
    users = 0
    if User.query.count() == 0:
        for username, coins in SEED_USERS:
            user = User(username=username, coins=coins)
            user.set_password(SEED_PASSWORD)
            db.session.add(user)
            users += 1

    sentences = 0
    if Sentence.query.count() == 0:
        sentences += add_sentences(REGULAR_SENTENCES, is_guest=False)
        sentences += add_sentences(GUEST_SENTENCES, is_guest=True)

    db.session.commit()
    return users, sentences
