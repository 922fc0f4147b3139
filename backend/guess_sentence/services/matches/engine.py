"""Match lifecycle: start, read, guess, abandon.

Every operation runs in one database transaction. The match row and the
owner's user row are locked (``SELECT ... FOR UPDATE``) before anything is
read, so two requests on the same match cannot interleave their coin and
mask updates. Locks are always taken in the same order: the owner's user row
first, then match rows. A ``MatchError`` rolls the transaction back; the state
is then exactly as it was before the call.

``now`` is epoch seconds and defaults to ``time.time()``.
"""
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from flask import current_app
from sqlalchemy import and_, or_

from guess_sentence import db
from guess_sentence.models import Match, Sentence
from . import mask as masks
from .errors import (
    InsufficientCoins,
    InvalidGuess,
    MatchNotFound,
    MatchNotPlayable,
    NoSentencesAvailable,
    NotMatchOwner,
    VowelAlreadyUsed,
)
from .letters import is_vowel, letter_cost
from .projector import project_match
from .timeouts import reconcile_timeout
from .wallets import Actor, Wallet, lock_user, wallet_for

TIME_OVER = 'Time over.'


@dataclass
class MatchResult:
    """Outcome of an engine call: the safe view plus a message for the player."""

    match: Match
    view: Dict[str, Any]
    message: Optional[str] = None
    coins: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {'match': self.view, 'message': self.message}
        if self.coins is not None:
            payload['coins'] = self.coins
        return payload


def _now(now: Optional[float]) -> float:
    return time.time() if now is None else now


def _setting(name: str, default: int) -> int:
    return int(current_app.config.get(name, default))


@contextmanager
def _transaction():
    try:
        yield
    except Exception:
        db.session.rollback()
        raise
    db.session.commit()


def _result(match: Match, now: float, message: Optional[str], wallet: Optional[Wallet] = None) -> MatchResult:
    view = project_match(match, now)
    coins = wallet.balance() if wallet is not None else None
    return MatchResult(match=match, view=view, message=message, coins=coins)


def _owned_by(user_id: Optional[int]):
    if user_id is None:
        return Match.user_id.is_(None)
    return Match.user_id == user_id


def _recent_or_playing(now: float):
    grace = _setting('RECENT_MATCH_GRACE_SEC', 300)
    return or_(
        Match.status == 'playing',
        and_(Match.status.in_(('won', 'lost')), Match.finished_at >= now - grace),
    )


def _shows_as_current(match: Match, now: float) -> bool:
    if match.is_playing:
        return True
    grace = _setting('RECENT_MATCH_GRACE_SEC', 300)
    return match.status in ('won', 'lost') and match.finished_at >= now - grace


def normalize_letter(letter: Any) -> str:
    if not isinstance(letter, str):
        raise InvalidGuess('Letter must be a string.')
    letter = letter.strip()
    if len(letter) != 1 or not (letter.isascii() and letter.isalpha()):
        raise InvalidGuess('Guess a single letter from A to Z.')
    return letter.upper()


def normalize_sentence(text: Any) -> str:
    if not isinstance(text, str):
        raise InvalidGuess('Sentence must be a string.')
    normalized = ' '.join(text.split()).upper()
    if not normalized:
        raise InvalidGuess('Sentence guess cannot be empty.')
    return normalized


def _load_for_update(match_id: int) -> Match:
    owner = db.session.query(Match.user_id).filter(Match.id == match_id).first()
    if owner is None:
        raise MatchNotFound()
    # user_id never changes, so it is safe to read before the match lock
    if owner.user_id is not None:
        lock_user(owner.user_id)
    match = Match.query.filter_by(id=match_id).with_for_update().populate_existing().first()
    if match is None:
        raise MatchNotFound()
    return match


def _open_match(match_id: int, actor: Actor, now: float) -> Tuple[Match, bool]:
    """Lock a match for a mutating call and apply its preconditions.

    Returns ``(match, timed_out)``; ``timed_out`` means the reconcile step just
    closed the match and the caller must not process the request.
    """
    match = _load_for_update(match_id)
    if not actor.owns(match):
        raise NotMatchOwner()
    if reconcile_timeout(match, now):
        return match, True
    if not match.is_playing:
        raise MatchNotPlayable()
    return match, False


def _pick_sentence(guest: bool) -> Sentence:
    sentence = Sentence.query.filter_by(is_guest=guest).order_by(db.func.random()).first()
    if sentence is None:
        raise NoSentencesAvailable()
    return sentence


def _retire_playing_matches(actor: Actor, now: float) -> None:
    playing = (
        Match.query.filter(_owned_by(actor.user_id), Match.status == 'playing')
        .with_for_update()
        .populate_existing()
        .all()
    )
    for old in playing:
        if reconcile_timeout(old, now):
            continue
        old.finish('abandoned', now)
        db.session.add(old)
        current_app.logger.info(f"[match-abandon] match={old.id} user={old.user_id} reason=new-match")


def start_match(actor: Actor, guest: bool = False, now: Optional[float] = None) -> MatchResult:
    """Create a match on a random sentence from the regular or guest pool.

    No coins are charged. An authenticated player's previous playing match is
    closed first so there is never more than one.
    """
    now = _now(now)
    with _transaction():
        sentence = _pick_sentence(guest)
        if not actor.is_guest:
            # Queues concurrent starts of the same user behind each other
            lock_user(actor.user_id)
            _retire_playing_matches(actor, now)
        match = Match(
            user_id=actor.user_id,
            sentence=sentence,
            started_at=now,
            ends_at=now + _setting('MATCH_SECONDS', 60),
            status='playing',
            revealed_mask=masks.build_initial_mask(sentence.text.upper()),
            guessed_letters='',
            used_vowel=False,
        )
        db.session.add(match)
        db.session.flush()
        current_app.logger.info(f"[match-start] match={match.id} user={match.user_id} guest={guest}")
        return _result(match, now, 'Match started.', wallet_for(match))


def get_current_match(actor: Actor, now: Optional[float] = None) -> Optional[MatchResult]:
    """Newest playing match of a user, or one that ended (won/lost) within the grace window.

    Expired matches of the user are closed first, penalties included.
    """
    if actor.is_guest:
        raise ValueError('Guest matches are looked up by id, use get_guest_match')
    now = _now(now)
    with _transaction():
        lock_user(actor.user_id)
        expired = (
            Match.query.filter(_owned_by(actor.user_id), Match.status == 'playing', Match.ends_at <= now)
            .with_for_update()
            .populate_existing()
            .all()
        )
        for match in expired:
            reconcile_timeout(match, now)
        db.session.flush()
        match = (
            Match.query.filter(_owned_by(actor.user_id), _recent_or_playing(now))
            .order_by(Match.id.desc())
            .first()
        )
        if match is None:
            return None
        return _result(match, now, None, wallet_for(match))


def get_guest_match(match_id: int, now: Optional[float] = None) -> Optional[MatchResult]:
    now = _now(now)
    with _transaction():
        match = (
            Match.query.filter(Match.id == match_id, _owned_by(None))
            .with_for_update()
            .populate_existing()
            .first()
        )
        if match is None:
            return None
        reconcile_timeout(match, now)
        if not _shows_as_current(match, now):
            return None
        return _result(match, now, None)


def guess_letter(match_id: int, actor: Actor, letter: Any, now: Optional[float] = None) -> MatchResult:
    """Buy one letter.

    A present letter costs its table price, an absent one twice that, clamped to
    the remaining balance. The player must hold at least the base price. Only
    one vowel may be tried per match, hit or miss.
    """
    letter = normalize_letter(letter)
    now = _now(now)
    with _transaction():
        match, timed_out = _open_match(match_id, actor, now)
        wallet = wallet_for(match)
        if timed_out:
            return _result(match, now, TIME_OVER, wallet)

        vowel = is_vowel(letter)
        if vowel and match.used_vowel:
            raise VowelAlreadyUsed()

        solution = match.solution
        cost = letter_cost(letter)
        present = letter in solution
        if not wallet.can_afford(cost):
            raise InsufficientCoins(cost, wallet.balance())
        charged = wallet.charge(cost if present else cost * 2)

        if present:
            match.revealed_mask = masks.apply_reveal(solution, match.revealed_mask, letter)
            message = 'Letter revealed.'
        elif wallet.is_guest:
            message = ("Wrong letter! As a guest, you can try for free. "
                       "If you weren't in guest mode, this mistake would cost you double!")
        else:
            message = f'Wrong letter! Cost doubled to {charged} coins.'

        if letter not in (match.guessed_letters or ''):
            match.guessed_letters = (match.guessed_letters or '') + letter
        if vowel:
            match.used_vowel = True

        if masks.is_fully_revealed(match.revealed_mask, solution):
            match.finish('won', now)
            if wallet.is_guest:
                message = 'You guessed all letters! Excellent!'
            else:
                bonus = _setting('WIN_BONUS', 100)
                wallet.credit(bonus)
                message = f'You guessed all letters! You gained +{bonus} coins!'
            current_app.logger.info(f"[match-won] match={match.id} user={match.user_id} via=letters")

        db.session.add(match)
        current_app.logger.info(
            f"[guess-letter] match={match.id} letter={letter} present={present} charged={charged}"
        )
        return _result(match, now, message, wallet)


def guess_sentence(match_id: int, actor: Actor, sentence: Any, now: Optional[float] = None) -> MatchResult:
    """Try the whole sentence. Free; a hit wins regardless of the mask."""
    guess = normalize_sentence(sentence)
    now = _now(now)
    with _transaction():
        match, timed_out = _open_match(match_id, actor, now)
        wallet = wallet_for(match)
        if timed_out:
            return _result(match, now, TIME_OVER, wallet)

        solution = match.solution
        if guess != ' '.join(solution.split()):
            current_app.logger.info(f"[guess-sentence] match={match.id} correct=False")
            return _result(match, now, 'Wrong sentence. Keep trying!', wallet)

        match.revealed_mask = masks.reveal_all(solution)
        match.finish('won', now)
        if wallet.is_guest:
            message = 'Correct sentence! Well done!'
        else:
            bonus = _setting('WIN_BONUS', 100)
            wallet.credit(bonus)
            message = f'Correct sentence! You gained +{bonus} coins!'
        db.session.add(match)
        current_app.logger.info(f"[match-won] match={match.id} user={match.user_id} via=sentence")
        return _result(match, now, message, wallet)


def abandon_match(match_id: int, actor: Actor, now: Optional[float] = None) -> MatchResult:
    """Quit a playing match. No penalty, and the solution is not revealed."""
    now = _now(now)
    with _transaction():
        match, timed_out = _open_match(match_id, actor, now)
        wallet = wallet_for(match)
        if timed_out:
            return _result(match, now, TIME_OVER, wallet)
        match.finish('abandoned', now)
        db.session.add(match)
        current_app.logger.info(f"[match-abandon] match={match.id} user={match.user_id} reason=player")
        return _result(match, now, 'Match abandoned.', wallet)


def close_expired_matches(now: Optional[float] = None) -> int:
    """Close every playing match past its deadline; returns how many were closed."""
    now = _now(now)
    with _transaction():
        expired_ids = [
            row.id for row in
            db.session.query(Match.id).filter(Match.status == 'playing', Match.ends_at <= now).all()
        ]
        closed = 0
        for match_id in expired_ids:
            if reconcile_timeout(_load_for_update(match_id), now):
                closed += 1
        return closed
