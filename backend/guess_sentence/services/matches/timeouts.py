import time
from typing import Optional

from flask import current_app

from guess_sentence import db
from guess_sentence.models import Match
from .wallets import wallet_for


def reconcile_timeout(match: Match, now: Optional[float] = None) -> bool:
    """Close a playing match whose time ran out as ``lost``.

    Side-effecting precondition of every match operation: there is no timer,
    expiry is applied on the next access. Authenticated owners pay
    ``TIMEOUT_PENALTY`` capped at their balance; guests pay nothing.
    Returns True only when this call closed the match. Does not commit.
    """
    now = time.time() if now is None else now
    if not match.is_playing or now < match.ends_at:
        return False

    wallet = wallet_for(match)
    penalty = wallet.charge(int(current_app.config.get('TIMEOUT_PENALTY', 20)))
    match.finish('lost', now)
    db.session.add(match)
    current_app.logger.info(
        f"[match-timeout] match={match.id} user={match.user_id} penalty={penalty}"
    )
    return True
