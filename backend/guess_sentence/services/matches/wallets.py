"""Who is playing, and how their coins move.

The engine receives an ``Actor`` from the transport layer instead of reading
the login session itself, and settles money through a wallet picked from the
match owner. Guest wallets accept every charge and credit as a no-op.
"""
from dataclasses import dataclass
from typing import Optional, Protocol

from guess_sentence import db
from guess_sentence.models import Match, User


@dataclass(frozen=True)
class Actor:
    """Identity of the caller: an authenticated user, or a guest when ``user_id`` is None."""

    user_id: Optional[int] = None

    @classmethod
    def guest(cls) -> 'Actor':
        return cls(user_id=None)

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    def owns(self, match: Match) -> bool:
        # Guests own exactly the ownerless matches; users only their own.
        return match.user_id == self.user_id


class Wallet(Protocol):
    is_guest: bool

    def balance(self) -> Optional[int]:
        ...

    def can_afford(self, amount: int) -> bool:
        ...

    def charge(self, amount: int) -> int:
        """Debit up to ``amount`` and return what was actually taken."""
        ...

    def credit(self, amount: int) -> None:
        ...


class GuestWallet:
    is_guest = True

    def balance(self) -> Optional[int]:
        return None

    def can_afford(self, amount: int) -> bool:
        return True

    def charge(self, amount: int) -> int:
        return 0

    def credit(self, amount: int) -> None:
        return None


class UserWallet:
    """Coin balance of a user row locked for the current transaction."""

    is_guest = False

    def __init__(self, user: User):
        self.user = user

    def balance(self) -> Optional[int]:
        return self.user.coins

    def can_afford(self, amount: int) -> bool:
        return self.user.coins >= amount

    def charge(self, amount: int) -> int:
        taken = max(0, min(amount, self.user.coins))
        self.user.coins -= taken
        db.session.add(self.user)
        return taken

    def credit(self, amount: int) -> None:
        self.user.coins += amount
        db.session.add(self.user)


def lock_user(user_id: int) -> User:
    """Take the row lock on a user. Always taken before any match row lock."""
    user = User.query.filter_by(id=user_id).with_for_update().populate_existing().first()
    if user is None:
        raise LookupError(f"User {user_id} does not exist")
    return user


def wallet_for(match: Match) -> Wallet:
    if match.user_id is None:
        return GuestWallet()
    return UserWallet(lock_user(match.user_id))
