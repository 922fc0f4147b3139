class MatchError(Exception):
    """Expected, user-facing failure of a match operation.

    ``status_code`` is the HTTP status the API layer answers with.
    """

    status_code = 400
    default_message = 'Match operation failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidGuess(MatchError):
    default_message = 'Invalid guess'


class NoSentencesAvailable(MatchError):
    default_message = 'No sentences available for this mode.'


class VowelAlreadyUsed(MatchError):
    default_message = 'Vowel already used in this match.'


class InsufficientCoins(MatchError):
    default_message = 'Not enough coins'

    def __init__(self, cost, balance):
        self.cost = cost
        self.balance = balance
        super().__init__(
            f'Insufficient coins! You need at least {cost} coins to guess this letter, '
            f'but you only have {balance}.'
        )


class NotMatchOwner(MatchError):
    status_code = 403
    default_message = 'Unauthorized'


class MatchNotFound(MatchError):
    status_code = 404
    default_message = 'Match not found'


class MatchNotPlayable(MatchError):
    status_code = 409
    default_message = 'Match not playable'
