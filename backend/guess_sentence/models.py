from guess_sentence import db, bcrypt
from flask_login import UserMixin

MATCH_STATUSES = ('playing', 'won', 'lost', 'abandoned')
TERMINAL_STATUSES = frozenset(('won', 'lost', 'abandoned'))


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    coins = db.Column(db.Integer, nullable=False, default=100)
    matches = db.relationship('Match', back_populates='user', lazy='dynamic')

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'coins': self.coins,
        }


class Sentence(db.Model):
    __tablename__ = 'sentence'
    id = db.Column(db.Integer, primary_key=True)
    text = db.Column(db.String(255), nullable=False)
    is_guest = db.Column(db.Boolean, nullable=False, default=False, index=True)

    def __init__(self, **kwargs):
        super(Sentence, self).__init__(**kwargs)
        if self.text:
            self.text = self.text.strip().upper()


class Match(db.Model):
    __tablename__ = 'match'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True, index=True)  # null for guests
    sentence_id = db.Column(db.Integer, db.ForeignKey('sentence.id'), nullable=False)
    started_at = db.Column(db.Float, nullable=False)
    ends_at = db.Column(db.Float, nullable=False)
    finished_at = db.Column(db.Float, nullable=True)
    status = db.Column(db.String(16), nullable=False, default='playing', index=True)  # playing, won, lost, abandoned
    revealed_mask = db.Column(db.Text, nullable=False)
    guessed_letters = db.Column(db.String(26), nullable=False, default='')
    used_vowel = db.Column(db.Boolean, nullable=False, default=False)

    user = db.relationship('User', back_populates='matches')
    sentence = db.relationship('Sentence')

    @property
    def is_guest(self):
        return self.user_id is None

    @property
    def is_playing(self):
        return self.status == 'playing'

    @property
    def solution(self):
        return self.sentence.text.upper()

    def finish(self, status, now):
        """Move a playing match into a terminal status."""
        if status not in TERMINAL_STATUSES:
            raise ValueError(f"Not a terminal status: {status!r}")
        if not self.is_playing:
            raise ValueError(f"Match {self.id} is already {self.status}")
        self.status = status
        self.finished_at = now
