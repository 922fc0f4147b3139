import os
import sys
import pytest

# Ensure the backend root (containing the `guess_sentence` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from guess_sentence import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    MATCH_SECONDS = 60
    RECENT_MATCH_GRACE_SEC = 300
    STARTING_COINS = 100
    TIMEOUT_PENALTY = 20
    WIN_BONUS = 100


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import guess_sentence.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def add_sentence(flask_app):
    from guess_sentence.models import Sentence

    def _add(text, is_guest=False):
        sentence = Sentence(text=text, is_guest=is_guest)
        db.session.add(sentence)
        db.session.commit()
        return sentence

    return _add


@pytest.fixture()
def make_user(flask_app):
    from guess_sentence.models import User

    def _make(username='alice', coins=100, password='secret'):
        user = User(username=username, coins=coins)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture()
def login(client):
    def _login(username, password='secret'):
        res = client.post('/api/sessions', json={'username': username, 'password': password})
        assert res.status_code == 200
        return res.get_json()

    return _login
