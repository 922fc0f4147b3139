from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
allowed_origins = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from guess_sentence.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from guess_sentence.api.letters import letters
    flask_app.register_blueprint(letters, url_prefix='/api')

    from guess_sentence.api.matches import matches, guest_matches
    flask_app.register_blueprint(matches, url_prefix='/api/matches')
    flask_app.register_blueprint(guest_matches, url_prefix='/api/guest/matches')

    from guess_sentence.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    from guess_sentence.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Not authenticated'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from guess_sentence.seed import seed_database
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            users, sentences = seed_database()
            print(f'Database has been reset and seeded! users={users} sentences={sentences}')

    @click.command('close-expired')
    def close_expired_command():
        """Closes every playing match whose time ran out."""
        from guess_sentence.services.matches.engine import close_expired_matches
        with flask_app.app_context():
            closed = close_expired_matches()
            print(f'Closed {closed} expired match(es).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(close_expired_command)

    return flask_app
