from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from .models import db, User

main = Blueprint('main', __name__)


def _read_credentials():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    if not isinstance(username, str) or not isinstance(password, str):
        return None, None
    username = username.strip()
    if not username or not password:
        return None, None
    return username, password


@main.route('/users', methods=['POST'])
def register():
    username, password = _read_credentials()
    if username is None:
        return jsonify({'error': 'Missing username or password'}), 400
    if User.query.filter_by(username=username).first():
        return jsonify({'error': 'Username already taken'}), 400

    user = User(username=username, coins=int(current_app.config.get('STARTING_COINS', 100)))
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    login_user(user)
    current_app.logger.info(f"[register] user={user.id}")
    return jsonify(user.to_dict()), 201


@main.route('/sessions', methods=['POST'])
def login():
    username, password = _read_credentials()
    if username is None:
        return jsonify({'error': 'Missing username or password'}), 400
    user = User.query.filter_by(username=username).first()
    if user and user.check_password(password):
        login_user(user, remember=True)
        return jsonify(user.to_dict())
    return jsonify({'error': 'Invalid credentials'}), 401


@main.route('/sessions/current', methods=['GET'])
@login_required
def check_login():
    return jsonify(current_user.to_dict())


@main.route('/sessions/current', methods=['DELETE'])
@login_required
def logout():
    logout_user()
    return '', 204


@main.route('/me', methods=['GET'])
@login_required
def me():
    # Fresh read: coins change on every guess
    user = db.session.get(User, current_user.id)
    return jsonify(user.to_dict())
