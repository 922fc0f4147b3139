from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user

from guess_sentence import db, socketio
from guess_sentence.services.matches import engine
from guess_sentence.services.matches.errors import MatchError
from guess_sentence.services.matches.wallets import Actor

matches = Blueprint('matches', __name__)
guest_matches = Blueprint('guest_matches', __name__)


def _handle_match_error(exc: MatchError):
    db.session.rollback()
    current_app.logger.info(
        f"[guess-rejected] path={request.path} status={exc.status_code} error={type(exc).__name__}"
    )
    return jsonify({'error': exc.message}), exc.status_code


matches.register_error_handler(MatchError, _handle_match_error)
guest_matches.register_error_handler(MatchError, _handle_match_error)


def _user_actor() -> Actor:
    return Actor(user_id=current_user.id)


def _read_letter() -> str:
    data = request.get_json(silent=True) or {}
    return engine.normalize_letter(data.get('letter'))


def _read_sentence() -> str:
    data = request.get_json(silent=True) or {}
    return engine.normalize_sentence(data.get('sentence'))


def _push(result: engine.MatchResult) -> None:
    socketio.emit('match_update', result.view, to=f"match:{result.view['id']}", namespace='/ws')


def _respond(result: engine.MatchResult, status: int = 200):
    _push(result)
    return jsonify(result.to_dict()), status


# ---- Authenticated player ----

@matches.route('', methods=['POST'])
@login_required
def start_match():
    result = engine.start_match(_user_actor(), guest=False)
    return _respond(result, 201)


@matches.route('/current', methods=['GET'])
@login_required
def current_match():
    result = engine.get_current_match(_user_actor())
    if result is None:
        return jsonify(None)
    return jsonify(result.to_dict())


@matches.route('/<int:match_id>/guess-letter', methods=['POST'])
@login_required
def guess_letter(match_id):
    letter = _read_letter()
    return _respond(engine.guess_letter(match_id, _user_actor(), letter))


@matches.route('/<int:match_id>/guess-sentence', methods=['POST'])
@login_required
def guess_sentence(match_id):
    sentence = _read_sentence()
    return _respond(engine.guess_sentence(match_id, _user_actor(), sentence))


@matches.route('/<int:match_id>/abandon', methods=['POST'])
@login_required
def abandon_match(match_id):
    return _respond(engine.abandon_match(match_id, _user_actor()))


# ---- Guest player (no login, no coins) ----

@guest_matches.route('', methods=['POST'])
def start_guest_match():
    result = engine.start_match(Actor.guest(), guest=True)
    return _respond(result, 201)


@guest_matches.route('/current/<int:match_id>', methods=['GET'])
def current_guest_match(match_id):
    result = engine.get_guest_match(match_id)
    if result is None:
        return jsonify(None)
    return jsonify(result.to_dict())


@guest_matches.route('/<int:match_id>/guess-letter', methods=['POST'])
def guest_guess_letter(match_id):
    letter = _read_letter()
    return _respond(engine.guess_letter(match_id, Actor.guest(), letter))


@guest_matches.route('/<int:match_id>/guess-sentence', methods=['POST'])
def guest_guess_sentence(match_id):
    sentence = _read_sentence()
    return _respond(engine.guess_sentence(match_id, Actor.guest(), sentence))


@guest_matches.route('/<int:match_id>/abandon', methods=['POST'])
def guest_abandon_match(match_id):
    return _respond(engine.abandon_match(match_id, Actor.guest()))
