import time

import pytest

from guess_sentence import db
from guess_sentence.models import Match, User


@pytest.fixture()
def sentences(add_sentence):
    add_sentence('CAT SAT')
    add_sentence('HI YOU', is_guest=True)


def coins_of(username):
    db.session.expire_all()
    return User.query.filter_by(username=username).first().coins


def test_register_logs_in_with_starting_coins(client):
    res = client.post('/api/users', json={'username': 'alice', 'password': 'secret'})
    assert res.status_code == 201
    assert res.get_json()['coins'] == 100
    me = client.get('/api/me')
    assert me.status_code == 200
    assert me.get_json()['username'] == 'alice'

    again = client.post('/api/users', json={'username': 'alice', 'password': 'other'})
    assert again.status_code == 400
    assert again.get_json()['error'] == 'Username already taken'


def test_register_requires_credentials(client):
    res = client.post('/api/users', json={'username': '  '})
    assert res.status_code == 400


def test_login_and_logout(client, make_user):
    make_user('bob', coins=45)
    bad = client.post('/api/sessions', json={'username': 'bob', 'password': 'nope'})
    assert bad.status_code == 401
    assert bad.get_json()['error'] == 'Invalid credentials'

    ok = client.post('/api/sessions', json={'username': 'bob', 'password': 'secret'})
    assert ok.status_code == 200
    assert ok.get_json() == {'id': ok.get_json()['id'], 'username': 'bob', 'coins': 45}
    assert client.get('/api/sessions/current').get_json()['username'] == 'bob'

    assert client.delete('/api/sessions/current').status_code == 204
    assert client.get('/api/me').status_code == 401


def test_match_routes_require_login(client, sentences):
    assert client.post('/api/matches').status_code == 401
    assert client.get('/api/matches/current').status_code == 401
    res = client.post('/api/matches/1/guess-letter', json={'letter': 'A'})
    assert res.status_code == 401
    assert res.get_json()['error'] == 'Not authenticated'


def test_play_and_win_by_letters(client, sentences, make_user, login):
    make_user('alice', coins=100)
    login('alice')

    res = client.post('/api/matches')
    assert res.status_code == 201
    body = res.get_json()
    match = body['match']
    assert body['coins'] == 100
    assert match['status'] == 'playing'
    assert match['revealed_mask'] == '0001000'
    assert match['sentence'] is None
    assert 'CAT' not in str(body)

    hit = client.post(f"/api/matches/{match['id']}/guess-letter", json={'letter': 'a'}).get_json()
    assert hit['message'] == 'Letter revealed.'
    assert hit['coins'] == 90
    assert hit['match']['revealed'][1] == 'A'

    miss = client.post(f"/api/matches/{match['id']}/guess-letter", json={'letter': 'Z'}).get_json()
    assert miss['message'] == 'Wrong letter! Cost doubled to 2 coins.'
    assert miss['coins'] == 88

    for letter in 'CT':
        client.post(f"/api/matches/{match['id']}/guess-letter", json={'letter': letter})
    won = client.post(f"/api/matches/{match['id']}/guess-letter", json={'letter': 'S'}).get_json()
    assert won['match']['status'] == 'won'
    assert won['match']['sentence'] == 'CAT SAT'
    assert won['coins'] == 88 - 3 - 5 - 5 + 100
    assert coins_of('alice') == 175

    current = client.get('/api/matches/current').get_json()
    assert current['match']['id'] == match['id']
    assert current['match']['status'] == 'won'


def test_guess_validation_errors(client, sentences, make_user, login):
    make_user('alice', coins=100)
    login('alice')
    match_id = client.post('/api/matches').get_json()['match']['id']

    for payload in ({'letter': 'AB'}, {'letter': '3'}, {}, {'letter': 7}):
        res = client.post(f'/api/matches/{match_id}/guess-letter', json=payload)
        assert res.status_code == 400
        assert 'error' in res.get_json()

    res = client.post(f'/api/matches/{match_id}/guess-sentence', json={'sentence': '   '})
    assert res.status_code == 400

    client.post(f'/api/matches/{match_id}/guess-letter', json={'letter': 'E'})
    res = client.post(f'/api/matches/{match_id}/guess-letter', json={'letter': 'I'})
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Vowel already used in this match.'
    assert coins_of('alice') == 80


def test_letter_rule_matches_engine(client, sentences, make_user, login):
    make_user('alice', coins=100)
    login('alice')
    match_id = client.post('/api/matches').get_json()['match']['id']
    guest_id = client.post('/api/guest/matches').get_json()['match']['id']

    for path in (f'/api/matches/{match_id}/guess-letter', f'/api/guest/matches/{guest_id}/guess-letter'):
        res = client.post(path, json={'letter': 'é'})
        assert res.status_code == 400
        assert res.get_json()['error'] == 'Guess a single letter from A to Z.'

    res = client.post(f'/api/matches/{match_id}/guess-letter', json={'letter': ' c '})
    assert res.status_code == 200
    assert res.get_json()['match']['guessed_letters'] == ['C']
    assert coins_of('alice') == 97


def test_insufficient_coins(client, sentences, make_user, login):
    make_user('poor', coins=5)
    login('poor')
    match_id = client.post('/api/matches').get_json()['match']['id']
    res = client.post(f'/api/matches/{match_id}/guess-letter', json={'letter': 'A'})
    assert res.status_code == 400
    assert res.get_json()['error'] == (
        'Insufficient coins! You need at least 10 coins to guess this letter, but you only have 5.'
    )
    assert coins_of('poor') == 5


def test_match_of_another_user_is_forbidden(client, sentences, make_user, login):
    make_user('alice')
    make_user('mallory')
    login('alice')
    match_id = client.post('/api/matches').get_json()['match']['id']

    login('mallory')
    res = client.post(f'/api/matches/{match_id}/guess-letter', json={'letter': 'C'})
    assert res.status_code == 403
    assert res.get_json()['error'] == 'Unauthorized'
    assert client.post(f'/api/matches/{match_id}/abandon').status_code == 403

    # Guests cannot reach user matches either
    assert client.post(f'/api/guest/matches/{match_id}/abandon').status_code == 403
    assert client.get(f'/api/guest/matches/current/{match_id}').get_json() is None


def test_unknown_match_is_404(client, sentences, make_user, login):
    make_user('alice')
    login('alice')
    res = client.post('/api/matches/4242/guess-sentence', json={'sentence': 'CAT SAT'})
    assert res.status_code == 404


def test_abandon_hides_sentence_and_blocks_play(client, sentences, make_user, login):
    make_user('alice', coins=100)
    login('alice')
    match_id = client.post('/api/matches').get_json()['match']['id']

    res = client.post(f'/api/matches/{match_id}/abandon')
    assert res.status_code == 200
    assert res.get_json()['match']['status'] == 'abandoned'
    assert res.get_json()['match']['sentence'] is None
    assert coins_of('alice') == 100

    res = client.post(f'/api/matches/{match_id}/guess-letter', json={'letter': 'C'})
    assert res.status_code == 409
    assert client.get('/api/matches/current').get_json() is None


def test_sentence_guess(client, sentences, make_user, login):
    make_user('alice', coins=0)
    login('alice')
    match_id = client.post('/api/matches').get_json()['match']['id']

    wrong = client.post(f'/api/matches/{match_id}/guess-sentence', json={'sentence': 'BAT SAT'})
    assert wrong.get_json()['message'] == 'Wrong sentence. Keep trying!'
    right = client.post(f'/api/matches/{match_id}/guess-sentence', json={'sentence': 'cat  sat'})
    assert right.get_json()['match']['status'] == 'won'
    assert right.get_json()['coins'] == 100


def test_expired_match_is_lost_on_next_read(client, sentences, make_user, login):
    make_user('alice', coins=100)
    login('alice')
    match_id = client.post('/api/matches').get_json()['match']['id']

    match = db.session.get(Match, match_id)
    match.ends_at = time.time() - 1
    db.session.commit()

    res = client.post(f'/api/matches/{match_id}/guess-letter', json={'letter': 'C'})
    assert res.status_code == 200
    body = res.get_json()
    assert body['message'] == 'Time over.'
    assert body['match']['status'] == 'lost'
    assert body['match']['sentence'] == 'CAT SAT'
    assert body['match']['guessed_letters'] == []
    assert body['coins'] == 80

    current = client.get('/api/matches/current').get_json()
    assert current['match']['status'] == 'lost'
    assert coins_of('alice') == 80


def test_guest_flow(client, sentences):
    res = client.post('/api/guest/matches')
    assert res.status_code == 201
    body = res.get_json()
    assert 'coins' not in body
    match = body['match']
    assert match['is_guest'] is True

    miss = client.post(f"/api/guest/matches/{match['id']}/guess-letter", json={'letter': 'Z'}).get_json()
    assert miss['message'].startswith('Wrong letter! As a guest')
    client.post(f"/api/guest/matches/{match['id']}/guess-letter", json={'letter': 'O'})
    vowel = client.post(f"/api/guest/matches/{match['id']}/guess-letter", json={'letter': 'U'})
    assert vowel.status_code == 400

    current = client.get(f"/api/guest/matches/current/{match['id']}").get_json()
    assert current['match']['guessed_letters'] == ['Z', 'O']

    won = client.post(f"/api/guest/matches/{match['id']}/guess-sentence", json={'sentence': 'Hi you'})
    assert won.get_json()['message'] == 'Correct sentence! Well done!'
    assert won.get_json()['match']['sentence'] == 'HI YOU'


def test_guest_pool_is_separate(client, add_sentence):
    add_sentence('ONLY FOR USERS')
    res = client.post('/api/guest/matches')
    assert res.status_code == 400
    assert res.get_json()['error'] == 'No sentences available for this mode.'


def test_letter_costs_and_butterfly(client):
    costs = client.get('/api/letters/costs').get_json()
    assert costs['A'] == 10
    assert costs['T'] == 5
    assert costs['Z'] == 1
    assert len(costs) == 26

    butterfly = client.get('/api/butterfly?n=4').get_json()
    assert len(butterfly) == 4
    assert {'letter', 'frequency', 'cost'} <= set(butterfly[0])
    assert len(client.get('/api/butterfly').get_json()) == 10


def test_close_expired_command(flask_app, sentences, make_user):
    from guess_sentence.services.matches import engine
    from guess_sentence.services.matches.wallets import Actor

    user = make_user('alice', coins=100)
    engine.start_match(Actor(user_id=user.id), now=time.time() - 120)

    result = flask_app.test_cli_runner().invoke(args=['close-expired'])
    assert 'Closed 1 expired match(es).' in result.output
    assert coins_of('alice') == 80


def test_seed_is_idempotent(flask_app):
    from guess_sentence.seed import GUEST_SENTENCES, REGULAR_SENTENCES, SEED_USERS, seed_database
    from guess_sentence.models import Sentence

    users, sentences = seed_database()
    assert users == len(SEED_USERS)
    assert sentences == len(REGULAR_SENTENCES) + len(GUEST_SENTENCES)
    assert seed_database() == (0, 0)
    assert Sentence.query.filter_by(is_guest=True).count() == len(GUEST_SENTENCES)
    assert User.query.filter_by(username='testuser0').first().coins == 0
