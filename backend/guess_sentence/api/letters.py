from flask import Blueprint, jsonify, request

from guess_sentence.services.matches.letters import letter_costs, random_butterfly

letters = Blueprint('letters', __name__)


@letters.route('/letters/costs', methods=['GET'])
def get_letter_costs():
    return jsonify(letter_costs())


@letters.route('/butterfly', methods=['GET'])
def get_butterfly():
    """Random sample of letters with frequency and price, for display only."""
    n = request.args.get('n', default=10, type=int)
    return jsonify(random_butterfly(n))
