from flask import Blueprint, jsonify, redirect, request, make_response
from buzzboard.services.catalog import players
from buzzboard.services.games import snapshots


players_bp = Blueprint('players', __name__)


@players_bp.route('', methods=['GET'])
def list_players():
    return jsonify(snapshots.players_payload())


@players_bp.route('', methods=['POST'])
def create_player():
    data = request.get_json(silent=True) or {}
    player = players.create_player(data.get('name'), data.get('photo_url'))
    return jsonify(player), 201


@players_bp.route('/<string:slug>', methods=['GET'])
def get_player(slug):
    return jsonify(players.get_by_slug(slug).to_dict(include_photo=True))


@players_bp.route('/<string:slug>', methods=['PATCH'])
def update_player(slug):
    data = request.get_json(silent=True) or {}
    fields = {key: data[key] for key in ('name', 'photo_url') if key in data}
    return jsonify(players.update_player(slug, **fields))


@players_bp.route('/<int:player_id>/photo', methods=['GET'])
def player_photo(player_id):
    photo = players.photo_of(player_id)
    if photo[0] == 'redirect':
        return redirect(photo[1], code=302)
    _, mime, data = photo
    response = make_response(data)
    response.headers['Content-Type'] = mime
    response.headers['Cache-Control'] = 'public, max-age=3600'
    return response
