from flask import Blueprint, jsonify, request
from buzzboard.services.catalog import packs, players, questions
from buzzboard.services.games import arbitration, events, lifecycle, selection


admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/resolve-current', methods=['POST'])
def resolve_current():
    data = request.get_json(silent=True) or {}
    return jsonify(arbitration.resolve(data.get('player_id'), data.get('correct')))


@admin_bp.route('/skip-current', methods=['POST'])
def skip_current():
    return jsonify(arbitration.skip())


@admin_bp.route('/set-turn', methods=['POST'])
def set_turn():
    data = request.get_json(silent=True) or {}
    return jsonify(selection.set_turn(data.get('player_id')))


@admin_bp.route('/players/<int:player_id>/score', methods=['POST'])
def adjust_score(player_id):
    data = request.get_json(silent=True) or {}
    return jsonify(players.adjust_score(player_id, delta=data.get('delta'), score=data.get('score')))


@admin_bp.route('/players/<int:player_id>', methods=['DELETE'])
def delete_player(player_id):
    players.delete_player(player_id)
    return jsonify({'ok': True})


@admin_bp.route('/questions/<int:question_id>/select', methods=['POST'])
def select_question(question_id):
    data = request.get_json(silent=True) or {}
    return jsonify(questions.set_selected(question_id, data.get('selected')))


@admin_bp.route('/questions/<int:question_id>/meta', methods=['PATCH'])
def update_question_meta(question_id):
    data = request.get_json(silent=True) or {}
    fields = {key: data[key] for key in ('category', 'points') if key in data}
    return jsonify(questions.update_meta(question_id, **fields))


@admin_bp.route('/questions/<int:question_id>/points', methods=['PATCH'])
def update_question_points(question_id):
    data = request.get_json(silent=True) or {}
    return jsonify(questions.update_points(question_id, data.get('points')))


@admin_bp.route('/seed-defaults', methods=['POST'])
def seed_defaults():
    data = request.get_json(silent=True) or {}
    select_for_game = data.get('select_for_game')
    result = packs.seed_defaults(
        select_for_game=True if select_for_game is None else bool(select_for_game),
        pack=data.get('pack'),
    )
    return jsonify(result)


@admin_bp.route('/question-packs', methods=['GET'])
def question_packs():
    return jsonify(packs.list_packs())


@admin_bp.route('/reset-for-new-game', methods=['POST'])
def reset_for_new_game():
    return jsonify(lifecycle.reset_for_new_game())


@admin_bp.route('/events', methods=['GET'])
def list_events():
    return jsonify(events.list_events(request.args.get('limit', 100)))


@admin_bp.route('/game-history', methods=['GET'])
def game_history():
    return jsonify(packs.list_game_history())


@admin_bp.route('/game-history/<int:game_number>/load', methods=['POST'])
def load_game_history(game_number):
    return jsonify(packs.load_game_history(game_number))
