from flask import Blueprint, jsonify, request
from buzzboard.services.games import arbitration, board, lifecycle, selection, snapshots, store


game_bp = Blueprint('game', __name__)


@game_bp.route('/state', methods=['GET'])
def get_state():
    return jsonify(snapshots.state_payload(store.ensure_state()))


@game_bp.route('/buzz-queue', methods=['GET'])
def get_buzz_queue():
    return jsonify(snapshots.queue_payload())


@game_bp.route('/board', methods=['GET'])
def get_board():
    store.ensure_state()
    return jsonify(board.build_board())


@game_bp.route('/select-card', methods=['POST'])
def select_card():
    data = request.get_json(silent=True) or {}
    state = selection.select_card(
        question_id=data.get('question_id'),
        category=data.get('category'),
        points=data.get('points'),
        force=data.get('force', False),
        picker_player_id=data.get('picker_player_id'),
    )
    return jsonify(state)


@game_bp.route('/buzz', methods=['POST'])
def buzz():
    data = request.get_json(silent=True) or {}
    return jsonify(arbitration.buzz(data.get('player_id')))


@game_bp.route('/start', methods=['POST'])
def start_game():
    return jsonify(lifecycle.start_game())


@game_bp.route('/end', methods=['POST'])
def end_game():
    return jsonify(lifecycle.end_game())


@game_bp.route('/reset', methods=['POST'])
def reset_game():
    return jsonify(lifecycle.reset_game())


@game_bp.route('/reset-board', methods=['POST'])
def reset_board():
    return jsonify(lifecycle.reset_board())


@game_bp.route('/unlock-buzzer', methods=['POST'])
def unlock_buzzer():
    return jsonify(arbitration.unlock_buzzer())


@game_bp.route('/set-question-reading', methods=['POST'])
def set_question_reading():
    data = request.get_json(silent=True) or {}
    return jsonify(arbitration.set_question_reading(data.get('reading')))


@game_bp.route('/current-question', methods=['POST'])
def set_current_question():
    data = request.get_json(silent=True) or {}
    return jsonify(selection.set_current_question(data.get('question_id')))
