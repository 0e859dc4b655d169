from flask import Blueprint, jsonify, request
from buzzboard.services.catalog import questions


questions_bp = Blueprint('questions', __name__)


@questions_bp.route('', methods=['GET'])
def list_questions():
    selected = request.args.get('selected')
    sel = True if selected == 'true' else False if selected == 'false' else None
    return jsonify(questions.list_questions(sel))


@questions_bp.route('', methods=['POST'])
def create_question():
    data = request.get_json(silent=True) or {}
    question = questions.create_question(
        data.get('player_id'),
        data.get('question_text'),
        data.get('answer'),
        category=data.get('category'),
        points=data.get('points'),
    )
    return jsonify(question), 201
