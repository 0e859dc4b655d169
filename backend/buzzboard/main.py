from flask import Blueprint, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Buzzboard game server!'})


@main.route('/api/health')
def health():
    return jsonify({'ok': True, 'status': 'healthy'})
