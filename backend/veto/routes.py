from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the map veto server!'})


@main.route('/health')
def health():
    supervisor = current_app.extensions['veto']['supervisor']
    return jsonify({'status': 'ok', 'connections': supervisor.live_count})
