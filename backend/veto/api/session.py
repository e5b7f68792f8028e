from flask import Blueprint, current_app, jsonify

session_api = Blueprint('session_api', __name__)


@session_api.route('/state', methods=['GET'])
def get_session_state():
    """
    Returns the game, participant, captain and tournament views.
    """
    hub = current_app.extensions['veto']['hub']
    return jsonify(hub.read(lambda manager: manager.views())), 200


@session_api.route('/catalog', methods=['GET'])
def get_catalog():
    catalog = current_app.extensions['veto']['catalog']
    return jsonify([item.to_dict() for item in catalog]), 200
