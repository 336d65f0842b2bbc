from flask import Blueprint, request, jsonify
from ..services.auth_service import login_user

auth_bp = Blueprint('auth_bp', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')

    if not all([username, password]) or not all(isinstance(v, str) for v in (username, password)):
        return jsonify({'success': False, 'message': 'Username and password required'}), 400

    ok, error = login_user(username, password)
    if not ok:
        return jsonify({'success': False, 'message': error}), 401

    return jsonify({'success': True, 'message': 'Login successful'}), 200
