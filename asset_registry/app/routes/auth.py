import logging

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_user, logout_user

from asset_registry.app.models import User
from asset_registry.app.validation import get_payload, require_text

auth_bp = Blueprint('auth', __name__)

logger = logging.getLogger(__name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    payload = get_payload(request)
    username = require_text(payload, 'username', 64)
    password = payload.get('password')
    if not isinstance(password, str) or not password:
        return jsonify({'error': 'ValidationError', 'message': "'password' is required."}), 400

    user = User.query.filter_by(username=username).first()
    if user and user.check_password(password):
        login_user(user, remember=True)
        logger.info('User %s logged in', user.username)
        return jsonify({'message': 'Login successful', 'username': user.username})

    logger.warning('Failed login for %s', username)
    return jsonify({'error': 'Unauthorized', 'message': 'Invalid username or password.'}), 401


@auth_bp.route('/logout', methods=['POST'])
def logout():
    logout_user()
    return jsonify({'message': 'Logout successful'})


@auth_bp.route('/status', methods=['GET'])
def status():
    is_authenticated = current_user.is_authenticated
    return jsonify({
        'is_authenticated': is_authenticated,
        'username': current_user.username if is_authenticated else None,
    })
