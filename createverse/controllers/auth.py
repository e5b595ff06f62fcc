# controllers/auth.py
"""Staff login for the check-in and admin endpoints."""

import logging
from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, current_user, login_required

from createverse.extensions import db
from createverse.models import StaffUser

auth_bp = Blueprint('auth', __name__)

logger = logging.getLogger('auth')


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    if not username or not password:
        return jsonify({
            'success': False,
            'message': 'Username and password are required',
            'error_code': 'INVALID_INPUT'
        }), 400

    user = StaffUser.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        logger.warning(f"Failed login attempt for {username} from {request.remote_addr}")
        return jsonify({
            'success': False,
            'message': 'Invalid username or password',
            'error_code': 'INVALID_CREDENTIALS'
        }), 401

    if not user.is_active:
        return jsonify({
            'success': False,
            'message': 'Staff account is disabled',
            'error_code': 'ACCOUNT_DISABLED'
        }), 403

    login_user(user, remember=bool(data.get('remember')))
    user.record_login()
    db.session.commit()

    logger.info(f"Staff login: {user.username}")
    return jsonify({'success': True, 'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    username = current_user.username
    logout_user()
    logger.info(f"Staff logout: {username}")
    return jsonify({'success': True})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'success': True, 'user': current_user.to_dict()})
