# utils/auth.py
from functools import wraps
from flask import jsonify
from flask_login import current_user


def staff_required(f):
    """Decorator to require a logged-in, active staff account."""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({
                'success': False,
                'message': 'Authentication required',
                'error_code': 'AUTH_REQUIRED'
            }), 401

        if not current_user.is_active:
            return jsonify({
                'success': False,
                'message': 'Staff account is disabled',
                'error_code': 'ACCOUNT_DISABLED'
            }), 403

        return f(*args, **kwargs)

    return decorated_function
