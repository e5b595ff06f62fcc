# controllers/registration.py
"""Public team registration endpoints."""

import logging
from flask import Blueprint, request, jsonify

from createverse.controllers.forms import TeamRegistrationForm
from createverse.services.errors import ServiceError
from createverse.services.registration_service import RegistrationService

registration_bp = Blueprint('registration', __name__)

logger = logging.getLogger('registration')


@registration_bp.route('/status')
def status():
    """Whether registrations are open and how many places are left."""
    service = RegistrationService()
    return jsonify(dict(service.capacity_status(), success=True))


@registration_bp.route('', methods=['POST'])
def submit():
    """Register a team of members, leader first."""
    form = TeamRegistrationForm.from_json(request.get_json(silent=True))
    if not form.validate():
        return jsonify({
            'success': False,
            'message': 'Please correct the highlighted fields',
            'error_code': 'INVALID_INPUT',
            'errors': form.error_list()
        }), 400

    service = RegistrationService()
    try:
        outcome = service.submit(form.team_name.data, form.member_dicts())
        team = outcome.unwrap()
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code

    return jsonify({
        'success': True,
        'message': 'Registration successful',
        'team': team.to_dict(include_relationships=True)
    }), 201
