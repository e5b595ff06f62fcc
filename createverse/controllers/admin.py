# controllers/admin.py
"""Staff administration: registrations, settings and orphan reconciliation."""

import logging
from io import BytesIO
from flask import Blueprint, request, jsonify, send_file
from flask_login import current_user

from createverse.models import SettingKey
from createverse.services.errors import ServiceError
from createverse.services.registration_service import RegistrationService
from createverse.services.settings_service import SettingsService
from createverse.utils.auth import staff_required
from createverse.utils.export_data import export_teams_to_excel

admin_bp = Blueprint('admin', __name__)

logger = logging.getLogger('admin')


@admin_bp.route('/teams')
@staff_required
def teams():
    service = RegistrationService()
    return jsonify({
        'success': True,
        'teams': [team.to_dict(include_relationships=True) for team in service.list_teams()],
        'capacity': service.capacity_status()
    })


@admin_bp.route('/teams', methods=['DELETE'])
@staff_required
def wipe_teams():
    """Delete every registration and attendance record."""
    service = RegistrationService()
    counts = service.wipe_all()
    logger.warning(f"Registrations wiped by {current_user.username}")
    return jsonify({'success': True, 'message': 'All registrations deleted successfully', 'deleted': counts})


@admin_bp.route('/teams/export')
@staff_required
def export_teams():
    excel_data, filename = export_teams_to_excel()
    return send_file(
        BytesIO(excel_data),
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=filename
    )


@admin_bp.route('/teams/orphans')
@staff_required
def orphan_teams():
    service = RegistrationService()
    orphans = service.find_orphan_teams()
    return jsonify({'success': True, 'orphans': [team.to_dict() for team in orphans]})


@admin_bp.route('/teams/orphans/reconcile', methods=['POST'])
@staff_required
def reconcile_orphans():
    service = RegistrationService()
    removed = service.reconcile_orphans()
    return jsonify({'success': True, 'removed': removed})


@admin_bp.route('/settings')
@staff_required
def get_settings():
    return jsonify(dict(SettingsService().as_dict(), success=True))


@admin_bp.route('/settings', methods=['PUT'])
@staff_required
def update_settings():
    """Update registrations_open and/or registration_limit."""
    data = request.get_json(silent=True) or {}
    settings = SettingsService()

    try:
        if SettingKey.REGISTRATIONS_OPEN in data:
            value = data[SettingKey.REGISTRATIONS_OPEN]
            if not isinstance(value, bool):
                return jsonify({
                    'success': False,
                    'message': 'registrations_open must be true or false',
                    'error_code': 'INVALID_INPUT'
                }), 400
            settings.set_registrations_open(value)

        if SettingKey.REGISTRATION_LIMIT in data:
            settings.set_registration_limit(data[SettingKey.REGISTRATION_LIMIT])
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code

    logger.info(f"Settings updated by {current_user.username}: {data}")
    return jsonify(dict(settings.as_dict(), success=True))
