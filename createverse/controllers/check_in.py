# controllers/check_in.py
"""
Check-in routes for barcode scanning and manual registration number entry.
Every route here is for staff; scans are debounced per station.
"""

import logging
from io import BytesIO
from flask import Blueprint, current_app, request, jsonify, send_file

from createverse.services.attendance_service import AttendanceService
from createverse.services.errors import ServiceError
from createverse.services.scan_station import StationRegistry, ScanStatus
from createverse.utils.auth import staff_required
from createverse.utils.data_processing import clean_text_field
from createverse.utils.export_data import export_attendance_to_excel

check_in_bp = Blueprint('check_in', __name__)

logger = logging.getLogger('check_in')


_STATUS_CODES = {
    ScanStatus.CHECKED_IN: 201,
    ScanStatus.ALREADY_CHECKED_IN: 409,
    ScanStatus.NOT_FOUND: 404,
    ScanStatus.INVALID: 400,
    ScanStatus.ERROR: 500,
}


def _member_info(member):
    return {
        'full_name': member.full_name,
        'identifier': member.identifier,
        'department': member.department,
        'year': member.year,
        'section': member.section,
        'team': member.team.name if member.team else None,
        'is_leader': member.is_leader
    }


def _stations():
    """Scan stations of the running app, created on first use."""
    return current_app.extensions.setdefault(
        'scan_stations', StationRegistry(max_stations=current_app.config.get('MAX_SCAN_STATIONS', 64)))


def _station_id(data):
    """Station id from the body or the X-Station-Id header; every scanning device sends its own."""
    return clean_text_field(data.get('station_id') or request.headers.get('X-Station-Id'))


@check_in_bp.route('/scan', methods=['POST'])
@staff_required
def scan():
    """Check in a decoded barcode value. Repeats from the same station inside the window are ignored."""
    data = request.get_json(silent=True) or {}
    station_id = _station_id(data)
    if not station_id:
        return jsonify({
            'success': False,
            'message': 'station_id is required to scan',
            'error_code': 'INVALID_INPUT'
        }), 400

    station = _stations().get(station_id)

    result = station.handle(data.get('value'))
    if result is None:
        return jsonify({'success': True, 'status': 'ignored', 'station_id': station.station_id}), 202

    response = {
        'success': result.status == ScanStatus.CHECKED_IN,
        'status': result.status,
        'identifier': result.identifier,
        'station_id': station.station_id
    }
    if result.member is not None:
        response['member'] = _member_info(result.member)
    if result.record is not None:
        response['record'] = result.record.to_dict()
    if result.error:
        response['message'] = result.error

    return jsonify(response), _STATUS_CODES[result.status]


@check_in_bp.route('/manual', methods=['POST'])
@staff_required
def manual():
    """Check in a typed registration number; no debouncing."""
    data = request.get_json(silent=True) or {}
    service = AttendanceService()
    try:
        check_in = service.check_in(data.get('identifier'))
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code

    return jsonify({
        'success': True,
        'message': f'{check_in.member.full_name} checked in!',
        'member': _member_info(check_in.member),
        'record': check_in.record.to_dict()
    }), 201


@check_in_bp.route('/lookup/<path:identifier>')
@staff_required
def lookup(identifier):
    service = AttendanceService()
    member = service.lookup(identifier)
    if member is None:
        return jsonify({
            'success': False,
            'message': 'Registration number not found in registrations',
            'error_code': 'NOT_FOUND'
        }), 404

    return jsonify({'success': True, 'member': _member_info(member)})


@check_in_bp.route('/<path:identifier>', methods=['DELETE'])
@staff_required
def remove(identifier):
    """Mark a member absent again."""
    service = AttendanceService()
    try:
        removed = service.remove_check_in(identifier)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code

    return jsonify({'success': True, 'removed': removed})


@check_in_bp.route('/clear', methods=['POST'])
@staff_required
def clear():
    service = AttendanceService()
    removed = service.clear_all()
    _stations().clear()
    return jsonify({'success': True, 'message': 'All attendance records cleared', 'removed': removed})


@check_in_bp.route('/records')
@staff_required
def records():
    service = AttendanceService()
    return jsonify({
        'success': True,
        'records': [record.to_dict() for record in service.list_records()]
    })


@check_in_bp.route('/summary')
@staff_required
def summary():
    service = AttendanceService()
    return jsonify(dict(service.summary(), success=True))


@check_in_bp.route('/export')
@staff_required
def export():
    service = AttendanceService()
    records = service.list_records()
    if not records:
        return jsonify({
            'success': False,
            'message': 'No attendance records to export',
            'error_code': 'NOT_FOUND'
        }), 404

    excel_data, filename = export_attendance_to_excel(list(reversed(records)))
    return send_file(
        BytesIO(excel_data),
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=filename
    )
