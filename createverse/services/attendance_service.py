# services/attendance_service.py
"""
Attendance check-in.

Whether a member is already checked in is decided by the unique index on
``attendance.identifier``: check_in always attempts the insert and treats a
collision as ALREADY_CHECKED_IN. Two stations scanning the same member at the
same moment both reach the insert, one wins and the other sees the conflict.
"""

import logging
from collections import namedtuple
from datetime import datetime

from createverse.models import Member, AttendanceRecord
from createverse.services.errors import ValidationError, MemberNotFoundError, AlreadyCheckedInError
from createverse.services.store import SqlAlchemyStore, ConflictError
from createverse.utils.data_processing import sanitize_identifier

CheckIn = namedtuple('CheckIn', ['record', 'member'])


class AttendanceService:
    """Lookup, check-in and removal of attendance records by member identifier."""

    def __init__(self, store=None):
        self.store = store or SqlAlchemyStore()
        self.logger = logging.getLogger('attendance_service')

    def lookup(self, identifier):
        """Return the Member registered under identifier, or None."""
        identifier = sanitize_identifier(identifier)
        if not identifier:
            return None
        return self.store.find(Member, identifier=identifier)

    def check_in(self, identifier):
        """
        Mark a registered member as present.

        Args:
            identifier: raw scanned or typed registration number

        Returns:
            CheckIn: the new attendance record and the member it belongs to

        Raises:
            ValidationError: identifier is empty after sanitizing
            MemberNotFoundError: no member has this identifier
            AlreadyCheckedInError: an attendance record already exists
            StoreError: any other database failure
        """
        canonical = sanitize_identifier(identifier)
        if not canonical:
            raise ValidationError('Invalid input - could not read a registration number')

        member = self.store.find(Member, identifier=canonical)
        if member is None:
            self.logger.info(f"Check-in rejected: {canonical} is not registered")
            raise MemberNotFoundError(identifier=canonical)

        fields = dict(member.snapshot(), identifier=canonical, checked_in_at=datetime.now())
        try:
            record_id = self.store.insert(AttendanceRecord, fields)
        except ConflictError as e:
            self.logger.info(f"Duplicate check-in: {canonical} is already checked in")
            raise AlreadyCheckedInError(f'"{canonical}" is already checked in', identifier=canonical) from e

        record = self.store.get(AttendanceRecord, id=record_id)
        self.logger.info(f"Checked in {canonical} ({member.full_name})")
        return CheckIn(record, member)

    def remove_check_in(self, identifier):
        """Mark a member absent again. Removing a missing record is not an error."""
        canonical = sanitize_identifier(identifier)
        if not canonical:
            raise ValidationError('Invalid input - could not read a registration number')

        removed = self.store.delete(AttendanceRecord, identifier=canonical)
        if removed:
            self.logger.info(f"Check-in removed for {canonical}")
        return removed

    def clear_all(self):
        removed = self.store.delete(AttendanceRecord)
        self.logger.warning(f"All attendance cleared ({removed} records)")
        return removed

    def list_records(self):
        return AttendanceRecord.query.order_by(AttendanceRecord.checked_in_at.desc()).all()

    def summary(self):
        registered = self.store.count(Member)
        checked_in = self.store.count(AttendanceRecord)
        return {
            'registered_members': registered,
            'checked_in': checked_in,
            'absent': max(registered - checked_in, 0)
        }
