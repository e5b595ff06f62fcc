# models/attendance.py
from datetime import datetime
from sqlalchemy import Index
from createverse.extensions import db
from .base import BaseModel


class AttendanceRecord(BaseModel):
    """
    One row per checked-in member identifier.

    The unique index on identifier is what decides "already checked in"; the
    member fields are a snapshot taken at check-in time, so the record keeps
    its values even if the member row changes later.
    """

    __tablename__ = 'attendance'

    UNIQUE_FIELDS = ('identifier',)

    identifier = db.Column(db.String(50), nullable=False)
    full_name = db.Column(db.String(120), nullable=True)
    department = db.Column(db.String(80), nullable=True)
    year = db.Column(db.String(10), nullable=True)
    section = db.Column(db.String(20), nullable=True)
    checked_in_at = db.Column(db.DateTime, default=datetime.now, nullable=False)

    __table_args__ = (
        Index('uq_attendance_identifier', 'identifier', unique=True),
        Index('idx_attendance_checked_in_at', 'checked_in_at'),
    )

    def __repr__(self):
        return f'<AttendanceRecord {self.identifier} at {self.checked_in_at}>'
