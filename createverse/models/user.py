# models/user.py
from datetime import datetime
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from sqlalchemy import Index

from createverse.extensions import db
from .base import BaseModel


class StaffUser(UserMixin, BaseModel):
    """Staff account allowed to run check-in and change settings."""

    __tablename__ = 'staff_users'

    username = db.Column(db.String(80), nullable=False)
    email = db.Column(db.String(120), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        Index('uq_staff_username', 'username', unique=True),
    )

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def record_login(self):
        self.last_login = datetime.now()

    def to_dict(self, include_relationships=False):
        result = super().to_dict()
        result.pop('password_hash', None)
        return result

    def __repr__(self):
        return f'<StaffUser {self.username}>'
