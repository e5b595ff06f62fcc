# models/setting.py
from sqlalchemy import Index
from createverse.extensions import db
from .base import BaseModel


class SettingKey:
    """Known setting keys."""
    REGISTRATIONS_OPEN = 'registrations_open'
    REGISTRATION_LIMIT = 'registration_limit'


class Setting(BaseModel):
    """Process-wide key/value settings changed by staff."""

    __tablename__ = 'settings'

    key = db.Column(db.String(100), nullable=False)
    value = db.Column(db.Text, nullable=True)
    data_type = db.Column(db.String(20), default='string', nullable=False)  # string, int, bool

    __table_args__ = (
        Index('uq_settings_key', 'key', unique=True),
    )

    def get_typed_value(self):
        """Get value converted to appropriate Python type."""
        if self.value is None:
            return None

        if self.data_type == 'int':
            return int(self.value)
        elif self.data_type == 'bool':
            return self.value.lower() in ('true', '1', 'yes', 'on')
        return self.value

    def set_typed_value(self, value):
        if self.data_type == 'bool':
            self.value = 'true' if value else 'false'
        else:
            self.value = str(value)

    def __repr__(self):
        return f'<Setting {self.key}={self.value}>'
