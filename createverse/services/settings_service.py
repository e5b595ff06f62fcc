# services/settings_service.py
import logging
from flask import current_app
from sqlalchemy.exc import IntegrityError

from createverse.extensions import db
from createverse.models import Setting, SettingKey
from createverse.services.errors import ValidationError
from createverse.services.store import StoreError


class SettingsService:
    """Reads and writes the staff-controlled registration settings."""

    def __init__(self):
        self.logger = logging.getLogger('settings_service')

    @staticmethod
    def _get(key, default=None):
        setting = Setting.query.filter_by(key=key).first()
        if setting is None or setting.value is None:
            return default
        return setting.get_typed_value()

    def _set(self, key, value, data_type):
        """Upsert a setting; a concurrent first write is retried as an update."""
        for attempt in range(2):
            setting = Setting.query.filter_by(key=key).first()
            if setting is None:
                setting = Setting(key=key, data_type=data_type)
                db.session.add(setting)
            setting.data_type = data_type
            setting.set_typed_value(value)
            try:
                db.session.commit()
                self.logger.info(f"Setting {key} changed to {setting.value}")
                return setting
            except IntegrityError as e:
                db.session.rollback()
                if attempt:
                    raise StoreError(str(e)) from e

    def registrations_open(self):
        default = current_app.config.get('REGISTRATIONS_OPEN_DEFAULT', False)
        return bool(self._get(SettingKey.REGISTRATIONS_OPEN, default))

    def set_registrations_open(self, is_open):
        self._set(SettingKey.REGISTRATIONS_OPEN, bool(is_open), 'bool')
        return self.registrations_open()

    def registration_limit(self):
        """Maximum number of teams; 0 means unlimited."""
        return self._get(SettingKey.REGISTRATION_LIMIT, 0)

    def set_registration_limit(self, limit):
        # 2.9 would otherwise be truncated to 2 by int()
        if isinstance(limit, bool) or (isinstance(limit, float) and not limit.is_integer()):
            raise ValidationError('Registration limit must be a whole number', field='registration_limit')
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ValidationError('Registration limit must be a whole number', field='registration_limit')
        if limit < 0:
            raise ValidationError('Registration limit cannot be negative', field='registration_limit')

        self._set(SettingKey.REGISTRATION_LIMIT, limit, 'int')
        return limit

    def as_dict(self):
        return {
            SettingKey.REGISTRATIONS_OPEN: self.registrations_open(),
            SettingKey.REGISTRATION_LIMIT: self.registration_limit()
        }
