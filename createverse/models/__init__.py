# models/__init__.py
from .base import BaseModel
from .team import Team, Member
from .attendance import AttendanceRecord
from .setting import Setting, SettingKey
from .user import StaffUser

__all__ = [
    'BaseModel',
    'Team',
    'Member',
    'AttendanceRecord',
    'Setting',
    'SettingKey',
    'StaffUser'
]
