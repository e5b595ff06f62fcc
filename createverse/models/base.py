# models/base.py
from datetime import datetime
import uuid
from createverse.extensions import db


class BaseModel(db.Model):
    """Base model class with common functionality."""

    __abstract__ = True

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    created_at = db.Column(db.DateTime, default=datetime.now, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    def to_dict(self, include_relationships=False):
        """Convert model instance to dictionary."""
        result = {}

        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, datetime):
                result[column.name] = value.isoformat()
            else:
                result[column.name] = value

        if include_relationships:
            for relationship in self.__mapper__.relationships:
                rel_value = getattr(self, relationship.key)
                if rel_value is None:
                    result[relationship.key] = None
                elif relationship.uselist:
                    result[relationship.key] = [item.to_dict() for item in rel_value]
                else:
                    result[relationship.key] = rel_value.to_dict()

        return result

    def __getitem__(self, key):
        """Enable dict-like access: model['field']"""
        return getattr(self, key)

    def __contains__(self, key):
        """Enable 'in' operator: 'field' in model"""
        return hasattr(self, key)
