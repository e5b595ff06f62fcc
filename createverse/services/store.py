# services/store.py
"""
Storage collaborator used by the registration and check-in services.

Each call is its own committed unit of work: a failed call rolls the session
back and raises, a successful call has already committed. Unique-index
violations surface as ConflictError naming the colliding field so callers can
turn them into specific outcomes; the database, not an application read, is
what detects the collision.
"""

import logging
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from createverse.extensions import db

logger = logging.getLogger('store')


class StoreError(Exception):
    """A database or transport failure, propagated to the caller unchanged."""


class ConflictError(StoreError):
    """A write collided with a unique constraint."""

    def __init__(self, entity, field, original=None):
        self.entity = entity
        self.field = field
        self.original = original
        super().__init__(f"Unique constraint violated on {entity}.{field}")


class RecordNotFound(StoreError):
    def __init__(self, entity, filters):
        self.entity = entity
        self.filters = filters
        super().__init__(f"No {entity} matching {filters}")


def conflicting_field(model, error):
    """
    Work out which unique field an IntegrityError collided on.

    Recognises the index name (MySQL, PostgreSQL), the ``table.column`` form
    SQLite reports and PostgreSQL's ``Key (column)=`` detail.
    """
    message = str(getattr(error, 'orig', error)).lower()
    table = model.__tablename__

    for field in getattr(model, 'UNIQUE_FIELDS', ()):
        candidates = (
            f"uq_{table}_{field}",
            f"{table}.{field}",
            f"key ({field})=",
        )
        if any(candidate in message for candidate in candidates):
            return field
    return None


class SqlAlchemyStore:
    """insert / get / delete / count over Flask-SQLAlchemy models."""

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def insert(self, entity, fields):
        """Insert one row and commit. Returns the new row's identity."""
        return self.insert_many(entity, [fields])[0]

    def insert_many(self, entity, rows):
        """Insert several rows in a single commit; all of them or none."""
        instances = [entity(**fields) for fields in rows]
        try:
            self.session.add_all(instances)
            self.session.flush()
            identities = [instance.id for instance in instances]
            self.session.commit()
            return identities
        except IntegrityError as e:
            self.session.rollback()
            field = conflicting_field(entity, e)
            if field is None:
                logger.error(f"Integrity error inserting {entity.__tablename__}: {e}")
                raise StoreError(str(e)) from e
            logger.info(f"Unique conflict on {entity.__tablename__}.{field}")
            raise ConflictError(entity.__tablename__, field, e) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error inserting {entity.__tablename__}: {e}")
            raise StoreError(str(e)) from e

    def find(self, entity, **filters):
        try:
            return self.session.query(entity).filter_by(**filters).first()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error reading {entity.__tablename__}: {e}")
            raise StoreError(str(e)) from e

    def get(self, entity, **filters):
        record = self.find(entity, **filters)
        if record is None:
            raise RecordNotFound(entity.__tablename__, filters)
        return record

    def delete(self, entity, **filters):
        """Delete matching rows (every row when no filter is given). Returns the count."""
        try:
            count = self.session.query(entity).filter_by(**filters).delete(synchronize_session=False)
            self.session.commit()
            return count
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error deleting {entity.__tablename__}: {e}")
            raise StoreError(str(e)) from e

    def count(self, entity):
        try:
            return self.session.query(func.count(entity.id)).scalar() or 0
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Database error counting {entity.__tablename__}: {e}")
            raise StoreError(str(e)) from e
