# services/registration_service.py
"""
Team registration.

A team and its members are written as two store calls. The database cannot
be asked for one transaction spanning both from here, so the write is a
saga: insert the team, insert the members, and delete the team again if the
member insert fails. The outcome says which of the three possible endings
happened so an orphaned team is never silently hidden.

Capacity is a read of the committed team count followed by the insert.
Concurrent submissions can both pass the read and admit one team more than
the limit; that window is accepted rather than emulating a lock here.
"""

import logging
from datetime import datetime, timedelta

from flask import current_app

from createverse.models import Team, Member, AttendanceRecord
from createverse.services.errors import (
    ValidationError, CapacityExceededError, RegistrationsClosedError,
    DuplicateIdentifierError, DuplicateEmailError
)
from createverse.services.settings_service import SettingsService
from createverse.services.store import SqlAlchemyStore, StoreError, ConflictError
from createverse.utils.data_processing import (
    sanitize_identifier, clean_email, clean_mobile, clean_text_field, normalize_name
)

MEMBER_FIELDS = ('full_name', 'identifier', 'gender', 'department', 'year', 'section', 'email', 'mobile')


class RegistrationOutcome:
    """Result of the team + members write."""

    committed = False
    team = None
    error = None
    compensation_error = None

    def unwrap(self):
        """Return the committed Team or raise the original failure."""
        if self.committed:
            return self.team
        raise self.error


class Committed(RegistrationOutcome):
    committed = True

    def __init__(self, team):
        self.team = team

    def __repr__(self):
        return f'<Committed {self.team!r}>'


class RolledBack(RegistrationOutcome):
    """Member insert failed and the team row was removed again."""

    def __init__(self, error):
        self.error = error

    def __repr__(self):
        return f'<RolledBack {self.error!r}>'


class Inconsistent(RegistrationOutcome):
    """Member insert failed and so did removing the team; an orphan team remains."""

    def __init__(self, error, compensation_error, team_id=None):
        self.error = error
        self.compensation_error = compensation_error
        self.team_id = team_id

    def __repr__(self):
        return f'<Inconsistent {self.error!r} orphan={self.team_id}>'


class RegistrationService:
    """Capacity-bounded team registration and registration administration."""

    def __init__(self, store=None, settings=None):
        self.store = store or SqlAlchemyStore()
        self.settings = settings or SettingsService()
        self.logger = logging.getLogger('registration_service')

    @property
    def team_size(self):
        return current_app.config.get('TEAM_SIZE', 4)

    def submit(self, team_name, members):
        """
        Register a team with its members.

        Args:
            team_name: display name of the team
            members: list of member dicts, leader first

        Returns:
            RegistrationOutcome: Committed, RolledBack or Inconsistent

        Raises:
            RegistrationsClosedError, ValidationError, CapacityExceededError:
                before anything is written
            StoreError: when the team row itself cannot be inserted
        """
        if not self.settings.registrations_open():
            raise RegistrationsClosedError()

        team_name = clean_text_field(team_name)
        if not team_name:
            raise ValidationError('Team name is required', field='team_name')

        rows = self._member_rows(members)
        self.ensure_capacity()

        # Step 1: the team row
        team_id = self.store.insert(Team, {'name': team_name})

        # Step 2: every member in one call
        for row in rows:
            row['team_id'] = team_id
        try:
            self.store.insert_many(Member, rows)
        except StoreError as error:
            failure = self._translate(error)
            self.logger.info(f"Member insert failed for team {team_id} ({team_name}): {failure.__class__.__name__}")

            # Step 3: compensate
            try:
                self.store.delete(Team, id=team_id)
            except StoreError as compensation_error:
                self.logger.error(
                    f"Could not remove team {team_id} after failed member insert; "
                    f"orphan team left for reconciliation: {compensation_error}")
                return Inconsistent(failure, compensation_error, team_id=team_id)

            return RolledBack(failure)

        team = self.store.get(Team, id=team_id)
        self.logger.info(f"Team registered: {team.name} ({team.id}) with {len(rows)} members")
        return Committed(team)

    def register_team(self, team_name, members):
        """Register a team and return it, raising the original error on failure."""
        return self.submit(team_name, members).unwrap()

    def ensure_capacity(self):
        """Raise CapacityExceededError when the committed team count has reached the limit."""
        limit = self.settings.registration_limit()
        if not limit:
            return

        registered = self.store.count(Team)
        if registered >= limit:
            self.logger.warning(f"Registration rejected: {registered} teams registered, limit {limit}")
            raise CapacityExceededError(limit=limit, registered=registered)

    def capacity_status(self):
        limit = self.settings.registration_limit()
        registered = self.store.count(Team)
        remaining = max(limit - registered, 0) if limit else None
        return {
            'registrations_open': self.settings.registrations_open(),
            'limit': limit,
            'registered': registered,
            'remaining': remaining,
            'is_full': bool(limit) and registered >= limit
        }

    def _member_rows(self, members):
        if not isinstance(members, (list, tuple)) or len(members) != self.team_size:
            raise ValidationError(f'A team must have exactly {self.team_size} members', field='members')

        rows = []
        for position, member in enumerate(members):
            if not isinstance(member, dict):
                raise ValidationError('Member details are missing', field='members', position=position)
            row = {field: member.get(field) for field in MEMBER_FIELDS}
            row['identifier'] = sanitize_identifier(row['identifier'])
            row['email'] = clean_email(row['email'])
            row['full_name'] = normalize_name(row['full_name'])
            row['mobile'] = clean_mobile(row['mobile'])
            for field in ('gender', 'department', 'year', 'section'):
                row[field] = clean_text_field(row[field])

            if not row['identifier']:
                raise ValidationError('Registration number is required', field='identifier', position=position)
            if not row['email']:
                raise ValidationError('Email is required', field='email', position=position)
            if not row['full_name']:
                raise ValidationError('Full name is required', field='full_name', position=position)

            row['position'] = position
            row['is_leader'] = position == 0
            rows.append(row)
        return rows

    @staticmethod
    def _translate(error):
        """Map a unique-constraint conflict onto the field that collided."""
        translated = error
        if isinstance(error, ConflictError):
            if error.field == 'identifier':
                translated = DuplicateIdentifierError()
            elif error.field == 'email':
                translated = DuplicateEmailError()
            if translated is not error:
                translated.__cause__ = error
        return translated

    # Administration

    def list_teams(self):
        return Team.query.order_by(Team.created_at.desc()).all()

    def find_orphan_teams(self, grace_seconds=None):
        """
        Teams with no members, left behind by a failed compensation.

        A team younger than the grace period may still be between its own
        insert and the member insert, so it is not reported.
        """
        if grace_seconds is None:
            grace_seconds = current_app.config.get('ORPHAN_GRACE_SECONDS', 300)
        cutoff = datetime.now() - timedelta(seconds=grace_seconds)
        return (Team.query
                .filter(~Team.members.any(), Team.created_at <= cutoff)
                .order_by(Team.created_at)
                .all())

    def reconcile_orphans(self, grace_seconds=None):
        """Delete orphan teams past the grace period. Returns the ids removed."""
        removed = []
        for team in self.find_orphan_teams(grace_seconds):
            team_id = team.id
            self.store.delete(Team, id=team_id)
            removed.append(team_id)
            self.logger.warning(f"Removed orphan team {team_id}")
        return removed

    def wipe_all(self):
        """Delete every team, member and attendance record."""
        attendance = self.store.delete(AttendanceRecord)
        members = self.store.delete(Member)
        teams = self.store.delete(Team)
        self.logger.warning(f"Registrations wiped: {teams} teams, {members} members, {attendance} attendance records")
        return {'teams': teams, 'members': members, 'attendance': attendance}
