# models/team.py
from sqlalchemy import Index
from createverse.extensions import db
from .base import BaseModel


class Team(BaseModel):
    """A registered team. Created together with its members by RegistrationService."""

    __tablename__ = 'team'

    name = db.Column(db.String(100), nullable=False)

    members = db.relationship(
        'Member',
        back_populates='team',
        cascade='all, delete-orphan',
        order_by='Member.position'
    )

    __table_args__ = (
        Index('idx_team_name', 'name'),
    )

    @property
    def leader(self):
        for member in self.members:
            if member.is_leader:
                return member
        return None

    def to_dict(self, include_relationships=False):
        result = super().to_dict()
        result['member_count'] = len(self.members)
        if include_relationships:
            result['members'] = [member.to_dict() for member in self.members]
        return result

    def __repr__(self):
        return f'<Team {self.name}>'


class Member(BaseModel):
    """A team member. Identifier and email are unique across every team."""

    __tablename__ = 'member'

    UNIQUE_FIELDS = ('identifier', 'email')

    team_id = db.Column(db.String(36), db.ForeignKey('team.id', ondelete='CASCADE'), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)  # order within the submitted team
    is_leader = db.Column(db.Boolean, default=False, nullable=False)

    full_name = db.Column(db.String(120), nullable=False)
    identifier = db.Column(db.String(50), nullable=False)  # registration number
    gender = db.Column(db.String(20), nullable=True)
    department = db.Column(db.String(80), nullable=True)
    year = db.Column(db.String(10), nullable=True)
    section = db.Column(db.String(20), nullable=True)
    email = db.Column(db.String(120), nullable=False)
    mobile = db.Column(db.String(20), nullable=True)

    team = db.relationship('Team', back_populates='members')

    __table_args__ = (
        # Enforced by the database, not by application reads
        Index('uq_member_identifier', 'identifier', unique=True),
        Index('uq_member_email', 'email', unique=True),
        Index('idx_member_team', 'team_id'),
        Index('idx_member_department', 'department', 'year'),
    )

    def snapshot(self):
        """Fields copied onto an attendance record at check-in time."""
        return {
            'full_name': self.full_name,
            'department': self.department,
            'year': self.year,
            'section': self.section,
        }

    def __repr__(self):
        return f'<Member {self.identifier} {self.full_name}>'
