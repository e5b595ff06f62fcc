# forms/registration.py
from flask import current_app
from flask_wtf import FlaskForm
from wtforms import Form, StringField, FieldList, FormField
from wtforms.validators import DataRequired, Length, Regexp, AnyOf, ValidationError

from createverse.utils.data_processing import (
    clean_email, clean_mobile, clean_text_field, sanitize_identifier
)

GENDERS = ['Male', 'Female', 'Other']
MEMBER_FIELDS = ('full_name', 'identifier', 'gender', 'department', 'year', 'section', 'email', 'mobile')


class MemberForm(Form):
    """One member of a team. Used inside TeamRegistrationForm."""

    full_name = StringField('Full Name', filters=[clean_text_field], validators=[
        DataRequired(message="Full name is required"),
        Length(max=120, message="Full name must be less than 120 characters")
    ])

    identifier = StringField('Registration Number', filters=[sanitize_identifier], validators=[
        DataRequired(message="Registration number is required"),
        Length(min=2, max=50, message="Registration number must be between 2 and 50 characters")
    ])

    gender = StringField('Gender', filters=[clean_text_field], validators=[
        DataRequired(message="Gender is required"),
        AnyOf(GENDERS, message="Gender must be one of: Male, Female, Other")
    ])

    department = StringField('Department', filters=[clean_text_field], validators=[
        DataRequired(message="Department is required"),
        Length(max=80)
    ])

    year = StringField('Year', filters=[clean_text_field], validators=[
        DataRequired(message="Year is required"),
        Regexp(r'^[1-5]$', message="Year must be between 1 and 5")
    ])

    section = StringField('Section', filters=[clean_text_field], validators=[
        DataRequired(message="Section is required"),
        Length(max=20)
    ])

    email = StringField('Email ID', filters=[clean_email], validators=[
        DataRequired(message="Email is required"),
        Length(max=120),
        Regexp(r'^[^\s@]+@[^\s@]+\.[^\s@]+$', message="Invalid email format")
    ])

    mobile = StringField('Mobile / WhatsApp Number', filters=[clean_mobile], validators=[
        DataRequired(message="Mobile number is required"),
        Regexp(r'^\d{10}$', message="Must be exactly 10 digits")
    ])


class TeamRegistrationForm(FlaskForm):
    """
    Team registration payload: a team name and its members, leader first.

    Built from JSON with ``formdata=None`` so values come from ``data``.
    """

    class Meta:
        csrf = False

    team_name = StringField('Team Name', filters=[clean_text_field], validators=[
        DataRequired(message="Team name is required"),
        Length(min=2, max=100, message="Team name must be between 2 and 100 characters")
    ])

    members = FieldList(FormField(MemberForm))

    def validate_members(self, field):
        team_size = current_app.config.get('TEAM_SIZE', 4)
        if len(field.entries) != team_size:
            raise ValidationError(f'A team must have exactly {team_size} members')

        identifiers = [entry.form.identifier.data for entry in field.entries if entry.form.identifier.data]
        if len(set(identifiers)) != len(identifiers):
            raise ValidationError('Each member needs a different registration number')

        emails = [entry.form.email.data for entry in field.entries if entry.form.email.data]
        if len(set(emails)) != len(emails):
            raise ValidationError('Each member needs a different email address')

    @classmethod
    def from_json(cls, payload):
        payload = payload if isinstance(payload, dict) else {}
        members = payload.get('members')
        if not isinstance(members, list):
            members = []
        members = [
            {key: value for key, value in member.items() if key in MEMBER_FIELDS} if isinstance(member, dict) else {}
            for member in members
        ]
        return cls(formdata=None, data={'team_name': payload.get('team_name'), 'members': members})

    def member_dicts(self):
        return [entry.form.data for entry in self.members.entries]

    def error_list(self):
        """Flatten field errors into readable messages."""
        messages = []
        for name, errors in self.errors.items():
            if name == 'members' and isinstance(errors, list):
                for position, entry_errors in enumerate(errors):
                    if isinstance(entry_errors, dict):
                        for field_name, field_errors in entry_errors.items():
                            for error in field_errors:
                                messages.append(f"Member {position + 1} {field_name}: {error}")
                    elif isinstance(entry_errors, str):
                        messages.append(entry_errors)
            else:
                for error in errors:
                    messages.append(error)
        return messages
