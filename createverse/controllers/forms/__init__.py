from .registration import TeamRegistrationForm, MemberForm

__all__ = ['TeamRegistrationForm', 'MemberForm']
