# cli.py
"""
Flask CLI commands for registration and check-in administration.
"""

import sys

import click
from flask.cli import with_appcontext

from createverse.extensions import db


@click.command("create-staff-user")
@click.option("--username", prompt=True, help="Staff username")
@click.option("--email", default=None, help="Staff email address")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True, help="Staff password")
@with_appcontext
def create_staff_user(username, email, password):
    """Create a staff account for check-in and administration."""
    from createverse.models import StaffUser

    if StaffUser.query.filter_by(username=username).first():
        click.echo(f"Error: staff user '{username}' already exists", err=True)
        sys.exit(1)

    user = StaffUser(username=username, email=email)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    click.echo(f"Staff user '{username}' created.")


@click.command("registrations")
@click.argument("state", type=click.Choice(["open", "close"]))
@with_appcontext
def registrations(state):
    """Open or close registrations."""
    from createverse.services.settings_service import SettingsService

    is_open = SettingsService().set_registrations_open(state == "open")
    click.echo(f"Registrations are now {'open' if is_open else 'closed'}.")


@click.command("set-registration-limit")
@click.argument("limit", type=int)
@with_appcontext
def set_registration_limit(limit):
    """Set the maximum number of teams (0 = unlimited)."""
    from createverse.services.errors import ServiceError
    from createverse.services.settings_service import SettingsService

    try:
        limit = SettingsService().set_registration_limit(limit)
    except ServiceError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    click.echo(f"Registration limit set to {limit or 'unlimited'}.")


@click.command("registration-status")
@with_appcontext
def registration_status():
    """Show whether registrations are open and how full they are."""
    from createverse.services.registration_service import RegistrationService

    status = RegistrationService().capacity_status()
    click.echo(f"Open:       {'yes' if status['registrations_open'] else 'no'}")
    click.echo(f"Limit:      {status['limit'] or 'unlimited'}")
    click.echo(f"Registered: {status['registered']}")
    if status['remaining'] is not None:
        click.echo(f"Remaining:  {status['remaining']}")


@click.command("scan-station")
@click.option("--station-id", default="terminal", help="Name shown in logs for this station")
@with_appcontext
def scan_station(station_id):
    """
    Check in registration numbers read line by line from stdin.

    USB barcode readers type the decoded value followed by Enter, so this
    command can run a scanner directly. End with Ctrl-D.
    """
    from createverse.services.scan_station import ScanStation, ScanStatus

    station = ScanStation(station_id)
    click.echo(f"Station '{station_id}' ready. Scan or type a registration number.")

    for line in sys.stdin:
        result = station.handle(line)
        if result is None:
            continue

        if result.status == ScanStatus.CHECKED_IN:
            click.secho(f"OK   {result.identifier}  {result.member.full_name} checked in", fg="green")
        elif result.status == ScanStatus.ALREADY_CHECKED_IN:
            click.secho(f"DUP  {result.identifier}  already checked in", fg="yellow")
        elif result.status == ScanStatus.NOT_FOUND:
            click.secho(f"MISS {result.identifier}  not found in registrations", fg="red")
        elif result.status == ScanStatus.INVALID:
            click.secho("ERR  invalid scan - no readable data detected", fg="red")
        else:
            click.secho(f"ERR  {result.identifier}  {result.error}", fg="red")


@click.command("find-orphan-teams")
@click.option("--reconcile", is_flag=True, help="Delete the orphan teams that were found")
@click.option("--grace-seconds", type=click.IntRange(min=0), default=None,
              help="Ignore teams younger than this (default ORPHAN_GRACE_SECONDS)")
@with_appcontext
def find_orphan_teams(reconcile, grace_seconds):
    """List teams without members left by an interrupted registration."""
    from createverse.services.registration_service import RegistrationService

    service = RegistrationService()
    orphans = service.find_orphan_teams(grace_seconds)
    if not orphans:
        click.echo("No orphan teams found.")
        return

    for team in orphans:
        click.echo(f"{team.id}  {team.name}  created {team.created_at:%Y-%m-%d %H:%M:%S}")

    if reconcile:
        removed = service.reconcile_orphans(grace_seconds)
        click.echo(f"Removed {len(removed)} orphan teams.")


@click.command("reset-attendance")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@with_appcontext
def reset_attendance(yes):
    """Delete every attendance record."""
    from createverse.services.attendance_service import AttendanceService

    if not yes and not click.confirm("Clear ALL attendance records? This cannot be undone"):
        click.echo("Operation cancelled.")
        return

    removed = AttendanceService().clear_all()
    click.echo(f"Cleared {removed} attendance records.")


@click.command("wipe-registrations")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@with_appcontext
def wipe_registrations(yes):
    """Delete every team, member and attendance record."""
    from createverse.services.registration_service import RegistrationService

    if not yes and not click.confirm("Delete ALL registrations and attendance? This cannot be undone"):
        click.echo("Operation cancelled.")
        return

    counts = RegistrationService().wipe_all()
    click.echo(f"Deleted {counts['teams']} teams, {counts['members']} members "
               f"and {counts['attendance']} attendance records.")


@click.command("export-attendance")
@click.argument("path", type=click.Path(dir_okay=False, writable=True), required=False)
@with_appcontext
def export_attendance(path):
    """Write attendance to an xlsx file."""
    from createverse.utils.export_data import export_attendance_to_excel

    excel_data, filename = export_attendance_to_excel()
    path = path or filename
    with open(path, 'wb') as f:
        f.write(excel_data)
    click.echo(f"Attendance exported to {path}")


def register_cli_commands(app):
    """Register all custom CLI commands with the Flask app."""
    for command in (create_staff_user, registrations, set_registration_limit, registration_status,
                    scan_station, find_orphan_teams, reset_attendance, wipe_registrations,
                    export_attendance):
        app.cli.add_command(command)
