import pandas as pd
from io import BytesIO
from datetime import datetime


def _workbook_bytes(df, sheet_name):
    """Write a DataFrame to an in-memory xlsx workbook with fitted column widths."""
    output = BytesIO()
    with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)

        worksheet = writer.sheets[sheet_name]
        for i, col in enumerate(df.columns):
            longest = df[col].astype(str).apply(len).max() if len(df) else 0
            worksheet.set_column(i, i, max(longest, len(col)) + 2)

    output.seek(0)
    return output.getvalue()


def export_attendance_to_excel(records=None):
    """
    Export attendance records to an Excel file with columns:
    - S.No
    - Reg Number
    - Full Name
    - Department
    - Year
    - Section
    - Checked In At

    Args:
        records: AttendanceRecord rows; defaults to every record, oldest first

    Returns:
        tuple: (excel_data, filename)
    """
    from createverse.models import AttendanceRecord

    if records is None:
        records = AttendanceRecord.query.order_by(AttendanceRecord.checked_in_at).all()

    data = []
    for index, record in enumerate(records, start=1):
        data.append({
            'S.No': index,
            'Reg Number': record.identifier,
            'Full Name': record.full_name or '',
            'Department': record.department or '',
            'Year': record.year or '',
            'Section': record.section or '',
            'Checked In At': record.checked_in_at.strftime('%Y-%m-%d %H:%M:%S')
        })

    columns = ['S.No', 'Reg Number', 'Full Name', 'Department', 'Year', 'Section', 'Checked In At']
    df = pd.DataFrame(data, columns=columns)

    timestamp = datetime.now().strftime('%Y-%m-%d')
    filename = f'CREATEVERSE_Attendance_{timestamp}.xlsx'

    return _workbook_bytes(df, 'Attendance'), filename


def export_teams_to_excel(teams=None):
    """
    Export registrations to Excel, one row per member.

    Returns:
        tuple: (excel_data, filename)
    """
    from createverse.models import Team

    if teams is None:
        teams = Team.query.order_by(Team.created_at).all()

    data = []
    for team_number, team in enumerate(teams, start=1):
        for member in team.members:
            data.append({
                'Team No': team_number,
                'Team Name': team.name,
                'Role': 'Leader' if member.is_leader else 'Member',
                'Full Name': member.full_name,
                'Reg Number': member.identifier,
                'Gender': member.gender or '',
                'Department': member.department or '',
                'Year': member.year or '',
                'Section': member.section or '',
                'Email': member.email,
                'Mobile': member.mobile or '',
                'Registered At': team.created_at.strftime('%Y-%m-%d %H:%M:%S')
            })

    columns = ['Team No', 'Team Name', 'Role', 'Full Name', 'Reg Number', 'Gender', 'Department',
               'Year', 'Section', 'Email', 'Mobile', 'Registered At']
    df = pd.DataFrame(data, columns=columns)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    filename = f'registrations_export_{timestamp}.xlsx'

    return _workbook_bytes(df, 'Registrations'), filename
