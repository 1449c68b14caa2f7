"""
Appointment Calendar Component Routes
Monthly activity grid of optician appointments and the list for one day
"""
from datetime import date

from flask import Blueprint, render_template, request

from opticare.config.settings import OptiCareConfig
from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast
from opticare.core.listing import WEEKDAY_LABELS, ActivityCalendar, year_options
from opticare.core.session import admin_required
from opticare.components.appointments.service import AppointmentService, describe_problems

admin_appointments_bp = Blueprint('admin_appointments', __name__, url_prefix='/admin/appointments')

# Service instance
service = AppointmentService()


def _month_args(today):
    year = request.args.get('year', type=int) or today.year
    month = request.args.get('month', type=int) or today.month
    if not 1 <= month <= 12:
        month = today.month
    if not 1 <= year <= 9999:
        year = today.year
    return year, month


def _selected_date():
    value = request.args.get('date', '')
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        return None


@admin_appointments_bp.route('', methods=['GET'])
@admin_required
def calendar_page():
    today = date.today()
    year, month = _month_args(today)

    try:
        summary = service.get_summary()
    except ApiError:
        error_toast('Failed to load summary', fallback='Could not fetch appointment summary. Please try again.')
        summary = []

    selected = _selected_date()
    appointments = []
    if selected:
        try:
            appointments = service.get_by_date(selected)
        except ApiError:
            error_toast(f'Failed to load appointments for {selected}',
                        fallback='Could not fetch appointments. Please try again.')

    return render_template(
        'admin_appointments/calendar.html',
        calendar=ActivityCalendar.from_summary(year, month, summary),
        weekdays=WEEKDAY_LABELS,
        years=year_options(today, OptiCareConfig.CALENDAR_YEAR_SPAN),
        selected_date=selected,
        appointments=appointments,
        describe_problems=describe_problems,
    )


def init_admin_appointments(app):
    """Initialize appointment calendar component with Flask app"""
    app.register_blueprint(admin_appointments_bp)
    return admin_appointments_bp
