"""
Appointments Component Routes
Optician appointment booking with an available-slot picker
"""
import logging
from datetime import date

from flask import Blueprint, redirect, render_template, request, url_for

from opticare.config.settings import OptiCareConfig
from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.forms import AppointmentForm, form_data, validate_form
from opticare.core.session import current_user, login_required
from .service import AppointmentService

logger = logging.getLogger(__name__)

appointments_bp = Blueprint('appointments', __name__, url_prefix='/appointment')

# Service instance
service = AppointmentService()


def _parse_day(value):
    try:
        return date.fromisoformat(value) if value else None
    except ValueError:
        return None


def _load_slots(day):
    if day is None:
        return []
    try:
        return service.get_available_slots(day)
    except ApiError:
        error_toast('Failed to fetch slots', fallback='Could not load available time slots. Please try again.')
        return []


def _user_defaults():
    user = current_user() or {}
    return {
        'name': user.get('name', ''),
        'email': user.get('email', ''),
        'phone': '',
        'address': '',
        'eyeProblems': [],
        'customProblem': '',
        'preferredDate': '',
        'preferredTime': '',
    }


def _render(values, errors=None, status=200):
    day = _parse_day(values.get('preferredDate'))
    return render_template(
        'appointments/book.html',
        values=values,
        errors=errors or {},
        slots=_load_slots(day),
        eye_problems=OptiCareConfig.EYE_PROBLEMS,
        today=date.today().isoformat(),
    ), status


@appointments_bp.route('', methods=['GET'])
@login_required
def book_page():
    """Booking form; ?preferredDate= loads that day's free slots"""
    values = _user_defaults()
    for key in ('phone', 'address', 'customProblem', 'preferredDate'):
        if request.args.get(key):
            values[key] = request.args.get(key)
    values['eyeProblems'] = request.args.getlist('eyeProblems')
    return _render(values)


@appointments_bp.route('', methods=['POST'])
@login_required
def book():
    values = form_data(request.form, lists=('eyeProblems',))
    form, errors = validate_form(AppointmentForm, values)
    if errors:
        return _render(values, errors, 400)

    try:
        service.request_appointment(form.to_payload())
    except ApiError as e:
        error_toast('Booking Failed', e, 'An unexpected error occurred.')
        if e.is_conflict:
            toast('Slot Unavailable', 'This time slot was just booked. Please select another time.', 'destructive')
            values['preferredTime'] = ''
        return _render(values, status=409 if e.is_conflict else 400)

    toast('Appointment Requested! ✅', "We've received your request and will contact you shortly to confirm.")
    return redirect(url_for('appointments.book_page', phone=form.phone))


def init_appointments(app):
    """Initialize appointments component with Flask app"""
    app.register_blueprint(appointments_bp)
    return appointments_bp
