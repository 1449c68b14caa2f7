"""
Doctor Appointments Component Routes
"""
from datetime import datetime

from flask import Blueprint, redirect, render_template, request, url_for

from opticare.config.settings import OptiCareConfig
from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.forms import DoctorAppointmentForm, form_data, validate_form
from opticare.core.session import current_user, login_required
from .service import DoctorAppointmentService

doctor_appointments_bp = Blueprint('doctor_appointments', __name__, url_prefix='/doctor-appointment')

# Service instance
service = DoctorAppointmentService()


def _render(values, errors=None, status=200):
    return render_template(
        'doctor_appointments/book.html',
        values=values,
        errors=errors or {},
        now=datetime.now(OptiCareConfig.get_store_timezone()).strftime('%Y-%m-%dT%H:%M'),
    ), status


@doctor_appointments_bp.route('', methods=['GET'])
@login_required
def book_page():
    user = current_user()
    return _render({
        'patientName': user['name'],
        'phone': user['phone'],
        'age': '',
        'address': '',
        'reasonForVisit': '',
        'appointmentDate': '',
    })


@doctor_appointments_bp.route('', methods=['POST'])
@login_required
def book():
    values = form_data(request.form)
    form, errors = validate_form(DoctorAppointmentForm, values)
    if errors:
        return _render(values, errors, 400)

    try:
        service.book(form.to_payload())
    except ApiError as e:
        error_toast('Booking Failed', e, 'An unexpected error occurred. Please try again.')
        return _render(values, status=400)

    toast('Appointment Booked! ✅',
          'Your appointment has been successfully scheduled. We look forward to seeing you.')
    return redirect(url_for('doctor_appointments.book_page'))


def init_doctor_appointments(app):
    """Initialize doctor appointments component with Flask app"""
    app.register_blueprint(doctor_appointments_bp)
    return doctor_appointments_bp
