"""
Doctor Desk Component Routes
Doctor appointments for registered users, walk-in patients and new walk-ins
"""
import logging

from flask import Blueprint, redirect, render_template, request, url_for

from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.forms import (DoctorAppointmentForm, PatientForm, WalkInForm, form_data, store_datetime_input,
                                 validate_form)
from opticare.core.session import admin_required, forget_selection, get_selection, remember_selection
from .service import DoctorDeskService, is_duplicate_phone

logger = logging.getLogger(__name__)

admin_doctor_desk_bp = Blueprint('admin_doctor_desk', __name__, url_prefix='/admin/doctor-appointments')

# Service instance
service = DoctorDeskService()

SELECTED_REGISTERED = 'selectedRegisteredUserForDoctorAppointment'
SELECTED_PATIENT = 'selectedPastUserForDoctorAppointment'

EMPTY_PATIENT = {'name': '', 'age': '', 'phone': '', 'address': ''}


def local_datetime(value):
    """Backend timestamp as the value of a datetime-local input"""
    return store_datetime_input(value)


def appointment_values(appointment=None, person=None):
    """Appointment form values: an existing appointment, or a new one for a person"""
    if appointment:
        return {
            'patientName': appointment.get('patientName') or '',
            'age': appointment.get('age') if appointment.get('age') is not None else '',
            'phone': appointment.get('phone') or '',
            'address': appointment.get('address') or '',
            'reasonForVisit': appointment.get('reasonForVisit') or '',
            'appointmentDate': local_datetime(appointment.get('appointmentDate')),
        }
    person = person or {}
    return {
        'patientName': person.get('name') or '',
        'age': person.get('age') if person.get('age') is not None else '',
        'phone': person.get('phone') or '',
        'address': person.get('address') or '',
        'reasonForVisit': '',
        'appointmentDate': '',
    }


def _find(records, record_id):
    return next((record for record in records or [] if str(record.get('id')) == str(record_id)), None)


@admin_doctor_desk_bp.route('', methods=['GET'])
@admin_required
def landing():
    return render_template('admin_doctor_desk/landing.html')


# Registered users

@admin_doctor_desk_bp.route('/registered', methods=['GET'])
@admin_required
def registered():
    q = request.args.get('q', '')
    try:
        users = service.find_registered_users(q)
    except ApiError:
        error_toast('Error fetching users', fallback='Could not retrieve the list of users.')
        users = []
    return render_template('admin_doctor_desk/registered.html', users=users, q=q)


@admin_doctor_desk_bp.route('/registered/<user_id>/select', methods=['POST'])
@admin_required
def select_registered(user_id):
    try:
        user = _find(service.find_registered_users(), user_id)
    except ApiError:
        error_toast('Error fetching users', fallback='Could not retrieve the list of users.')
        return redirect(url_for('admin_doctor_desk.registered'))

    if user is None:
        error_toast('User Not Found', fallback='The selected user no longer exists.')
        return redirect(url_for('admin_doctor_desk.registered'))

    remember_selection(SELECTED_REGISTERED, user)
    return redirect(url_for('admin_doctor_desk.registered_details'))


def _registered_user():
    user = get_selection(SELECTED_REGISTERED)
    if user is None:
        toast('No User Selected', 'Please select a user first.', 'destructive')
    return user


def _render_registered(user, form_mode=None, editing=None, values=None, errors=None, status=200):
    try:
        appointments = service.appointments_for_user(user['id'])
    except ApiError:
        error_toast('Error fetching data', fallback='Could not retrieve appointment data.')
        appointments = []

    if form_mode == 'edit' and values is None:
        values = appointment_values(_find(appointments, editing))
    elif form_mode == 'new' and values is None:
        values = appointment_values(person=user)

    return render_template(
        'admin_doctor_desk/registered_details.html',
        user=user,
        appointments=appointments,
        form_mode=form_mode,
        editing=editing,
        values=values or {},
        errors=errors or {},
    ), status


@admin_doctor_desk_bp.route('/registered/details', methods=['GET'])
@admin_required
def registered_details():
    user = _registered_user()
    if user is None:
        return redirect(url_for('admin_doctor_desk.registered'))

    editing = request.args.get('edit')
    form_mode = 'edit' if editing else ('new' if request.args.get('new') == '1' else None)
    return _render_registered(user, form_mode, editing)


@admin_doctor_desk_bp.route('/registered/details/appointments', methods=['POST'])
@admin_required
def create_registered_appointment():
    user = _registered_user()
    if user is None:
        return redirect(url_for('admin_doctor_desk.registered'))

    values = form_data(request.form)
    form, errors = validate_form(DoctorAppointmentForm, values)
    if errors:
        return _render_registered(user, 'new', values=values, errors=errors, status=400)

    try:
        service.appointments.create_for_registered_user(user['id'], form.to_payload())
    except ApiError as e:
        error_toast('Operation Failed', e, 'An unexpected error occurred.')
        return _render_registered(user, 'new', values=values, status=400)

    toast('Appointment Created', 'New appointment has been booked.')
    return redirect(url_for('admin_doctor_desk.registered_details'))


@admin_doctor_desk_bp.route('/registered/details/appointments/<appointment_id>', methods=['POST'])
@admin_required
def update_registered_appointment(appointment_id):
    user = _registered_user()
    if user is None:
        return redirect(url_for('admin_doctor_desk.registered'))

    values = form_data(request.form)
    form, errors = validate_form(DoctorAppointmentForm, values)
    if errors:
        return _render_registered(user, 'edit', appointment_id, values, errors, 400)

    try:
        service.appointments.update(appointment_id, {**form.to_payload(), 'userId': user['id']})
    except ApiError as e:
        error_toast('Operation Failed', e, 'An unexpected error occurred.')
        return _render_registered(user, 'edit', appointment_id, values, status=400)

    toast('Appointment Updated', 'The appointment has been successfully updated.')
    return redirect(url_for('admin_doctor_desk.registered_details'))


@admin_doctor_desk_bp.route('/registered/details/appointments/<appointment_id>/delete', methods=['POST'])
@admin_required
def delete_registered_appointment(appointment_id):
    try:
        service.appointments.delete(appointment_id)
        toast('Appointment Deleted', 'The appointment has been removed.')
    except ApiError:
        error_toast('Deletion Failed', fallback='Could not delete the appointment.')
    return redirect(url_for('admin_doctor_desk.registered_details'))


# Walk-in / past patients

def _patient_error(error):
    if is_duplicate_phone(error):
        toast('Duplicate Entry', 'A patient with this phone number already exists.', 'destructive')
    else:
        error_toast('Operation Failed', error, 'An unexpected error occurred. Please check the details and try again.')


def _render_patients(values=None, errors=None, status=200):
    q = request.values.get('q', '')
    try:
        patients = service.find_patients(q)
    except ApiError:
        error_toast('Error fetching patients', fallback='Could not retrieve patient records.')
        patients = []
    return render_template(
        'admin_doctor_desk/past.html',
        patients=patients,
        q=q,
        values=values or dict(EMPTY_PATIENT),
        errors=errors or {},
        show_form=bool(errors) or values is not None or request.args.get('new') == '1',
    ), status


@admin_doctor_desk_bp.route('/past', methods=['GET'])
@admin_required
def past():
    return _render_patients()


@admin_doctor_desk_bp.route('/past', methods=['POST'])
@admin_required
def create_patient():
    values = form_data(request.form)
    form, errors = validate_form(PatientForm, values)
    if errors:
        return _render_patients(values, errors, 400)

    try:
        service.patients.create(form.model_dump())
    except ApiError as e:
        _patient_error(e)
        return _render_patients(values, status=400)

    toast('User Created', f'New past user record created for {form.name}.')
    return redirect(url_for('admin_doctor_desk.past'))


@admin_doctor_desk_bp.route('/past/<patient_id>/select', methods=['POST'])
@admin_required
def select_patient(patient_id):
    try:
        patient = _find(service.find_patients(), patient_id)
    except ApiError:
        error_toast('Error fetching patients', fallback='Could not retrieve patient records.')
        return redirect(url_for('admin_doctor_desk.past'))

    if patient is None:
        error_toast('Patient Not Found', fallback='The selected patient no longer exists.')
        return redirect(url_for('admin_doctor_desk.past'))

    remember_selection(SELECTED_PATIENT, patient)
    return redirect(url_for('admin_doctor_desk.past_details'))


def _patient():
    patient = get_selection(SELECTED_PATIENT)
    if patient is None:
        toast('No User Selected', 'Please select a past user first.', 'destructive')
    return patient


def _render_patient(patient, form_mode=None, editing=None, values=None, errors=None, status=200):
    try:
        appointments = service.patients.get_appointments(patient['id'])
    except ApiError:
        error_toast('Error fetching data', fallback='Could not retrieve appointment data.')
        appointments = []

    if form_mode == 'edit' and values is None:
        values = appointment_values(_find(appointments, editing))
    elif form_mode == 'new' and values is None:
        values = appointment_values(person=patient)
    elif form_mode == 'patient' and values is None:
        values = {key: '' if patient.get(key) is None else patient.get(key) for key in EMPTY_PATIENT}

    return render_template(
        'admin_doctor_desk/past_details.html',
        patient=patient,
        appointments=appointments,
        form_mode=form_mode,
        editing=editing,
        values=values or {},
        errors=errors or {},
    ), status


@admin_doctor_desk_bp.route('/past/details', methods=['GET'])
@admin_required
def past_details():
    patient = _patient()
    if patient is None:
        return redirect(url_for('admin_doctor_desk.past'))

    editing = request.args.get('edit')
    if editing:
        form_mode = 'edit'
    elif request.args.get('new') == '1':
        form_mode = 'new'
    elif request.args.get('edit_patient') == '1':
        form_mode = 'patient'
    else:
        form_mode = None
    return _render_patient(patient, form_mode, editing)


@admin_doctor_desk_bp.route('/past/details', methods=['POST'])
@admin_required
def update_patient():
    patient = _patient()
    if patient is None:
        return redirect(url_for('admin_doctor_desk.past'))

    values = form_data(request.form)
    form, errors = validate_form(PatientForm, values)
    if errors:
        return _render_patient(patient, 'patient', values=values, errors=errors, status=400)

    try:
        updated = service.patients.update(patient['id'], form.model_dump())
    except ApiError as e:
        _patient_error(e)
        return _render_patient(patient, 'patient', values=values, status=400)

    remember_selection(SELECTED_PATIENT, updated if isinstance(updated, dict) else {**patient, **form.model_dump()})
    toast('User Updated', "The user's record has been successfully updated.")
    return redirect(url_for('admin_doctor_desk.past_details'))


@admin_doctor_desk_bp.route('/past/details/delete', methods=['POST'])
@admin_required
def delete_patient():
    patient = _patient()
    if patient is None:
        return redirect(url_for('admin_doctor_desk.past'))

    try:
        service.patients.delete(patient['id'])
    except ApiError:
        error_toast('Deletion Failed', fallback='Could not delete the user record.')
        return redirect(url_for('admin_doctor_desk.past_details'))

    forget_selection(SELECTED_PATIENT)
    toast('User Deleted', f"{patient.get('name')}'s record has been permanently removed.")
    return redirect(url_for('admin_doctor_desk.past'))


@admin_doctor_desk_bp.route('/past/details/appointments', methods=['POST'])
@admin_required
def create_patient_appointment():
    patient = _patient()
    if patient is None:
        return redirect(url_for('admin_doctor_desk.past'))

    values = form_data(request.form)
    form, errors = validate_form(DoctorAppointmentForm, values)
    if errors:
        return _render_patient(patient, 'new', values=values, errors=errors, status=400)

    try:
        service.patients.add_appointment(patient['id'], form.to_payload())
    except ApiError as e:
        error_toast('Operation Failed', e, 'An unexpected error occurred.')
        return _render_patient(patient, 'new', values=values, status=400)

    toast('Appointment Created', 'New appointment has been booked.')
    return redirect(url_for('admin_doctor_desk.past_details'))


@admin_doctor_desk_bp.route('/past/details/appointments/<appointment_id>', methods=['POST'])
@admin_required
def update_patient_appointment(appointment_id):
    patient = _patient()
    if patient is None:
        return redirect(url_for('admin_doctor_desk.past'))

    values = form_data(request.form)
    form, errors = validate_form(DoctorAppointmentForm, values)
    if errors:
        return _render_patient(patient, 'edit', appointment_id, values, errors, 400)

    try:
        service.patients.update_appointment(appointment_id, form.to_payload())
    except ApiError as e:
        error_toast('Operation Failed', e, 'An unexpected error occurred.')
        return _render_patient(patient, 'edit', appointment_id, values, status=400)

    toast('Appointment Updated', 'The appointment has been successfully updated.')
    return redirect(url_for('admin_doctor_desk.past_details'))


@admin_doctor_desk_bp.route('/past/details/appointments/<appointment_id>/delete', methods=['POST'])
@admin_required
def delete_patient_appointment(appointment_id):
    try:
        service.patients.delete_appointment(appointment_id)
        toast('Appointment Deleted', 'The appointment has been removed.')
    except ApiError:
        error_toast('Deletion Failed', fallback='Could not delete the appointment.')
    return redirect(url_for('admin_doctor_desk.past_details'))


# New walk-in

@admin_doctor_desk_bp.route('/walk-in', methods=['GET'])
@admin_required
def walk_in_page():
    values = dict(EMPTY_PATIENT, reasonForVisit='', appointmentDate='')
    return render_template('admin_doctor_desk/walk_in.html', values=values, errors={})


@admin_doctor_desk_bp.route('/walk-in', methods=['POST'])
@admin_required
def walk_in():
    values = form_data(request.form)
    form, errors = validate_form(WalkInForm, values)
    if errors:
        return render_template('admin_doctor_desk/walk_in.html', values=values, errors=errors), 400

    try:
        service.book_walk_in(form.to_payload())
    except ApiError as e:
        _patient_error(e)
        return render_template('admin_doctor_desk/walk_in.html', values=values, errors={}), 400

    toast('Walk-in Booked', f'Appointment booked for {form.name}.')
    return redirect(url_for('admin_doctor_desk.past'))


def init_admin_doctor_desk(app):
    """Initialize doctor desk component with Flask app"""
    app.register_blueprint(admin_doctor_desk_bp)
    return admin_doctor_desk_bp
