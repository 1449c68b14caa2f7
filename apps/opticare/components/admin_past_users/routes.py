"""
Past Users Component Routes
"""
import logging

from flask import Blueprint, redirect, render_template, request, url_for

from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.forms import (DatedDetailsStep, DistanceNearStep, IntermediateStep, MeasurementsStep,
                                 PastPersonalStep, PastUserRecordForm, form_data, validate_form)
from opticare.core.measurements import (EYE_FIELD_LABELS, EYE_FIELDS, blank_eye_test, build_eye_test_payload,
                                        eye_test_id, merge_form_values, prefill_from_test)
from opticare.core.session import admin_required
from opticare.core.wizard import Wizard, WizardFlow, WizardStep
from .service import PastUserService, record_payload

logger = logging.getLogger(__name__)

admin_past_users_bp = Blueprint('admin_past_users', __name__, url_prefix='/admin/past-users')

# Service instance
service = PastUserService()

DATE_FIELDS = ('testDate', 'bookingDate', 'deliveryDate')

NEW_WITH_TEST_FLOW = WizardFlow('past_user_with_test', [
    WizardStep('personal', PastPersonalStep, 'Personal Info'),
    WizardStep('measurements', MeasurementsStep, 'Vision Measurements'),
    WizardStep('details', DatedDetailsStep, 'Additional Details'),
])

EYE_TEST_FLOW = WizardFlow('past_user_eye_test', [
    WizardStep('measurements', DistanceNearStep, 'Distance & Near Vision'),
    WizardStep('more_measurements', IntermediateStep, 'Intermediate Vision'),
    WizardStep('details', DatedDetailsStep, 'Details & Dates'),
])

NEW_WITH_TEST_GROUPS = {'measurements': EYE_FIELDS}
EYE_TEST_GROUPS = {
    'measurements': ['dvRightEye', 'dvLeftEye', 'nvRightEye', 'nvLeftEye'],
    'more_measurements': ['imRightEye', 'imLeftEye'],
}

EMPTY_RECORD = {'name': '', 'phone': '', 'email': '', 'address': '', 'age': ''}


def _render_wizard(wizard, heading, action_url, cancel_url, groups, submitted=None, errors=None, status=200):
    values = merge_form_values(blank_eye_test(), wizard.data, submitted)
    return render_template(
        'admin_eye_tests/wizard.html',
        wizard=wizard,
        heading=heading,
        values=values,
        errors=errors or {},
        action_url=action_url,
        cancel_url=cancel_url,
        measurement_groups=groups,
        eye_labels=EYE_FIELD_LABELS,
        with_test_date=True,
    ), status


def _render_list(q='', values=None, errors=None, status=200):
    try:
        users = service.search(q)
    except ApiError:
        error_toast('Error', fallback='Could not retrieve user records.')
        users = []
    return render_template(
        'admin_past_users/list.html',
        users=users,
        q=q,
        values=values or dict(EMPTY_RECORD),
        errors=errors or {},
        show_form=bool(errors) or request.args.get('new') == '1',
    ), status


@admin_past_users_bp.route('', methods=['GET'])
@admin_required
def user_list():
    return _render_list(request.args.get('q', ''))


@admin_past_users_bp.route('', methods=['POST'])
@admin_required
def create():
    values = form_data(request.form)
    form, errors = validate_form(PastUserRecordForm, values)
    if errors:
        return _render_list(values=values, errors=errors, status=400)

    try:
        record = service.create(record_payload(form)) or {}
    except ApiError as e:
        error_toast('Submission Failed', e, 'An unexpected error occurred.')
        return _render_list(values=values, status=400)

    toast('User Created', f'Record for {record.get("name", form.name)} has been created.')
    if record.get('publicId'):
        return redirect(url_for('admin_past_users.record', public_id=record['publicId']))
    return redirect(url_for('admin_past_users.user_list'))


# Record together with its first eye test

def _new_with_test_urls():
    return url_for('admin_past_users.new_with_test'), url_for('admin_past_users.cancel_new_with_test')


@admin_past_users_bp.route('/new-with-test', methods=['GET', 'POST'])
@admin_required
def new_with_test():
    wizard = Wizard(NEW_WITH_TEST_FLOW)
    if not wizard.started:
        wizard.start()
    heading = 'New Past User with Eye Test'
    action_url, cancel_url = _new_with_test_urls()

    if request.method == 'GET':
        return _render_wizard(wizard, heading, action_url, cancel_url, NEW_WITH_TEST_GROUPS)

    if request.form.get('action') == 'back':
        wizard.back()
        return redirect(action_url)

    submitted = form_data(request.form)
    ok, errors = wizard.submit(submitted)
    if not ok:
        return _render_wizard(wizard, heading, action_url, cancel_url, NEW_WITH_TEST_GROUPS, submitted, errors, 400)

    if not wizard.is_last:
        wizard.advance()
        return redirect(action_url)

    payload = build_eye_test_payload(wizard.data, date_fields=DATE_FIELDS)
    try:
        record = service.create(payload) or {}
    except ApiError as e:
        error_toast('Submission Failed', e, 'An unexpected error occurred.')
        return _render_wizard(wizard, heading, action_url, cancel_url, NEW_WITH_TEST_GROUPS, submitted, status=400)

    wizard.reset()
    toast('User Record Created', "The past user's record and eye test have been saved.")
    if record.get('publicId'):
        return redirect(url_for('admin_past_users.record', public_id=record['publicId']))
    return redirect(url_for('admin_past_users.user_list'))


@admin_past_users_bp.route('/new-with-test/cancel', methods=['POST'])
@admin_required
def cancel_new_with_test():
    Wizard(NEW_WITH_TEST_FLOW).reset()
    return redirect(url_for('admin_past_users.user_list'))


# Single record

def _render_record(public_id, values=None, errors=None, status=200):
    try:
        user = service.get(public_id)
        tests = service.get_eye_tests(public_id)
    except ApiError:
        error_toast('Error fetching data', fallback='Could not retrieve user or test data.')
        return redirect(url_for('admin_past_users.user_list'))

    if values is None:
        values = merge_form_values(EMPTY_RECORD, {key: (user or {}).get(key) for key in EMPTY_RECORD})
    return render_template(
        'admin_past_users/record.html',
        user=user or {},
        public_id=public_id,
        tests=tests,
        values=values,
        errors=errors or {},
        editing=bool(errors) or request.args.get('edit') == '1',
        eye_labels=EYE_FIELD_LABELS,
        test_id_of=eye_test_id,
    ), status


@admin_past_users_bp.route('/<public_id>', methods=['GET'])
@admin_required
def record(public_id):
    return _render_record(public_id)


@admin_past_users_bp.route('/<public_id>', methods=['POST'])
@admin_required
def update(public_id):
    values = form_data(request.form)
    form, errors = validate_form(PastUserRecordForm, values)
    if errors:
        return _render_record(public_id, values, errors, 400)

    try:
        service.update(public_id, record_payload(form))
    except ApiError as e:
        error_toast('Submission Failed', e, 'An unexpected error occurred.')
        return _render_record(public_id, values, status=400)

    toast('User Updated', "The user's record has been saved.")
    return redirect(url_for('admin_past_users.record', public_id=public_id))


@admin_past_users_bp.route('/<public_id>/delete', methods=['POST'])
@admin_required
def delete(public_id):
    try:
        service.delete(public_id)
    except ApiError as e:
        error_toast('Deletion Failed', e, 'Could not delete user.')
        return redirect(url_for('admin_past_users.record', public_id=public_id))

    toast('User Deleted', 'The user record has been removed.')
    return redirect(url_for('admin_past_users.user_list'))


# Eye tests of a record

@admin_past_users_bp.route('/<public_id>/tests/new', methods=['POST'])
@admin_required
def new_test(public_id):
    Wizard(EYE_TEST_FLOW).start(context={'mode': 'create', 'public_id': public_id})
    return redirect(url_for('admin_past_users.test_form', public_id=public_id))


@admin_past_users_bp.route('/<public_id>/tests/<test_id>/edit', methods=['POST'])
@admin_required
def edit_test(public_id, test_id):
    try:
        tests = service.get_eye_tests(public_id)
    except ApiError:
        error_toast('Error fetching data', fallback='Could not retrieve user or test data.')
        return redirect(url_for('admin_past_users.record', public_id=public_id))

    test = next((record for record in tests if str(eye_test_id(record)) == str(test_id)), None)
    if test is None:
        error_toast('Test Not Found', fallback='The selected eye test no longer exists.')
        return redirect(url_for('admin_past_users.record', public_id=public_id))

    Wizard(EYE_TEST_FLOW).start(
        data=prefill_from_test(test, include_personal=False),
        context={'mode': 'edit', 'public_id': public_id, 'test_id': test_id},
    )
    return redirect(url_for('admin_past_users.test_form', public_id=public_id))


@admin_past_users_bp.route('/<public_id>/tests/form', methods=['GET', 'POST'])
@admin_required
def test_form(public_id):
    wizard = Wizard(EYE_TEST_FLOW)
    if not wizard.started or wizard.context.get('public_id') != public_id:
        return redirect(url_for('admin_past_users.record', public_id=public_id))

    editing = wizard.context.get('mode') == 'edit'
    heading = 'Edit Eye Test' if editing else 'Add New Eye Test'
    action_url = url_for('admin_past_users.test_form', public_id=public_id)
    cancel_url = url_for('admin_past_users.cancel_test_form', public_id=public_id)

    if request.method == 'GET':
        return _render_wizard(wizard, heading, action_url, cancel_url, EYE_TEST_GROUPS)

    if request.form.get('action') == 'back':
        wizard.back()
        return redirect(action_url)

    submitted = form_data(request.form)
    ok, errors = wizard.submit(submitted)
    if not ok:
        return _render_wizard(wizard, heading, action_url, cancel_url, EYE_TEST_GROUPS, submitted, errors, 400)

    if not wizard.is_last:
        wizard.advance()
        return redirect(action_url)

    payload = build_eye_test_payload(wizard.data, date_fields=DATE_FIELDS, personal=False)
    try:
        if editing:
            service.update_eye_test(wizard.context['test_id'], payload)
            toast('Test Updated', 'The eye test has been saved.')
        else:
            service.add_eye_test(public_id, payload)
            toast('Test Added', 'The new eye test has been saved.')
    except ApiError as e:
        error_toast('Submission Failed', e, 'An error occurred.')
        return _render_wizard(wizard, heading, action_url, cancel_url, EYE_TEST_GROUPS, submitted, status=400)

    wizard.reset()
    return redirect(url_for('admin_past_users.record', public_id=public_id))


@admin_past_users_bp.route('/<public_id>/tests/form/cancel', methods=['POST'])
@admin_required
def cancel_test_form(public_id):
    Wizard(EYE_TEST_FLOW).reset()
    return redirect(url_for('admin_past_users.record', public_id=public_id))


@admin_past_users_bp.route('/<public_id>/tests/<test_id>/delete', methods=['POST'])
@admin_required
def delete_test(public_id, test_id):
    try:
        service.delete_eye_test(test_id)
        toast('Test Deleted', 'The eye test record has been removed.')
    except ApiError:
        error_toast('Deletion Failed', fallback='Could not delete the test record.')
    return redirect(url_for('admin_past_users.record', public_id=public_id))


def init_admin_past_users(app):
    """Initialize past users component with Flask app"""
    app.register_blueprint(admin_past_users_bp)
    return admin_past_users_bp
