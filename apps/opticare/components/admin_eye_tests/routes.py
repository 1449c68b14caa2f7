"""
Eye Test Administration Component Routes
Registered users' test records and the external user registration wizard
"""
import logging

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from opticare.config.settings import OptiCareConfig
from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.forms import DetailsStep, MeasurementsStep, OtpForm, PersonalStep, form_data
from opticare.core.measurements import (EYE_FIELD_LABELS, EYE_FIELDS, blank_eye_test, build_eye_test_payload,
                                        eye_test_id, merge_form_values, prefill_from_test)
from opticare.core.session import admin_required, forget_selection, get_selection, remember_selection
from opticare.core.wizard import Wizard, WizardFlow, WizardStep, otp_pending
from opticare.extensions import limiter
from opticare.components.admin_users.service import UserAdminService
from .service import EyeTestService, search_users

logger = logging.getLogger(__name__)

admin_eye_tests_bp = Blueprint('admin_eye_tests', __name__, url_prefix='/admin/eyetest')

# Service instances
service = EyeTestService()
users = UserAdminService()

SELECTED_USER = 'selectedUserForEyeTest'


def eye_test_flow(name):
    return WizardFlow(name, [
        WizardStep('personal', PersonalStep, 'Personal Info'),
        WizardStep('otp', OtpForm, 'Email Verification', skip_if=otp_pending),
        WizardStep('measurements', MeasurementsStep, 'Vision Measurements'),
        WizardStep('details', DetailsStep, 'Additional Details'),
    ])


EXTERNAL_FLOW = eye_test_flow('external_eye_test')
USER_TEST_FLOW = eye_test_flow('user_eye_test')

MEASUREMENT_GROUPS = {'measurements': EYE_FIELDS}


def _otp_limit():
    return current_app.config.get('OTP_RATE_LIMIT', OptiCareConfig.OTP_RATE_LIMIT)


def _sends_otp():
    """Only the personal and OTP steps of the external wizard reach the mail server"""
    if request.form.get('action') == 'back':
        return False
    return Wizard(EXTERNAL_FLOW).step_name in ('personal', 'otp')


def _render_wizard(wizard, heading, action_url, cancel_url, submitted=None, errors=None, status=200):
    values = merge_form_values(blank_eye_test(), wizard.data, submitted)
    return render_template(
        'admin_eye_tests/wizard.html',
        wizard=wizard,
        heading=heading,
        values=values,
        errors=errors or {},
        action_url=action_url,
        cancel_url=cancel_url,
        measurement_groups=MEASUREMENT_GROUPS,
        eye_labels=EYE_FIELD_LABELS,
        with_test_date=False,
    ), status


@admin_eye_tests_bp.route('', methods=['GET'])
@admin_required
def landing():
    return render_template('admin_eye_tests/landing.html')


# Registered users

@admin_eye_tests_bp.route('/registered', methods=['GET'])
@admin_required
def registered():
    q = request.args.get('q', '')
    try:
        records = users.get_all_users()
    except ApiError:
        error_toast('Error fetching users', fallback='Could not retrieve the list of users.')
        records = []
    return render_template('admin_eye_tests/registered.html', users=search_users(records, q), q=q)


@admin_eye_tests_bp.route('/registered/<user_id>/select', methods=['POST'])
@admin_required
def select_user(user_id):
    try:
        records = users.get_all_users()
    except ApiError:
        error_toast('Error fetching users', fallback='Could not retrieve the list of users.')
        return redirect(url_for('admin_eye_tests.registered'))

    user = next((record for record in records if str(record.get('id')) == str(user_id)), None)
    if user is None:
        error_toast('User Not Found', fallback='The selected user no longer exists.')
        return redirect(url_for('admin_eye_tests.registered'))

    remember_selection(SELECTED_USER, user)
    Wizard(USER_TEST_FLOW).reset()
    return redirect(url_for('admin_eye_tests.details'))


def _selected_user():
    user = get_selection(SELECTED_USER)
    if user is None:
        toast('No User Selected', 'Please select a user first.', 'destructive')
    return user


@admin_eye_tests_bp.route('/details', methods=['GET'])
@admin_required
def details():
    user = _selected_user()
    if user is None:
        return redirect(url_for('admin_eye_tests.registered'))

    try:
        tests = service.get_tests_for_user(user['email'])
    except ApiError:
        error_toast('Error fetching data', fallback='Could not retrieve test data.')
        tests = []
    return render_template('admin_eye_tests/details.html', user=user, tests=tests, eye_labels=EYE_FIELD_LABELS)


def _user_prefill(user):
    return {field: user.get(field) for field in ('name', 'email', 'phone', 'age', 'address')}


@admin_eye_tests_bp.route('/details/tests/new', methods=['POST'])
@admin_required
def new_test():
    user = _selected_user()
    if user is None:
        return redirect(url_for('admin_eye_tests.registered'))

    Wizard(USER_TEST_FLOW).start(
        data=_user_prefill(user),
        context={'mode': 'create', 'email': user['email']},
        otp_verified=True,
    )
    return redirect(url_for('admin_eye_tests.test_form'))


@admin_eye_tests_bp.route('/details/tests/<test_id>/edit', methods=['POST'])
@admin_required
def edit_test(test_id):
    user = _selected_user()
    if user is None:
        return redirect(url_for('admin_eye_tests.registered'))

    try:
        tests = service.get_tests_for_user(user['email'])
    except ApiError:
        error_toast('Error fetching data', fallback='Could not retrieve test data.')
        return redirect(url_for('admin_eye_tests.details'))

    test = next((record for record in tests if str(eye_test_id(record)) == str(test_id)), None)
    if test is None:
        error_toast('Test Not Found', fallback='The selected eye test no longer exists.')
        return redirect(url_for('admin_eye_tests.details'))

    data = merge_form_values(_user_prefill(user), prefill_from_test(test))
    Wizard(USER_TEST_FLOW).start(
        data=data,
        context={'mode': 'edit', 'email': test.get('email') or user['email'], 'test_id': test_id,
                 'test_date': test.get('testDate')},
        otp_verified=True,
    )
    return redirect(url_for('admin_eye_tests.test_form'))


def _user_test_heading(wizard, user):
    if wizard.context.get('mode') == 'edit':
        return 'Edit Eye Test'
    return f'Create New Eye Test for {user.get("name") or user["email"]}'


@admin_eye_tests_bp.route('/details/tests/form', methods=['GET', 'POST'])
@admin_required
def test_form():
    user = _selected_user()
    wizard = Wizard(USER_TEST_FLOW)
    if user is None or not wizard.started:
        return redirect(url_for('admin_eye_tests.registered' if user is None else 'admin_eye_tests.details'))

    heading = _user_test_heading(wizard, user)
    action_url = url_for('admin_eye_tests.test_form')
    cancel_url = url_for('admin_eye_tests.cancel_test_form')

    if request.method == 'GET':
        return _render_wizard(wizard, heading, action_url, cancel_url)

    if request.form.get('action') == 'back':
        wizard.back()
        return redirect(action_url)

    submitted = form_data(request.form)
    ok, errors = wizard.submit(submitted)
    if not ok:
        return _render_wizard(wizard, heading, action_url, cancel_url, submitted, errors, 400)

    if not wizard.is_last:
        wizard.advance()
        return redirect(action_url)

    context = wizard.context
    payload = build_eye_test_payload(wizard.data, blank_as_zero=True)
    try:
        if context.get('mode') == 'edit':
            service.update_test_for_user(context['email'], context['test_id'], payload)
            toast('Test Updated', 'The eye test record has been successfully updated.')
        else:
            service.create_test_for_user(context['email'], payload)
            toast('Test Created', f'New eye test added for {context["email"]}.')
    except ApiError as e:
        error_toast('Submission Failed', e, 'An unexpected error occurred.')
        return _render_wizard(wizard, heading, action_url, cancel_url, submitted, status=400)

    wizard.reset()
    return redirect(url_for('admin_eye_tests.details'))


@admin_eye_tests_bp.route('/details/tests/form/cancel', methods=['POST'])
@admin_required
def cancel_test_form():
    Wizard(USER_TEST_FLOW).reset()
    return redirect(url_for('admin_eye_tests.details'))


@admin_eye_tests_bp.route('/details/tests/<test_id>/delete', methods=['POST'])
@admin_required
def delete_test(test_id):
    user = _selected_user()
    if user is None:
        return redirect(url_for('admin_eye_tests.registered'))

    try:
        service.delete_test_for_user(user['email'], test_id)
        toast('Test Deleted', 'The eye test record has been removed.')
    except ApiError:
        error_toast('Deletion Failed')
    return redirect(url_for('admin_eye_tests.details'))


@admin_eye_tests_bp.route('/details/clear', methods=['POST'])
@admin_required
def clear_selection():
    forget_selection(SELECTED_USER)
    Wizard(USER_TEST_FLOW).reset()
    return redirect(url_for('admin_eye_tests.registered'))


# External users

@admin_eye_tests_bp.route('/external', methods=['GET'])
@admin_required
def external():
    wizard = Wizard(EXTERNAL_FLOW)
    if not wizard.started:
        wizard.start()
    return _render_wizard(wizard, 'Create External User Test Record',
                          url_for('admin_eye_tests.external_step'), url_for('admin_eye_tests.cancel_external'))


@admin_eye_tests_bp.route('/external', methods=['POST'])
@admin_required
@limiter.limit(_otp_limit, exempt_when=lambda: not _sends_otp())
def external_step():
    wizard = Wizard(EXTERNAL_FLOW)
    if not wizard.started:
        wizard.start()
    action_url = url_for('admin_eye_tests.external_step')
    cancel_url = url_for('admin_eye_tests.cancel_external')
    heading = 'Create External User Test Record'

    if request.form.get('action') == 'back':
        wizard.back()
        return redirect(url_for('admin_eye_tests.external'))

    if request.form.get('action') == 'resend':
        return _resend_external_otp(wizard)

    submitted = form_data(request.form)
    step = wizard.step_name
    verified_email = wizard.data.get('email') if wizard.otp_verified else None
    ok, errors = wizard.submit(submitted)
    if not ok:
        return _render_wizard(wizard, heading, action_url, cancel_url, submitted, errors, 400)

    email = wizard.data.get('email')
    if verified_email is not None and email != verified_email:
        logger.info(f'External test email changed from {verified_email}, verification required again')
        wizard.clear_otp_verified()

    if step == 'personal' and not wizard.otp_verified:
        try:
            service.send_external_otp(email)
        except ApiError as e:
            error_toast('Failed to send OTP', e, 'Please try again.')
            return _render_wizard(wizard, heading, action_url, cancel_url, submitted, status=400)
        toast('OTP Sent', 'A verification code has been sent to the email address.')
        wizard.advance()
        return redirect(url_for('admin_eye_tests.external'))

    if step == 'otp':
        try:
            service.verify_external_otp(email, wizard.data.get('otp'))
        except ApiError as e:
            error_toast('Verification Failed', e, 'Invalid or expired OTP.')
            return _render_wizard(wizard, heading, action_url, cancel_url, status=400)
        wizard.mark_otp_verified()
        wizard.go_to('measurements')
        toast('OTP Verified', 'Email has been successfully verified.')
        return redirect(url_for('admin_eye_tests.external'))

    if not wizard.is_last:
        wizard.advance()
        return redirect(url_for('admin_eye_tests.external'))

    if not wizard.otp_verified:
        error_toast('Email Not Verified', fallback='Verify the email address before submitting.')
        wizard.go_to('otp')
        return redirect(url_for('admin_eye_tests.external'))

    payload = build_eye_test_payload(wizard.data, blank_as_zero=True)
    try:
        service.register_and_test_external(payload)
    except ApiError as e:
        error_toast('Submission Failed', e, 'An unexpected error occurred.')
        return _render_wizard(wizard, heading, action_url, cancel_url, submitted, status=400)

    wizard.reset()
    toast('Registration & Test Submitted', "Thank you! We've received your information.")
    return redirect(url_for('admin_eye_tests.landing'))


def _resend_external_otp(wizard):
    try:
        service.send_external_otp(wizard.data.get('email'))
        toast('OTP Sent', 'A verification code has been sent to the email address.')
    except ApiError as e:
        error_toast('Failed to send OTP', e, 'Please try again.')
    return redirect(url_for('admin_eye_tests.external'))


@admin_eye_tests_bp.route('/external/cancel', methods=['POST'])
@admin_required
def cancel_external():
    Wizard(EXTERNAL_FLOW).reset()
    return redirect(url_for('admin_eye_tests.landing'))


def init_admin_eye_tests(app):
    """Initialize eye test administration component with Flask app"""
    app.register_blueprint(admin_eye_tests_bp)
    return admin_eye_tests_bp
