"""
Profile Component Routes
Customer dashboard and the OTP-gated password change
"""
from datetime import date

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from opticare.config.settings import OptiCareConfig
from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.forms import OtpForm, UpdatePasswordForm, form_data, validate_form
from opticare.core.measurements import EYE_FIELD_LABELS
from opticare.core.session import current_user, login_required
from opticare.core.wizard import Wizard, WizardFlow, WizardStep
from opticare.extensions import limiter
from opticare.components.appointments.service import describe_problems
from opticare.components.auth.service import AuthService
from .service import ProfileService

profile_bp = Blueprint('profile', __name__, url_prefix='/profile')

# Service instances
service = ProfileService()
auth = AuthService()

UPDATE_PASSWORD_FLOW = WizardFlow('update_password', [
    WizardStep('initial', None, 'Start'),
    WizardStep('otp', OtpForm, 'Verify'),
    WizardStep('password', UpdatePasswordForm, 'New password'),
])


def _otp_limit():
    return current_app.config.get('OTP_RATE_LIMIT', OptiCareConfig.OTP_RATE_LIMIT)


def _date_arg(name):
    value = request.args.get(name, '')
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        return None


def _render(status=200, password_errors=None):
    start_date = _date_arg('startDate')
    end_date = _date_arg('endDate')
    if (start_date or end_date) and not (start_date and end_date):
        toast('Incomplete date range', 'Choose both a start and an end date.', 'destructive')
        start_date = end_date = None

    dashboard = service.get_dashboard(start_date, end_date)
    if dashboard['failures']:
        error_toast('Some data could not be loaded', fallback='Please refresh the page to try again.')

    return render_template(
        'profile/profile.html',
        user=current_user(),
        start_date=start_date or '',
        end_date=end_date or '',
        password=Wizard(UPDATE_PASSWORD_FLOW),
        password_errors=password_errors or {},
        eye_labels=EYE_FIELD_LABELS,
        describe_problems=describe_problems,
        **dashboard,
    ), status


@profile_bp.route('', methods=['GET'])
@login_required
def profile_page():
    return _render()


@profile_bp.route('/password/send-otp', methods=['POST'])
@login_required
@limiter.limit(_otp_limit)
def password_send_otp():
    email = current_user()['email']
    if not email:
        error_toast('Error', fallback='Could not find user email.')
        return redirect(url_for('profile.profile_page'))

    try:
        auth.send_otp(email)
    except ApiError:
        error_toast('Failed to Send OTP', fallback='Could not send OTP. Please try again.')
        return redirect(url_for('profile.profile_page'))

    wizard = Wizard(UPDATE_PASSWORD_FLOW)
    wizard.start(context={'email': email}, step='otp')
    toast('OTP Sent', 'A verification code has been sent to your email.')
    return redirect(url_for('profile.profile_page'))


@profile_bp.route('/password/verify', methods=['POST'])
@login_required
@limiter.limit(_otp_limit)
def password_verify():
    wizard = Wizard(UPDATE_PASSWORD_FLOW)
    if wizard.step_name != 'otp':
        return redirect(url_for('profile.profile_page'))

    ok, errors = wizard.submit(form_data(request.form))
    if not ok:
        return _render(400, errors)

    try:
        auth.verify_otp(wizard.context['email'], wizard.data['otp'])
    except ApiError as e:
        error_toast('Verification Failed', e, 'Invalid or expired OTP.')
        return _render(400)

    wizard.advance()
    toast('OTP Verified', 'You can now update your password.')
    return redirect(url_for('profile.profile_page'))


@profile_bp.route('/password', methods=['POST'])
@login_required
def password_update():
    wizard = Wizard(UPDATE_PASSWORD_FLOW)
    if wizard.step_name != 'password':
        return redirect(url_for('profile.profile_page'))

    # validated directly so passwords never reach the session cookie
    form, errors = validate_form(UpdatePasswordForm, form_data(request.form))
    if errors:
        return _render(400, errors)

    try:
        auth.update_password(wizard.context['email'], form.currentPassword, form.newPassword)
    except ApiError as e:
        error_toast('Update Failed', e, 'An error occurred.')
        return _render(400)

    wizard.reset()
    toast('Password Updated!', 'Your password has been changed successfully.')
    return redirect(url_for('profile.profile_page'))


@profile_bp.route('/password/cancel', methods=['POST'])
@login_required
def password_cancel():
    Wizard(UPDATE_PASSWORD_FLOW).reset()
    return redirect(url_for('profile.profile_page'))


def init_profile(app):
    """Initialize profile component with Flask app"""
    app.register_blueprint(profile_bp)
    return profile_bp
