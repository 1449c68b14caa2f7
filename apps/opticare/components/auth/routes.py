"""
Auth Component Routes
Login, OTP-gated registration, forgotten password and logout
"""
import logging

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from opticare.config.settings import OptiCareConfig
from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.forms import (EmailForm, LoginForm, OtpForm, RegisterDetailsForm, RegisterOtpForm,
                                 ResetPasswordForm, form_data, validate_form)
from opticare.core.session import clear_login, safe_redirect_target, store_login
from opticare.core.wizard import Wizard, WizardFlow, WizardStep
from opticare.extensions import limiter
from .service import AuthService

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')

# Service instance
service = AuthService()

REGISTER_FLOW = WizardFlow('register', [
    WizardStep('details', RegisterDetailsForm, 'Your details'),
    WizardStep('otp', RegisterOtpForm, 'Verify email'),
])

FORGOT_PASSWORD_FLOW = WizardFlow('forgot_password', [
    WizardStep('email', EmailForm, 'Email'),
    WizardStep('otp', OtpForm, 'Verify code'),
    WizardStep('reset', ResetPasswordForm, 'New password'),
])

TABS = ('login', 'register', 'forgot')


def _otp_limit():
    return current_app.config.get('OTP_RATE_LIMIT', OptiCareConfig.OTP_RATE_LIMIT)


def _login_limit():
    return current_app.config.get('LOGIN_RATE_LIMIT', OptiCareConfig.LOGIN_RATE_LIMIT)


def _render(tab='login', status=200, **context):
    context.setdefault('login_values', {'email': request.args.get('email', '')})
    context.setdefault('errors', {})
    context.setdefault('values', {})
    return render_template(
        'auth/auth.html',
        tab=tab if tab in TABS else 'login',
        register=Wizard(REGISTER_FLOW),
        forgot=Wizard(FORGOT_PASSWORD_FLOW),
        redirect_url=safe_redirect_target(request.values.get('redirectUrl')) or '',
        **context,
    ), status


@auth_bp.route('', methods=['GET'])
def auth_page():
    """Login / register page"""
    return _render(request.args.get('tab', 'login'))


@auth_bp.route('/login', methods=['POST'])
@limiter.limit(_login_limit)
def login():
    values = form_data(request.form)
    form, errors = validate_form(LoginForm, values)
    if errors:
        return _render('login', 400, login_values=values, errors=errors)

    try:
        payload = service.login_user(form.email, form.password) or {}
    except ApiError as e:
        error_toast('Login Failed', e, 'An error occurred. Please try again.')
        return _render('login', 400, login_values={'email': form.email})

    store_login(payload, form.email)
    logger.info(f'User {form.email} logged in')
    toast('Login Successful!', f'Welcome back, {payload.get("username")}!')

    target = safe_redirect_target(request.form.get('redirectUrl'))
    if target:
        return redirect(target)
    if payload.get('role') == OptiCareConfig.ADMIN_ROLE:
        return redirect(url_for('admin_dashboard.dashboard'))
    return redirect(url_for('main.home'))


@auth_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    clear_login()
    toast('Logged out', 'You have been signed out.')
    return redirect(url_for('main.home'))


# --- Registration -------------------------------------------------------------

@auth_bp.route('/register', methods=['POST'])
@limiter.limit(_otp_limit)
def register_details():
    """Validate the details step and send the verification code"""
    wizard = Wizard(REGISTER_FLOW)
    if not wizard.started:
        wizard.start()
    # a details post always restarts from the details step
    wizard.go_to('details')

    values = form_data(request.form)
    ok, errors = wizard.submit(values)
    if not ok:
        return _render('register', 400, values=values, errors=errors)

    email = wizard.data['email']
    try:
        service.send_otp(email)
    except ApiError as e:
        error_toast('Registration Failed', e, 'Could not send OTP. Please try again.')
        return _render('register', 400, values=values)

    wizard.advance()
    toast('OTP Sent!', "We've sent a verification code to your email.")
    return redirect(url_for('auth.auth_page', tab='register'))


@auth_bp.route('/register/verify', methods=['POST'])
@limiter.limit(_otp_limit)
def register_verify():
    """Verify the code and create the account"""
    wizard = Wizard(REGISTER_FLOW)
    if not wizard.started or wizard.step_name != 'otp':
        return redirect(url_for('auth.auth_page', tab='register'))

    form, errors = validate_form(RegisterOtpForm, form_data(request.form))
    if errors:
        return _render('register', 400, errors=errors)

    details = wizard.data
    try:
        service.verify_otp(details['email'], form.otp)
        toast('Email Verified!', 'Finalizing your registration...')
        service.register_user({**details, 'password': form.password})
    except ApiError as e:
        error_toast('An Error Occurred', e, 'Failed to register. Please try again.')
        return _render('register', 400)

    wizard.reset()
    toast('Registration Successful!', 'Your account has been created. Please log in.')
    return redirect(url_for('auth.auth_page', tab='login', email=details['email']))


@auth_bp.route('/register/back', methods=['POST'])
def register_back():
    Wizard(REGISTER_FLOW).back()
    return redirect(url_for('auth.auth_page', tab='register'))


# --- Forgotten password -------------------------------------------------------

@auth_bp.route('/forgot', methods=['POST'])
@limiter.limit(_otp_limit)
def forgot_password():
    wizard = Wizard(FORGOT_PASSWORD_FLOW)
    wizard.start()

    values = form_data(request.form)
    ok, errors = wizard.submit(values)
    if not ok:
        return _render('forgot', 400, values=values, errors=errors)

    try:
        service.forgot_password(wizard.data['email'])
    except ApiError as e:
        error_toast('Error', e, 'Could not send OTP. Please try again.')
        return _render('forgot', 400, values=values)

    wizard.advance()
    toast('OTP Sent!', "If an account exists, we've sent a password reset code to your email.")
    return redirect(url_for('auth.auth_page', tab='forgot'))


@auth_bp.route('/forgot/verify', methods=['POST'])
@limiter.limit(_otp_limit)
def forgot_verify():
    wizard = Wizard(FORGOT_PASSWORD_FLOW)
    if not wizard.started or wizard.step_name != 'otp':
        return redirect(url_for('auth.auth_page', tab='forgot'))

    form, errors = validate_form(OtpForm, form_data(request.form))
    if errors:
        return _render('forgot', 400, errors=errors)

    try:
        service.verify_otp(wizard.data['email'], form.otp)
    except ApiError as e:
        error_toast('OTP Verification Failed', e, 'Invalid or expired OTP. Please try again.')
        return _render('forgot', 400)

    wizard.mark_otp_verified()
    wizard.advance()
    toast('OTP Verified!', 'You can now reset your password.')
    return redirect(url_for('auth.auth_page', tab='forgot'))


@auth_bp.route('/forgot/reset', methods=['POST'])
def forgot_reset():
    wizard = Wizard(FORGOT_PASSWORD_FLOW)
    if not wizard.started or not wizard.otp_verified:
        return redirect(url_for('auth.auth_page', tab='forgot'))

    form, errors = validate_form(ResetPasswordForm, form_data(request.form))
    if errors:
        return _render('forgot', 400, errors=errors)

    email = wizard.data['email']
    try:
        service.reset_password(email, form.newPassword)
    except ApiError as e:
        error_toast('Password Reset Failed', e, 'An error occurred. Please try again.')
        return _render('forgot', 400)

    wizard.reset()
    toast('Password Reset Successful!', 'You can now log in with your new password.')
    return redirect(url_for('auth.auth_page', tab='login', email=email))


@auth_bp.route('/forgot/cancel', methods=['POST'])
def forgot_cancel():
    Wizard(FORGOT_PASSWORD_FLOW).reset()
    return redirect(url_for('auth.auth_page', tab='login'))


def init_auth(app):
    """Initialize auth component with Flask app"""
    app.register_blueprint(auth_bp)
    return auth_bp
