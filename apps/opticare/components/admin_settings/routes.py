"""
Admin Settings Component Routes
"""
from flask import Blueprint, redirect, render_template, request, url_for

from opticare.core.feedback import toast
from opticare.core.session import admin_required, current_user
from .service import LOG_LEVELS, SettingsService

admin_settings_bp = Blueprint('admin_settings', __name__, url_prefix='/admin/settings')

# Service instance
service = SettingsService()


@admin_settings_bp.route('', methods=['GET'])
@admin_required
def settings_page():
    level = request.args.get('level', 'ALL').upper()
    try:
        limit = max(1, min(int(request.args.get('limit', 50)), 500))
    except ValueError:
        limit = 50
    return render_template(
        'admin_settings/settings.html',
        admin=current_user() or {},
        status=service.get_status(),
        logs=service.get_logs(level, limit),
        level=level,
        levels=LOG_LEVELS,
    )


@admin_settings_bp.route('/check', methods=['POST'])
@admin_required
def check_backend():
    status = service.check_now()
    variant = 'success' if status in ('healthy', 'disabled') else 'destructive'
    toast('Backend Checked', f'Backend status: {status}.', variant)
    return redirect(url_for('admin_settings.settings_page'))


def init_admin_settings(app):
    """Initialize admin settings component with Flask app"""
    app.register_blueprint(admin_settings_bp)
    return admin_settings_bp
