"""
User Administration Component Routes
"""
from flask import Blueprint, redirect, render_template, request, url_for

from opticare.config.settings import OptiCareConfig
from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.session import admin_required
from .service import UserAdminService, filter_users

admin_users_bp = Blueprint('admin_users', __name__, url_prefix='/admin/users')

# Service instance
service = UserAdminService()


def _list_args():
    return {
        'role': request.values.get('role', 'ALL').upper(),
        'q': request.values.get('q', ''),
    }


@admin_users_bp.route('', methods=['GET'])
@admin_required
def user_list():
    args = _list_args()
    try:
        users = service.get_all_users()
    except ApiError:
        error_toast('Failed to load users', fallback='Could not fetch user data. Please try again.')
        users = []

    return render_template(
        'admin_users/list.html',
        users=filter_users(users, args['role'], args['q']),
        role=args['role'],
        q=args['q'],
        roles=['ALL'] + OptiCareConfig.USER_ROLES,
    )


@admin_users_bp.route('/<user_id>', methods=['GET'])
@admin_required
def user_details(user_id):
    try:
        details = service.get_user_details(user_id)
    except ApiError:
        error_toast('Failed to load details', fallback='Could not fetch user details. Please try again.')
        return redirect(url_for('admin_users.user_list'))
    return render_template('admin_users/details.html', details=details)


@admin_users_bp.route('/<user_id>/role', methods=['POST'])
@admin_required
def change_role(user_id):
    role = request.form.get('role', '').upper()
    if role not in OptiCareConfig.USER_ROLES:
        error_toast('Update Failed', fallback=f'Unknown role: {role or "none"}.')
        return redirect(url_for('admin_users.user_list', **_list_args()))

    try:
        service.update_user_role(user_id, role)
        toast('Role Updated', f'User role has been successfully changed to {role}.')
    except ApiError:
        error_toast('Update Failed', fallback='Could not update user role. Please try again.')
    return redirect(url_for('admin_users.user_list', **_list_args()))


@admin_users_bp.route('/<user_id>/delete', methods=['POST'])
@admin_required
def delete(user_id):
    try:
        service.delete_user(user_id)
        toast('User Deleted', 'The user and all associated data have been successfully deleted.')
    except ApiError:
        error_toast('Deletion Failed', fallback='Could not delete the user. Please try again.')
    return redirect(url_for('admin_users.user_list', **_list_args()))


def init_admin_users(app):
    """Initialize user administration component with Flask app"""
    app.register_blueprint(admin_users_bp)
    return admin_users_bp
