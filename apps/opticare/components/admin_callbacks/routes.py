"""
Callback Administration Component Routes
"""
from flask import Blueprint, redirect, render_template, request, session, url_for

from opticare.core.api_client import ApiError
from opticare.core.feedback import error_toast, toast
from opticare.core.listing import (callback_stats_after_complete, callback_stats_after_delete, filter_callbacks,
                                   percentages)
from opticare.core.session import admin_required
from .service import CallbackAdminService

admin_callbacks_bp = Blueprint('admin_callbacks', __name__, url_prefix='/admin/callbacks')

# Service instance
service = CallbackAdminService()

STATUSES = ('all', 'pending', 'completed')

# stats shown on the last render, and the locally adjusted copy after a change
SHOWN_STATS = 'callbacks:stats'
ADJUSTED_STATS = 'callbacks:adjusted_stats'


def _list_args():
    status = request.values.get('status', 'all')
    return {
        'status': status if status in STATUSES else 'all',
        'q': request.values.get('q', ''),
    }


def _stats():
    adjusted = session.pop(ADJUSTED_STATS, None)
    stats = adjusted if adjusted is not None else service.get_stats()
    session[SHOWN_STATS] = stats
    return stats


@admin_callbacks_bp.route('', methods=['GET'])
@admin_required
def callback_list():
    args = _list_args()
    try:
        callbacks = service.get_callbacks()
        stats = _stats()
    except ApiError:
        error_toast('Failed to load data', fallback='Could not fetch callback requests.')
        callbacks, stats = [], {}

    chart = percentages([
        {'name': 'Pending', 'value': stats.get('pending') or 0},
        {'name': 'Completed', 'value': stats.get('completed') or 0},
    ])
    return render_template(
        'admin_callbacks/list.html',
        callbacks=filter_callbacks(callbacks, args['status'], args['q']),
        stats=stats,
        chart=chart,
        status=args['status'],
        q=args['q'],
        statuses=STATUSES,
    )


@admin_callbacks_bp.route('/<callback_id>/complete', methods=['POST'])
@admin_required
def complete(callback_id):
    try:
        service.mark_completed(callback_id)
    except ApiError:
        error_toast('Update Failed', fallback='Could not mark as completed.')
        return redirect(url_for('admin_callbacks.callback_list', **_list_args()))

    if SHOWN_STATS in session:
        session[ADJUSTED_STATS] = callback_stats_after_complete(session[SHOWN_STATS])
    toast('Callback Completed', 'The request has been marked as complete.')
    return redirect(url_for('admin_callbacks.callback_list', **_list_args()))


@admin_callbacks_bp.route('/<callback_id>/delete', methods=['POST'])
@admin_required
def delete(callback_id):
    try:
        service.delete(callback_id)
    except ApiError:
        error_toast('Deletion Failed', fallback='Could not delete the request.')
        return redirect(url_for('admin_callbacks.callback_list', **_list_args()))

    if SHOWN_STATS in session:
        record = {'completed': request.form.get('completed') == 'true'}
        session[ADJUSTED_STATS] = callback_stats_after_delete(session[SHOWN_STATS], record)
    toast('Callback Deleted', 'The request has been removed.')
    return redirect(url_for('admin_callbacks.callback_list', **_list_args()))


def init_admin_callbacks(app):
    """Initialize callback administration component with Flask app"""
    app.register_blueprint(admin_callbacks_bp)
    return admin_callbacks_bp
