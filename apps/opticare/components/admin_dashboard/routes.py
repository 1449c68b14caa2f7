"""
Admin Dashboard Component Routes
"""
from datetime import date

from flask import Blueprint, render_template, request

from opticare.config.settings import OptiCareConfig
from opticare.core.feedback import error_toast
from opticare.core.listing import year_options
from opticare.core.session import admin_required
from opticare.components.appointments.service import describe_problems
from .service import DashboardService

admin_dashboard_bp = Blueprint('admin_dashboard', __name__, url_prefix='/admin')

# Service instance
service = DashboardService()


@admin_dashboard_bp.route('/dashboard', methods=['GET'])
@admin_required
def dashboard():
    years = year_options(span=OptiCareConfig.CALENDAR_YEAR_SPAN)
    year = request.args.get('year', type=int)
    if year not in years:
        year = date.today().year

    revenue, total_revenue = service.get_revenue(year)
    overview = service.get_overview()
    if overview['failed']:
        error_toast('Failed to load dashboard', fallback='Some figures could not be fetched.')

    peak = max((point['revenue'] or 0 for point in revenue), default=0)
    return render_template(
        'admin_dashboard/dashboard.html',
        year=year,
        years=years,
        revenue=revenue,
        revenue_peak=peak,
        total_revenue=total_revenue,
        describe_problems=describe_problems,
        **overview,
    )


def init_admin_dashboard(app):
    """Initialize admin dashboard component with Flask app"""
    app.register_blueprint(admin_dashboard_bp)
    return admin_dashboard_bp
