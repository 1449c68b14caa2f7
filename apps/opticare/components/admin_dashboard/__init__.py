"""
Admin Dashboard Component
"""
from .routes import admin_dashboard_bp, init_admin_dashboard
from .service import DashboardService

__all__ = ['admin_dashboard_bp', 'init_admin_dashboard', 'DashboardService']
