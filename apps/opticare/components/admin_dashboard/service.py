"""
Admin Dashboard Service
"""
import logging

from opticare.core.api_client import ApiError
from opticare.core.listing import percentages, reason_distribution, revenue_series
from opticare.components.admin_callbacks.service import CallbackAdminService
from opticare.components.appointments.service import AppointmentService

logger = logging.getLogger(__name__)


class DashboardService:
    """Service for the admin overview figures"""

    def __init__(self, callbacks=None, appointments=None):
        self.callbacks = callbacks or CallbackAdminService()
        self.appointments = appointments or AppointmentService()

    def get_revenue(self, year):
        """(monthly points, yearly total); empty when the backend has no figures"""
        try:
            data = self.callbacks.get_revenue(year)
        except ApiError as e:
            logger.warning(f'Revenue for {year} unavailable: {e}')
            return [], 0
        return revenue_series(data.get('revenues') if isinstance(data, dict) else [])

    def get_overview(self):
        """Totals, reason distribution and the recent activity lists"""
        overview = {
            'total_appointments': 0,
            'total_callbacks': 0,
            'distribution': [],
            'recent_appointments': [],
            'recent_callbacks': [],
            'failed': False,
        }
        try:
            callback_stats = self.callbacks.get_stats()
            reasons = self.appointments.get_stats()
            recent_appointments = self.appointments.get_recent()
            recent_callbacks = self.callbacks.get_recent()
        except ApiError as e:
            logger.warning(f'Dashboard figures unavailable: {e}')
            overview['failed'] = True
            return overview

        distribution = reason_distribution(reasons)
        overview.update({
            'total_appointments': sum(entry['value'] or 0 for entry in distribution),
            'total_callbacks': (callback_stats or {}).get('total') or 0,
            'distribution': percentages(distribution),
            'recent_appointments': recent_appointments if isinstance(recent_appointments, list) else [],
            'recent_callbacks': recent_callbacks,
        })
        return overview
