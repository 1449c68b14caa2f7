"""
Callback Administration Service
"""
import logging

from opticare.core.api_client import ApiClient

logger = logging.getLogger(__name__)


class CallbackAdminService:
    """Service for the callback queue and the revenue figures"""

    def __init__(self, client=None):
        self.client = client or ApiClient('/api/admin/callbacks')

    def get_callbacks(self):
        return self.client.get('/') or []

    def get_stats(self):
        """{total, pending, completed}"""
        return self.client.get('/stats') or {}

    def get_recent(self):
        recent = self.client.get('/recent')
        return recent if isinstance(recent, list) else []

    def get_revenue(self, year):
        """{revenues: [{month: 'YYYY-Month', totalRevenue}]}"""
        return self.client.get('/revenue', params={'year': year}) or {}

    def mark_completed(self, callback_id):
        result = self.client.patch(f'/{callback_id}/complete')
        logger.info(f'Callback {callback_id} marked completed')
        return result

    def delete(self, callback_id):
        result = self.client.delete(f'/{callback_id}')
        logger.info(f'Callback {callback_id} deleted')
        return result
