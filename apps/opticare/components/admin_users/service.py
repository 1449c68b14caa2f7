"""
User Administration Service
"""
import logging

from opticare.core.api_client import ApiClient
from opticare.core.listing import filter_records

logger = logging.getLogger(__name__)


class UserAdminService:
    """Service for managing user accounts"""

    def __init__(self, client=None):
        self.client = client or ApiClient('/api/admin/users')

    def get_all_users(self):
        return self.client.get('/') or []

    def get_user_details(self, user_id):
        """User with cart, appointments and reviews"""
        details = self.client.get(f'/{user_id}/details') or {}
        return {
            'user': details.get('user') or {},
            'cart': details.get('cart') or {},
            'appointments': details.get('appointments') or [],
            'reviews': details.get('reviews') or [],
        }

    def update_user_role(self, user_id, role):
        result = self.client.put(f'/{user_id}/role', json={'role': role})
        logger.info(f'User {user_id} role changed to {role}')
        return result

    def delete_user(self, user_id):
        result = self.client.delete(f'/{user_id}')
        logger.info(f'User {user_id} deleted')
        return result

    def get_registered_users(self):
        return self.client.get('/registered') or []

    def search_registered_users(self, keyword):
        return self.client.get('/registered/search', params={'keyword': keyword}) or []

    def get_past_users(self):
        return self.client.get('/past') or []


def filter_users(users, role='ALL', term=''):
    """Role filter plus name/email search"""
    if role and role.upper() != 'ALL':
        users = [user for user in users or [] if (user.get('role') or '').upper() == role.upper()]
    return filter_records(users, term, ('name', 'email'))
