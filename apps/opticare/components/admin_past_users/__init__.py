"""
Past Users Component
"""
from .routes import EYE_TEST_FLOW, NEW_WITH_TEST_FLOW, admin_past_users_bp, init_admin_past_users
from .service import PastUserService

__all__ = ['admin_past_users_bp', 'init_admin_past_users', 'PastUserService', 'EYE_TEST_FLOW',
           'NEW_WITH_TEST_FLOW']
