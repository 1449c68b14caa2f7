"""
User Administration Component
"""
from .routes import admin_users_bp, init_admin_users
from .service import UserAdminService, filter_users

__all__ = ['admin_users_bp', 'init_admin_users', 'UserAdminService', 'filter_users']
