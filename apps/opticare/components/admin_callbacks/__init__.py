"""
Callback Administration Component
"""
from .routes import admin_callbacks_bp, init_admin_callbacks
from .service import CallbackAdminService

__all__ = ['admin_callbacks_bp', 'init_admin_callbacks', 'CallbackAdminService']
