"""
Admin Settings Component
"""
from .routes import admin_settings_bp, init_admin_settings
from .service import SettingsService

__all__ = ['admin_settings_bp', 'init_admin_settings', 'SettingsService']
