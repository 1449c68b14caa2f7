"""
Profile Component
"""
from .routes import UPDATE_PASSWORD_FLOW, init_profile, profile_bp
from .service import ProfileService

__all__ = ['profile_bp', 'init_profile', 'ProfileService', 'UPDATE_PASSWORD_FLOW']
