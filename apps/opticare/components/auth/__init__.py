"""
Auth Component
Login, registration with email OTP, password reset and logout
"""
from .routes import auth_bp, init_auth, REGISTER_FLOW, FORGOT_PASSWORD_FLOW
from .service import AuthService

__all__ = ['auth_bp', 'init_auth', 'AuthService', 'REGISTER_FLOW', 'FORGOT_PASSWORD_FLOW']
