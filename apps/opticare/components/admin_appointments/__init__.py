"""
Appointment Calendar Component
"""
from .routes import admin_appointments_bp, init_admin_appointments

__all__ = ['admin_appointments_bp', 'init_admin_appointments']
