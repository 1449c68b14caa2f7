"""
Doctor Desk Component
"""
from .routes import admin_doctor_desk_bp, init_admin_doctor_desk
from .service import DoctorDeskService, PatientService

__all__ = ['admin_doctor_desk_bp', 'init_admin_doctor_desk', 'DoctorDeskService', 'PatientService']
