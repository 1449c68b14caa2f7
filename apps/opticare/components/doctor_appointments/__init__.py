"""
Doctor Appointments Component
"""
from .routes import doctor_appointments_bp, init_doctor_appointments
from .service import DoctorAppointmentService

__all__ = ['doctor_appointments_bp', 'init_doctor_appointments', 'DoctorAppointmentService']
