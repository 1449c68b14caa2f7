"""
Appointments Component
Optician appointment booking
"""
from .routes import appointments_bp, init_appointments
from .service import AppointmentService, describe_problems

__all__ = ['appointments_bp', 'init_appointments', 'AppointmentService', 'describe_problems']
