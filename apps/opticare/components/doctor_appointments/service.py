"""
Doctor Appointments Service
"""
import logging

from opticare.core.api_client import ApiClient
from opticare.core.listing import sort_records

logger = logging.getLogger(__name__)


class DoctorAppointmentService:
    """Service for doctor appointments (customer booking and admin management)"""

    def __init__(self, client=None):
        self.client = client or ApiClient('/api/doctor-appointments')

    def book(self, data):
        return self.client.post('/my-booking', json=data)

    def get_mine(self):
        return sort_records(self.client.get('/my') or [], 'appointmentDate')

    # Admin, registered users

    def get_for_registered_user(self, user_id):
        return sort_records(self.client.get(f'/user/{user_id}') or [], 'appointmentDate')

    def create_for_registered_user(self, user_id, data):
        result = self.client.post('/admin', json={**data, 'userId': user_id})
        logger.info(f'Doctor appointment created for user {user_id}')
        return result

    def update(self, appointment_id, data):
        return self.client.put(f'/{appointment_id}', json=data)

    def delete(self, appointment_id):
        return self.client.delete(f'/{appointment_id}')

    def create_walk_in(self, data):
        """Book a walk-in patient in one call (patient details plus visit)"""
        return self.client.post('/walk-in', json=data)
