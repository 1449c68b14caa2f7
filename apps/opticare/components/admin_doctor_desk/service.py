"""
Doctor Desk Service
Walk-in patients without an account and the doctor appointments of all users
"""
import logging

from opticare.core.api_client import ApiClient, ApiError
from opticare.core.listing import filter_records, sort_records
from opticare.components.admin_users.service import UserAdminService
from opticare.components.doctor_appointments.service import DoctorAppointmentService

logger = logging.getLogger(__name__)

DUPLICATE_PHONE = 'Past user with this phone number already exists'


def is_duplicate_phone(error):
    return isinstance(error, ApiError) and DUPLICATE_PHONE in (error.message or '')


def newest_first(appointments):
    return sort_records(appointments or [], 'appointmentDate')


class PatientService:
    """Service for doctor-desk patients without an online account"""

    def __init__(self, client=None, users=None):
        self.client = client or ApiClient('/api/doctor-past-users')
        self.users = users or UserAdminService()

    def list_for_desk(self):
        """The desk listing comes from the central user administration endpoint"""
        return self.users.get_past_users()

    def create(self, data):
        patient = self.client.post('/', json=data)
        logger.info(f'Doctor desk patient created: {data.get("name")}')
        return patient

    def update(self, patient_id, data):
        return self.client.put(f'/{patient_id}', json=data)

    def delete(self, patient_id):
        result = self.client.delete(f'/{patient_id}')
        logger.info(f'Doctor desk patient {patient_id} deleted')
        return result

    # Appointments

    def get_appointments(self, patient_id):
        return newest_first(self.client.get(f'/{patient_id}/appointments'))

    def add_appointment(self, patient_id, data):
        return self.client.post(f'/{patient_id}/appointments', json=data)

    def update_appointment(self, appointment_id, data):
        return self.client.put(f'/appointments/{appointment_id}', json=data)

    def delete_appointment(self, appointment_id):
        return self.client.delete(f'/appointments/{appointment_id}')


class DoctorDeskService:
    """Registered users and walk-in patients as the doctor desk sees them"""

    def __init__(self, patients=None, users=None, appointments=None):
        self.patients = patients or PatientService()
        self.users = users or UserAdminService()
        self.appointments = appointments or DoctorAppointmentService()

    def find_registered_users(self, keyword=''):
        keyword = (keyword or '').strip()
        if keyword:
            return self.users.search_registered_users(keyword)
        return self.users.get_registered_users()

    def find_patients(self, term=''):
        """All desk patients filtered by name or phone"""
        return filter_records(self.patients.list_for_desk(), term, ('name', 'phone'))

    def appointments_for_user(self, user_id):
        return self.appointments.get_for_registered_user(user_id)

    def book_walk_in(self, data):
        result = self.appointments.create_walk_in(data)
        logger.info(f'Walk-in appointment booked for {data.get("name")}')
        return result
