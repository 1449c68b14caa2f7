"""
Appointments Service
Optician appointments: customer booking and the admin reporting endpoints
"""
import logging
from datetime import date

from opticare.config.settings import OptiCareConfig
from opticare.core.api_client import ApiClient
from opticare.core.listing import sort_records

logger = logging.getLogger(__name__)


def describe_problems(appointment):
    """Eye problems as one readable line, custom description appended"""
    labels = [OptiCareConfig.get_eye_problem_label(problem) for problem in appointment.get('eyeProblems') or []]
    text = ', '.join(labels)
    custom = appointment.get('customProblem')
    if custom:
        text = f'{text} ({custom})' if text else custom
    return text


class AppointmentService:
    """Service for optician appointments"""

    def __init__(self, client=None):
        self.client = client or ApiClient('/api/appointments')

    def request_appointment(self, data):
        result = self.client.post('/book', json=data)
        logger.info(f'Appointment requested for {data.get("preferredDate")} {data.get("preferredTime")}')
        return result

    def get_user_appointments(self):
        return sort_records(self.client.get('/user/me') or [], 'preferredDate')

    def get_available_slots(self, day):
        if isinstance(day, date):
            day = day.isoformat()
        return self.client.get('/available-slots', params={'date': day}) or []

    # Admin reporting

    def get_summary(self):
        """Daily counts: [{date, count}]"""
        return self.client.get('/summary') or []

    def get_by_date(self, day):
        return self.client.get('/by-date', params={'date': day}) or []

    def get_stats(self):
        """Counts per reason: [{reason, count}]"""
        return self.client.get('/by-reason') or []

    def get_recent(self):
        recent = self.client.get('/recent')
        return recent if isinstance(recent, list) else []
