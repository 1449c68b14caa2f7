"""
Eye Tests Service
External (walk-in) registration with OTP, admin test records per user email
and the logged-in customer's own history
"""
import logging
from urllib.parse import quote

from opticare.core.api_client import ApiClient, ApiError
from opticare.core.listing import filter_records
from opticare.core.measurements import sort_by_date

logger = logging.getLogger(__name__)


def _email_path(email):
    return quote(str(email), safe='@')


class EyeTestService:
    """Service for eye-test records"""

    def __init__(self, client=None):
        self.client = client or ApiClient('/api/eye-tests')

    # External users

    def send_external_otp(self, email):
        return self.client.post('/external/send-otp', json={'email': email})

    def verify_external_otp(self, email, otp):
        return self.client.post('/external/verify-otp', json={'email': email, 'otp': otp})

    def register_and_test_external(self, data):
        result = self.client.post('/external/register-and-test', json=data)
        logger.info(f'External user {data.get("email")} registered with eye test')
        return result

    # Admin, by user email

    def get_tests_for_user(self, email):
        """Tests newest first; a 404 means the user has none yet"""
        try:
            tests = self.client.get(f'/admin/user/{_email_path(email)}/tests') or []
        except ApiError as e:
            if e.is_not_found:
                return []
            raise
        return sort_by_date(tests)

    def create_test_for_user(self, email, data):
        return self.client.post(f'/admin/user/{_email_path(email)}/tests', json=data)

    def update_test_for_user(self, email, test_id, data):
        return self.client.put(f'/admin/user/{_email_path(email)}/tests/{test_id}', json=data)

    def delete_test_for_user(self, email, test_id):
        return self.client.delete(f'/admin/user/{_email_path(email)}/tests/{test_id}')

    # Logged-in customer

    def get_my_history(self):
        return sort_by_date(self.client.get('/my-history') or [])

    def get_my_latest(self):
        try:
            return self.client.get('/my-latest')
        except ApiError as e:
            if e.is_not_found:
                return None
            raise

    def get_my_history_by_date_range(self, start_date, end_date):
        tests = self.client.get('/my-history/date-range', params={'startDate': start_date, 'endDate': end_date})
        return sort_by_date(tests or [])


def search_users(users, term):
    """Registered-user picker: match on name or email"""
    return filter_records(users, term, ('name', 'email'))
