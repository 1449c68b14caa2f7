"""
Past Users Service
Eye-test customers recorded by staff without an online account
"""
import logging
import re

from opticare.core.api_client import ApiClient, ApiError
from opticare.core.measurements import sort_by_date

logger = logging.getLogger(__name__)

NUMERIC_QUERY = re.compile(r'^\s*[+-]?(\d+\.?\d*|\.\d+)\s*$')


def as_list(data):
    """Search endpoints answer with a list, a single record or nothing"""
    if isinstance(data, list):
        return data
    if data:
        return [data]
    return []


def record_payload(form):
    """Create/update payload of a past-user record form; blank optionals are left out"""
    return {key: value for key, value in form.model_dump(mode='json').items() if value is not None}


class PastUserService:
    """Service for past-user records and their eye tests"""

    def __init__(self, client=None):
        self.client = client or ApiClient('/api/admin/past-users')

    def list(self):
        return self.client.get('/') or []

    def get(self, public_id):
        return self.client.get(f'/{public_id}')

    def create(self, data):
        record = self.client.post('/', json=data)
        logger.info(f'Past user record created for {data.get("name")}')
        return record

    def update(self, public_id, data):
        return self.client.put(f'/{public_id}', json=data)

    def delete(self, public_id):
        result = self.client.delete(f'/{public_id}')
        logger.info(f'Past user record {public_id} deleted')
        return result

    def search_by_name(self, name):
        return self.client.get('/search', params={'name': name})

    def search_by_phone(self, phone):
        return self.client.get('/by-phone', params={'phone': phone})

    def search(self, query):
        """Numeric queries look up a phone number, anything else a name; no query lists all"""
        query = (query or '').strip()
        try:
            if not query:
                data = self.list()
            elif NUMERIC_QUERY.match(query):
                data = self.search_by_phone(query)
            else:
                data = self.search_by_name(query)
        except ApiError as e:
            if e.is_not_found:
                return []
            raise
        return as_list(data)

    # Eye tests

    def get_eye_tests(self, public_id):
        return sort_by_date(self.client.get(f'/{public_id}/eye-tests') or [])

    def add_eye_test(self, public_id, data):
        return self.client.post(f'/{public_id}/eye-tests', json=data)

    def update_eye_test(self, test_id, data):
        return self.client.put(f'/eye-tests/{test_id}', json=data)

    def delete_eye_test(self, test_id):
        return self.client.delete(f'/eye-tests/{test_id}')
