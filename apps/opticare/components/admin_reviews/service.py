"""
Review Moderation Service
"""
import logging

from opticare.core.api_client import ApiClient
from opticare.core.listing import filter_records, sort_records

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ('productName', 'username', 'comment')


class ReviewAdminService:
    """Service for moderating customer reviews"""

    def __init__(self, client=None):
        self.client = client or ApiClient('/api/reviews/admin')

    def get_all(self):
        """Every review, newest first"""
        return sort_records(self.client.get('/all') or [], 'createdAt')

    def get(self, review_id):
        return self.client.get(f'/{review_id}')

    def update(self, review_id, data):
        result = self.client.put(f'/{review_id}', json=data)
        logger.info(f'Review {review_id} updated by admin')
        return result

    def delete(self, review_id):
        result = self.client.delete(f'/{review_id}')
        logger.info(f'Review {review_id} deleted by admin')
        return result


def search_reviews(reviews, term):
    return filter_records(reviews, term, SEARCH_FIELDS)
