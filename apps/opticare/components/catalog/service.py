"""
Catalog Service
Products and product reviews
"""
import logging

from opticare.config.settings import OptiCareConfig
from opticare.core.api_client import ApiClient
from opticare.core.listing import compact_params, dedupe_by_id, sort_records

logger = logging.getLogger(__name__)


MULTI_FILTERS = ('category', 'gender', 'specsType', 'tags')


def _as_int(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_number(value, default):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return int(number) if number.is_integer() else number


class CatalogFilters:
    """Storefront filter state parsed from the query string"""

    def __init__(self, search='', category=None, gender=None, specsType=None, tags=None,
                 min_price=None, max_price=None, min_rating=0, in_stock=False,
                 sort=OptiCareConfig.DEFAULT_SORT, page=0):
        low, high = OptiCareConfig.PRICE_RANGE
        self.search = search or ''
        self.category = list(category or [])
        self.gender = list(gender or [])
        self.specsType = list(specsType or [])
        self.tags = list(tags or [])
        self.min_price = low if min_price is None else min_price
        self.max_price = high if max_price is None else max_price
        self.min_rating = min_rating or 0
        self.in_stock = bool(in_stock)
        self.sort = sort if sort in OptiCareConfig.get_sort_values() else OptiCareConfig.DEFAULT_SORT
        self.page = max(0, page or 0)

    @classmethod
    def from_args(cls, args):
        low, high = OptiCareConfig.PRICE_RANGE
        return cls(
            search=args.get('search', '').strip(),
            category=args.getlist('category'),
            gender=args.getlist('gender'),
            specsType=args.getlist('specsType'),
            tags=[tag for tag in args.getlist('tags') if tag],
            min_price=_as_number(args.get('minPrice'), low),
            max_price=_as_number(args.get('maxPrice'), high),
            min_rating=min(5, max(0, _as_int(args.get('minRating'), 0))),
            in_stock=args.get('inStock') in ('on', 'true', '1'),
            sort=args.get('sort', OptiCareConfig.DEFAULT_SORT),
            page=_as_int(args.get('page'), 0),
        )

    def to_params(self, size):
        """Backend query parameters; unset filters are left out"""
        params = {
            'search': self.search or None,
            'minPrice': self.min_price,
            'maxPrice': self.max_price,
            'minRating': self.min_rating if self.min_rating > 0 else None,
            'inStock': 'true' if self.in_stock else 'false',
            'page': self.page,
            'size': size,
            'sort': self.sort,
        }
        for name in MULTI_FILTERS:
            values = getattr(self, name)
            params[name] = ','.join(values) if values else None
        return compact_params(params)

    def query_args(self, **overrides):
        """Query string arguments reproducing this state (for links)"""
        args = {
            'search': self.search or None,
            'category': self.category,
            'gender': self.gender,
            'specsType': self.specsType,
            'tags': self.tags,
            'minPrice': self.min_price,
            'maxPrice': self.max_price,
            'minRating': self.min_rating or None,
            'inStock': 'on' if self.in_stock else None,
            'sort': self.sort,
            'page': self.page,
        }
        args.update(overrides)
        return {key: value for key, value in args.items() if value not in (None, [], '')}


class ProductService:
    """Service for products"""

    def __init__(self, client=None):
        self.client = client or ApiClient('/api/products')

    def get_products(self, params):
        """One page of products: {content, totalPages, totalElements}"""
        data = self.client.get('/filterPage', params=compact_params(params)) or {}
        return {
            'content': data.get('content') or [],
            'totalPages': data.get('totalPages') or 0,
            'totalElements': data.get('totalElements') or 0,
        }

    def get_all_products(self):
        return self.client.get('/allItems') or []

    def get_product(self, product_id):
        return self.client.get(f'/{product_id}')

    def add_product(self, data):
        return self.client.post('/', json=data)

    def update_product(self, product_id, data):
        return self.client.put(f'/{product_id}', json=data)

    def delete_product(self, product_id):
        return self.client.delete(f'/{product_id}')


class ReviewService:
    """Service for product reviews written by customers"""

    def __init__(self, client=None):
        self.client = client or ApiClient('/api/reviews')

    def get_reviews_for_product(self, product_id):
        reviews = self.client.get(f'/product/{product_id}') or []
        return dedupe_by_id(reviews)

    def add_review(self, product_id, rating, comment):
        return self.client.post('', json={'productId': product_id, 'rating': rating, 'comment': comment})

    def update_review(self, review_id, data):
        return self.client.put(f'/{review_id}', json=data)

    def delete_review(self, review_id):
        return self.client.delete(f'/{review_id}')

    def get_my_reviews(self):
        return sort_records(self.client.get('/my') or [], 'createdAt')
