"""
Product Administration Service
"""
import logging

from opticare.core.listing import filter_records
from opticare.components.catalog.service import ProductService

logger = logging.getLogger(__name__)


def product_values(product):
    """Edit form values for a stored product"""
    product = product or {}
    return {
        'name': product.get('name') or '',
        'description': product.get('description') or '',
        'price': product.get('price') if product.get('price') is not None else '',
        'category': product.get('category') or '',
        'specstype': product.get('specstype') or '',
        'gender': product.get('gender') or '',
        'stock': product.get('stock') if product.get('stock') is not None else '',
        'tags': ', '.join(product.get('tags') or []),
        'imageUrl': product.get('imageUrl') or '',
    }


class ProductAdminService:
    """Service for creating and maintaining the catalog"""

    def __init__(self, products=None):
        self.products = products or ProductService()

    def create(self, form):
        result = self.products.add_product(form.to_payload())
        logger.info(f'Product created: {form.name}')
        return result

    def list(self, term=''):
        return filter_records(self.products.get_all_products(), term, ('name',))

    def get(self, product_id):
        return self.products.get_product(product_id)

    def update(self, product, form):
        """Save the edit form; rating and review links stay as they are"""
        payload = form.to_payload()
        payload['averageRating'] = product.get('averageRating') or 0
        payload['reviewIds'] = product.get('reviewIds') or []
        if product.get('imageUrl') and 'imageUrl' not in payload:
            payload['imageUrl'] = product['imageUrl']
        result = self.products.update_product(product['id'], payload)
        logger.info(f'Product {product["id"]} updated')
        return result

    def delete(self, product_id):
        result = self.products.delete_product(product_id)
        logger.info(f'Product {product_id} deleted')
        return result
