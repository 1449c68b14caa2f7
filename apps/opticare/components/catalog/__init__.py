"""
Catalog Component
Storefront products and reviews
"""
from .routes import catalog_bp, init_catalog
from .service import CatalogFilters, ProductService, ReviewService

__all__ = ['catalog_bp', 'init_catalog', 'CatalogFilters', 'ProductService', 'ReviewService']
