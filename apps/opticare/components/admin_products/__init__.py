"""
Product Administration Component
"""
from .routes import admin_products_bp, init_admin_products
from .service import ProductAdminService

__all__ = ['admin_products_bp', 'init_admin_products', 'ProductAdminService']
