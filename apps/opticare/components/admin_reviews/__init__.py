"""
Review Moderation Component
"""
from .routes import admin_reviews_bp, init_admin_reviews
from .service import ReviewAdminService

__all__ = ['admin_reviews_bp', 'init_admin_reviews', 'ReviewAdminService']
