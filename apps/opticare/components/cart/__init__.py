"""
Cart Component
Customer cart and pay-on-delivery callback requests
"""
from .routes import cart_bp, init_cart
from .service import CallbackService, CartService, cart_total

__all__ = ['cart_bp', 'init_cart', 'CartService', 'CallbackService', 'cart_total']
