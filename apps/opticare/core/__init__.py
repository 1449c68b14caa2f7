"""
Core building blocks shared by OptiCare components
"""
from .api_client import ApiClient, ApiError
from .monitoring import BackendMonitor, RecentLogHandler

__all__ = [
    'ApiClient',
    'ApiError',
    'BackendMonitor',
    'RecentLogHandler',
]
