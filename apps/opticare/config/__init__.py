"""
OptiCare web configuration
"""
from .settings import OptiCareConfig

__all__ = ['OptiCareConfig']
