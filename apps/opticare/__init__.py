"""
OptiCare web frontend
"""
__version__ = '1.0.0'
