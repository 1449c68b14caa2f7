"""
Eye Test Administration Component
"""
from .routes import EXTERNAL_FLOW, USER_TEST_FLOW, admin_eye_tests_bp, init_admin_eye_tests
from .service import EyeTestService

__all__ = ['admin_eye_tests_bp', 'init_admin_eye_tests', 'EyeTestService', 'EXTERNAL_FLOW', 'USER_TEST_FLOW']
