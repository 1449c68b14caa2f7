"""
Profile Service
Collects everything the customer dashboard shows about the logged-in user
"""
import logging

from opticare.core.api_client import ApiError
from opticare.components.admin_eye_tests.service import EyeTestService
from opticare.components.appointments.service import AppointmentService
from opticare.components.cart.service import CartService, cart_total
from opticare.components.catalog.service import ReviewService
from opticare.components.doctor_appointments.service import DoctorAppointmentService

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for the customer dashboard"""

    def __init__(self, cart=None, appointments=None, reviews=None, eye_tests=None, doctor_appointments=None):
        self.cart = cart or CartService()
        self.appointments = appointments or AppointmentService()
        self.reviews = reviews or ReviewService()
        self.eye_tests = eye_tests or EyeTestService()
        self.doctor_appointments = doctor_appointments or DoctorAppointmentService()

    def _section(self, name, loader, default, failures):
        try:
            result = loader()
        except ApiError as e:
            logger.warning(f'Profile section {name} unavailable: {e}')
            failures.append(name)
            return default
        return default if result is None else result

    def get_dashboard(self, start_date=None, end_date=None):
        """Dashboard data; a failing section is shown empty and reported in 'failures'"""
        failures = []

        if start_date and end_date:
            def load_tests():
                return self.eye_tests.get_my_history_by_date_range(start_date, end_date)
        else:
            load_tests = self.eye_tests.get_my_history

        cart = self._section('cart', self.cart.get_cart, {}, failures)
        dashboard = {
            'cart': cart,
            'cart_total': cart_total(cart),
            'appointments': self._section('appointments', self.appointments.get_user_appointments, [], failures),
            'reviews': self._section('reviews', self.reviews.get_my_reviews, [], failures),
            'tests': self._section('tests', load_tests, [], failures),
            'latest_test': self._section('latest_test', self.eye_tests.get_my_latest, None, failures),
            'doctor_appointments': self._section('doctor_appointments', self.doctor_appointments.get_mine, [],
                                                 failures),
        }
        dashboard['failures'] = failures
        return dashboard
