"""
OptiCare web configuration settings
"""
import os
from datetime import timedelta, timezone


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class OptiCareConfig:
    """Centralized configuration for the OptiCare web frontend"""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'your-secret-key-here-change-in-production')
    PERMANENT_SESSION_LIFETIME = timedelta(hours=8)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Security settings
    WTF_CSRF_TIME_LIMIT = None

    # Rate limiting
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_DEFAULT = "100 per minute"
    OTP_RATE_LIMIT = "5 per minute"
    LOGIN_RATE_LIMIT = "10 per minute"

    # Backend REST API
    API_BASE_URL = os.environ.get('OPTICARE_API_BASE_URL', 'https://careoptics-backend.onrender.com')
    API_TIMEOUT_SECONDS = float(os.environ.get('OPTICARE_API_TIMEOUT', '10'))
    API_HEALTH_PATH = os.environ.get('OPTICARE_API_HEALTH_PATH', '/actuator/health')

    # Monitoring settings
    MONITOR_ENABLED = _env_flag('OPTICARE_MONITOR_ENABLED', True)
    MONITOR_INTERVAL_SECONDS = 30
    MAX_LOG_ENTRIES = 500
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Server
    HOST = os.environ.get('OPTICARE_HOST', '0.0.0.0')
    PORT = int(os.environ.get('OPTICARE_PORT', '8080'))

    # Catalog settings
    PRODUCTS_PER_PAGE = 12
    ADMIN_PRODUCTS_PER_PAGE = 8
    PRICE_RANGE = (0, 25000)
    PRODUCT_CATEGORIES = ['Classic', 'Fashion', 'Sport', 'Vintage', 'Minimalist']
    SPECS_TYPES = ['Eyeglasses', 'Sunglasses']
    GENDERS = ['Men', 'Women', 'Unisex']
    DEFAULT_SORT = 'averageRating,desc'
    SORT_OPTIONS = [
        ('averageRating,desc', 'Best Rating'),
        ('price,asc', 'Price: Low to High'),
        ('price,desc', 'Price: High to Low'),
        ('createdAt,desc', 'Newest'),
    ]

    # Appointment settings
    EYE_PROBLEMS = [
        ('blurred_vision', 'Blurred Vision'),
        ('eye_strain', 'Eye Strain / Fatigue'),
        ('headaches', 'Frequent Headaches'),
        ('prescription_update', 'Prescription Update'),
        ('glasses_lenses', 'New Glasses / Lenses'),
        ('other', 'Other'),
    ]

    # Admin settings
    USER_ROLES = ['USER', 'ADMIN']
    ADMIN_ROLE = 'ADMIN'
    CALENDAR_YEAR_SPAN = 10

    # Appointment times are entered and shown in store time
    STORE_UTC_OFFSET_MINUTES = int(os.environ.get('OPTICARE_STORE_UTC_OFFSET_MINUTES', '330'))

    STORE_LOCATION = [
        'Pavan Kunj, Plot No.1, opposite Government Girls Junior College,',
        'Sarvasukhi Colony, West Marredpally,',
        'Secunderabad, Telangana 500026',
    ]

    @classmethod
    def get_eye_problem_label(cls, problem_id):
        """Get display label for an eye problem id"""
        return dict(cls.EYE_PROBLEMS).get(problem_id, problem_id)

    @classmethod
    def get_store_timezone(cls):
        return timezone(timedelta(minutes=cls.STORE_UTC_OFFSET_MINUTES))

    @classmethod
    def get_sort_values(cls):
        return [value for value, _ in cls.SORT_OPTIONS]
