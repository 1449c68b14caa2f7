"""
Auth Service
"""
import logging

from opticare.core.api_client import ApiClient

logger = logging.getLogger(__name__)


class AuthService:
    """Service for the Auth component"""

    def __init__(self, client=None):
        self.client = client or ApiClient('/api/auth')

    def send_otp(self, email):
        return self.client.post('/send-otp', json={'email': email})

    def verify_otp(self, email, otp):
        return self.client.post('/verify-otp', json={'email': email, 'otp': otp})

    def register_user(self, data):
        """Create the account once the email has been verified"""
        payload = {key: data.get(key) for key in ('name', 'phone', 'age', 'email', 'password', 'address')}
        result = self.client.post('/register', json=payload)
        logger.info(f'Registered account for {data.get("email")}')
        return result

    def login_user(self, email, password):
        """Returns {token, userId, username, role, phone}"""
        return self.client.post('/login', json={'email': email, 'password': password})

    def forgot_password(self, email):
        return self.client.post('/forgot-password', json={'email': email})

    def reset_password(self, email, new_password):
        return self.client.post('/reset-password', json={'email': email, 'newPassword': new_password})

    def update_password(self, email, current_password, new_password):
        return self.client.post('/update-password', json={
            'email': email,
            'currentPassword': current_password,
            'newPassword': new_password,
        })
