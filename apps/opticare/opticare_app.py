"""
OptiCare Web Frontend
Flask application serving the eyewear store and the eye-care back office
"""
import logging

from flask import Flask, render_template

from opticare.config.settings import OptiCareConfig
from opticare.core.forms import store_datetime_input
from opticare.core.monitoring import BackendMonitor, RecentLogHandler
from opticare.core.session import current_user
from opticare.extensions import csrf, limiter
from opticare.routes.main_routes import main_bp

# Customer components
from opticare.components.auth import init_auth
from opticare.components.catalog import init_catalog
from opticare.components.cart import init_cart
from opticare.components.appointments import init_appointments
from opticare.components.doctor_appointments import init_doctor_appointments
from opticare.components.profile import init_profile

# Admin components
from opticare.components.admin_dashboard import init_admin_dashboard
from opticare.components.admin_appointments import init_admin_appointments
from opticare.components.admin_callbacks import init_admin_callbacks
from opticare.components.admin_products import init_admin_products
from opticare.components.admin_users import init_admin_users
from opticare.components.admin_reviews import init_admin_reviews
from opticare.components.admin_eye_tests import init_admin_eye_tests
from opticare.components.admin_past_users import init_admin_past_users
from opticare.components.admin_doctor_desk import init_admin_doctor_desk
from opticare.components.admin_settings import init_admin_settings

logger = logging.getLogger(__name__)


def _attach_log_handler(monitor):
    """Route warnings of the opticare loggers into the monitor buffer"""
    app_logger = logging.getLogger('opticare')
    for handler in list(app_logger.handlers):
        if isinstance(handler, RecentLogHandler):
            app_logger.removeHandler(handler)
    handler = RecentLogHandler(monitor)
    handler.setFormatter(logging.Formatter('%(name)s: %(message)s'))
    app_logger.addHandler(handler)


class OptiCareApp:
    """Main web application class"""

    def __init__(self):
        self.app = None
        self.monitor = None

    def create_app(self, config_overrides=None):
        """Create and configure Flask application"""
        self.app = Flask(__name__)

        # Load configuration
        self.app.config.from_object(OptiCareConfig)
        if config_overrides:
            self.app.config.update(config_overrides)

        logging.basicConfig(
            level=self.app.config.get('LOG_LEVEL', 'INFO'),
            format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
        )

        # Initialize extensions
        csrf.init_app(self.app)
        limiter.init_app(self.app)

        # Initialize monitoring
        self.monitor = BackendMonitor.from_config(self.app.config)
        self.app.extensions['opticare_monitor'] = self.monitor
        _attach_log_handler(self.monitor)

        # Initialize components
        init_auth(self.app)
        init_catalog(self.app)
        init_cart(self.app)
        init_appointments(self.app)
        init_doctor_appointments(self.app)
        init_profile(self.app)
        init_admin_dashboard(self.app)
        init_admin_appointments(self.app)
        init_admin_callbacks(self.app)
        init_admin_products(self.app)
        init_admin_users(self.app)
        init_admin_reviews(self.app)
        init_admin_eye_tests(self.app)
        init_admin_past_users(self.app)
        init_admin_doctor_desk(self.app)
        init_admin_settings(self.app)

        # Register main blueprint
        self.app.register_blueprint(main_bp)

        self._register_template_context()
        self._register_error_handlers()

        return self.app

    def _register_template_context(self):
        @self.app.context_processor
        def inject_globals():
            return {
                'settings': OptiCareConfig,
                'current_user': current_user(),
                'store_datetime': store_datetime_input,
            }

    def _register_error_handlers(self):
        @self.app.errorhandler(404)
        def not_found(error):
            return render_template('errors/404.html'), 404

        @self.app.errorhandler(429)
        def rate_limited(error):
            logger.warning(f'Rate limit exceeded: {error.description}')
            return render_template('errors/429.html', limit=error.description), 429

        @self.app.errorhandler(500)
        def server_error(error):
            logger.error(f'Unhandled server error: {error}')
            return render_template('errors/500.html'), 500

    def run(self):
        """Start the web application"""
        if self.app.config.get('MONITOR_ENABLED'):
            self.monitor.start()
        self.monitor._add_log('INFO', 'OptiCare web frontend started')

        host = self.app.config['HOST']
        port = self.app.config['PORT']
        logger.info(f'OptiCare web starting on http://{host}:{port}')
        logger.info(f'Backend API: {self.app.config["API_BASE_URL"]}')

        self.app.run(host=host, port=port, debug=False)


def create_app(config_overrides=None):
    """Build a configured Flask app (used by WSGI servers and tests)"""
    return OptiCareApp().create_app(config_overrides)


def main():
    """Main entry point"""
    web = OptiCareApp()
    web.create_app()
    web.run()


if __name__ == '__main__':
    main()
