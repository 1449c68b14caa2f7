"""
Admin Settings Service
Backend status and recent warnings collected by the monitor
"""
from flask import current_app

LOG_LEVELS = ['ALL', 'INFO', 'WARNING', 'ERROR']


class SettingsService:
    """Reads the monitor stored on the running app"""

    def _monitor(self):
        return current_app.extensions.get('opticare_monitor')

    def get_status(self):
        monitor = self._monitor()
        if monitor is None:
            return {'status': 'disabled', 'last_check': None, 'detail': None}
        return monitor.get_status()

    def get_logs(self, level_filter='ALL', limit=50):
        monitor = self._monitor()
        if monitor is None:
            return []
        if level_filter not in LOG_LEVELS:
            level_filter = 'ALL'
        # Newest entries first
        return list(reversed(monitor.get_logs(level_filter=level_filter, limit=limit)))

    def check_now(self):
        monitor = self._monitor()
        if monitor is None:
            return 'disabled'
        return monitor.check_now()
