"""
Backend monitoring service
"""
import logging
import threading
import time
from collections import deque
from datetime import datetime

import requests

from opticare.config.settings import OptiCareConfig

logger = logging.getLogger(__name__)


class BackendMonitor:
    """Polls the backend health endpoint and keeps recent log entries"""

    def __init__(self, base_url=None, health_path=None, interval=None, max_entries=None, http=None):
        self.base_url = base_url or OptiCareConfig.API_BASE_URL
        self.health_path = health_path if health_path is not None else OptiCareConfig.API_HEALTH_PATH
        self.interval = interval or OptiCareConfig.MONITOR_INTERVAL_SECONDS
        self.http = http or requests
        self.running = False
        self.thread = None
        self.status = {'status': 'unknown', 'last_check': None, 'detail': None}
        self.system_logs = deque(maxlen=max_entries or OptiCareConfig.MAX_LOG_ENTRIES)
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config):
        return cls(
            base_url=config.get('API_BASE_URL'),
            health_path=config.get('API_HEALTH_PATH'),
            interval=config.get('MONITOR_INTERVAL_SECONDS'),
            max_entries=config.get('MAX_LOG_ENTRIES'),
        )

    @property
    def health_url(self):
        return self.base_url.rstrip('/') + self.health_path

    def start(self):
        """Start monitoring thread"""
        if self.thread is None or not self.thread.is_alive():
            self.running = True
            self.thread = threading.Thread(target=self._monitor_loop, daemon=True)
            self.thread.start()
            logger.info(f'Backend monitor started for {self.health_url}')

    def stop(self):
        """Stop monitoring thread"""
        self.running = False
        if self.thread:
            self.thread.join(timeout=2)

    def _monitor_loop(self):
        while self.running:
            try:
                self.check_now()
            except Exception as e:
                self._add_log('ERROR', f'Monitor loop error: {e}')
            time.sleep(self.interval)

    def check_now(self):
        """Check the backend once and record status changes"""
        detail = None
        try:
            response = self.http.get(self.health_url, timeout=5)
            if response.status_code == 200:
                status = 'healthy'
            else:
                status = 'unhealthy'
                detail = f'HTTP {response.status_code}'
        except requests.RequestException as e:
            status = 'down'
            detail = str(e)

        with self._lock:
            old_status = self.status['status']
            self.status = {
                'status': status,
                'last_check': datetime.now().isoformat(),
                'detail': detail,
            }

        if status != old_status:
            level = 'INFO' if status == 'healthy' else 'WARNING'
            self._add_log(level, f'Backend status changed: {old_status} -> {status}')
        return status

    def _add_log(self, level, message):
        """Add log entry"""
        log_entry = {
            'timestamp': datetime.now().isoformat(),
            'level': level,
            'message': message
        }
        with self._lock:
            self.system_logs.append(log_entry)

    def get_logs(self, level_filter='ALL', limit=50):
        """Get filtered logs"""
        with self._lock:
            logs = list(self.system_logs)

        if level_filter != 'ALL':
            logs = [log for log in logs if log['level'] == level_filter]

        return logs[-limit:] if limit else logs

    def get_status(self):
        with self._lock:
            return dict(self.status)


class RecentLogHandler(logging.Handler):
    """Feeds application warnings into the monitor's log buffer"""

    def __init__(self, monitor, level=logging.WARNING):
        super().__init__(level)
        self.monitor = monitor

    def emit(self, record):
        try:
            self.monitor._add_log(record.levelname, self.format(record))
        except Exception:
            self.handleError(record)
