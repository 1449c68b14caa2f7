"""
Tests for the backend monitor
"""
import logging

import requests

from opticare.core.monitoring import BackendMonitor, RecentLogHandler


class FakeHealth:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return type('Response', (), {'status_code': outcome})()


def make_monitor(*outcomes, **kwargs):
    return BackendMonitor(base_url='http://backend.test/', health_path='/actuator/health',
                          interval=1, http=FakeHealth(*outcomes), **kwargs)


def test_check_now_tracks_status_changes():
    monitor = make_monitor(200, 200, 503, requests.ConnectionError('refused'))

    assert monitor.check_now() == 'healthy'
    assert monitor.check_now() == 'healthy'
    assert monitor.check_now() == 'unhealthy'
    assert monitor.get_status()['detail'] == 'HTTP 503'
    assert monitor.check_now() == 'down'

    messages = [log['message'] for log in monitor.get_logs()]
    assert messages == [
        'Backend status changed: unknown -> healthy',
        'Backend status changed: healthy -> unhealthy',
        'Backend status changed: unhealthy -> down',
    ]
    assert monitor.http.urls[0] == 'http://backend.test/actuator/health'


def test_get_logs_filters_and_limits():
    monitor = make_monitor()
    monitor._add_log('INFO', 'one')
    monitor._add_log('ERROR', 'two')
    monitor._add_log('ERROR', 'three')

    assert [log['message'] for log in monitor.get_logs('ERROR')] == ['two', 'three']
    assert [log['message'] for log in monitor.get_logs(limit=1)] == ['three']


def test_log_buffer_is_bounded():
    monitor = make_monitor(max_entries=2)
    for i in range(5):
        monitor._add_log('INFO', str(i))
    assert [log['message'] for log in monitor.get_logs()] == ['3', '4']


def test_recent_log_handler_keeps_warnings_only():
    monitor = make_monitor()
    log = logging.getLogger('opticare.tests.monitoring')
    log.setLevel(logging.INFO)
    handler = RecentLogHandler(monitor)
    log.addHandler(handler)
    try:
        log.info('ignored')
        log.warning('kept')
    finally:
        log.removeHandler(handler)

    assert [(entry['level'], entry['message']) for entry in monitor.get_logs()] == [('WARNING', 'kept')]


def test_app_registers_monitor(app):
    monitor = app.extensions['opticare_monitor']
    assert monitor.base_url == 'http://backend.test'
    assert monitor.thread is None
