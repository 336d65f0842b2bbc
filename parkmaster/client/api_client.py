import logging
import os
import time

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'http://localhost:3001/api'
EXIT_RETRY_DELAY = 2.0


class ApiError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_client_error(self):
        return self.status_code is not None and 400 <= self.status_code < 500


class ApiClient:
    """Thin JSON wrapper over the Park Master REST endpoints."""

    def __init__(self, base_url=None, timeout=10, session=None,
                 retry_delay=EXIT_RETRY_DELAY, sleep=time.sleep):
        base_url = base_url or os.getenv('PARKMASTER_API_URL', DEFAULT_API_URL)
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.retry_delay = retry_delay
        self.sleep = sleep

    def _request(self, method, endpoint, **kwargs):
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("API request failed: %s %s: %s", method, url, e)
            raise ApiError(f"Request to {url} failed: {e}") from e

        if not response.ok:
            try:
                body = response.json()
                message = body.get('error') or body.get('message')
            except ValueError:
                message = None
            message = message or f"HTTP error! status: {response.status_code}"
            raise ApiError(message, status_code=response.status_code)
        return response.json()

    # Authentication
    def login(self, username, password):
        return self._request('POST', '/auth/login', json={'username': username, 'password': password})

    # Vehicles
    def get_vehicles(self):
        return self._request('GET', '/vehicles')

    def add_vehicle(self, vehicle_number, vehicle_type):
        return self._request('POST', '/vehicles', json={
            'vehicleNumber': vehicle_number,
            'vehicleType': vehicle_type,
        })

    def exit_vehicle(self, vehicle_id, fee, exit_time=None):
        """Record an exit, retrying once after a short delay on transient failure."""
        body = {'fee': fee}
        if exit_time:
            body['exitTime'] = exit_time
        try:
            return self._request('PUT', f'/vehicles/{vehicle_id}/exit', json=body)
        except ApiError as e:
            if e.is_client_error:
                raise
            logger.warning("Failed to exit vehicle %s via API (will retry once): %s", vehicle_id, e)
        self.sleep(self.retry_delay)
        return self._request('PUT', f'/vehicles/{vehicle_id}/exit', json=body)

    # Permanent clients
    def get_permanent_clients(self):
        return self._request('GET', '/permanent-clients')

    def add_permanent_client(self, client):
        return self._request('POST', '/permanent-clients', json=client)

    def update_permanent_client(self, client_id, updates):
        return self._request('PUT', f'/permanent-clients/{client_id}', json=updates)

    def remove_permanent_client(self, client_id):
        return self._request('DELETE', f'/permanent-clients/{client_id}')

    # Settings
    def get_settings(self):
        return self._request('GET', '/settings')

    def update_settings(self, settings):
        return self._request('PUT', '/settings', json=settings)

    # Daily stats
    def get_daily_stats(self):
        return self._request('GET', '/daily-stats')

    def update_daily_stats(self, stats):
        return self._request('POST', '/daily-stats', json=stats)

    # Backup
    def restore_backup(self, snapshot):
        return self._request('POST', '/backup', json=snapshot)

    def health_check(self):
        return self._request('GET', '/health')
