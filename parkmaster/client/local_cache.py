import json
import logging
import os
import tempfile

from ..utils.timestamps import to_iso, utcnow

logger = logging.getLogger(__name__)

VEHICLES = 'parking_vehicles'
SETTINGS = 'parking_settings'
DAILY_STATS = 'parking_daily_stats'
PERMANENT_CLIENTS = 'parking_permanent_clients'
LAST_USER_ACTIVITY = 'last_user_activity'
SYNC_ROLE = 'sync_role'

DEFAULT_CACHE_PATH = 'parking_cache.json'


class LocalCache:
    """JSON-file mirror of the server state, keyed by fixed names.

    The desk and the sync loop usually run in separate processes on the same
    file, so every read and every write starts from the file's current
    contents. Writes replace the file atomically.
    """

    def __init__(self, path=None):
        self.path = path or os.getenv('PARKMASTER_CACHE', DEFAULT_CACHE_PATH)
        self._data = self._read()

    def reload(self):
        self._data = self._read()
        return self._data

    def _read(self):
        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.error("Failed to read cache %s, starting empty: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self):
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def get(self, key, default=None):
        return self.reload().get(key, default)

    def set(self, key, value):
        self.reload()
        self._data[key] = value
        self._write()

    @property
    def vehicles(self):
        return self.get(VEHICLES, [])

    @property
    def permanent_clients(self):
        return self.get(PERMANENT_CLIENTS, [])

    @property
    def settings(self):
        return self.get(SETTINGS, {})

    @property
    def daily_stats(self):
        return self.get(DAILY_STATS, [])

    def touch_activity(self, now_ms):
        self.set(LAST_USER_ACTIVITY, int(now_ms))

    def last_activity(self):
        return self.get(LAST_USER_ACTIVITY)

    def replace_all(self, vehicles, permanent_clients, settings, daily_stats):
        self.reload()
        self._data.update({
            VEHICLES: vehicles,
            PERMANENT_CLIENTS: permanent_clients,
            SETTINGS: settings,
            DAILY_STATS: daily_stats,
        })
        self._write()

    def snapshot(self):
        data = self.reload()
        return {
            'vehicles': data.get(VEHICLES, []),
            'permanentClients': data.get(PERMANENT_CLIENTS, []),
            'settings': data.get(SETTINGS, {}),
            'dailyStats': data.get(DAILY_STATS, []),
            'backupDate': to_iso(utcnow()),
        }
