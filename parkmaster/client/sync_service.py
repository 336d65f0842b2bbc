"""Single-direction synchronisation between the local cache and the server.

Each client process runs in exactly one role:

    PULL      overwrite the local cache with server state every minute,
              unless the operator was active in the last 15 seconds
    PUSH      overwrite server state with the local cache every two minutes
    DISABLED  do nothing

Both directions replace whole snapshots; the last writer wins. Keeping one
role per process means two loops can never stomp on each other from the same
client.
"""
import enum
import logging
import threading
import time

from .api_client import ApiError
from .local_cache import SYNC_ROLE

logger = logging.getLogger(__name__)

PULL_INTERVAL = 60
PUSH_INTERVAL = 2 * 60
ACTIVITY_GRACE = 15


class SyncRole(str, enum.Enum):
    PUSH = 'push'
    PULL = 'pull'
    DISABLED = 'disabled'


CONFIRM_QUESTIONS = {
    SyncRole.PUSH: 'Auto Sync will periodically overwrite the server backup with your current data. '
                   'Are you sure you want to enable it?',
    SyncRole.PULL: 'Auto Restore will periodically overwrite your local data with the latest server backup. '
                   'Are you sure you want to enable it?',
}
CONFIRM_PHRASES = {
    SyncRole.PUSH: 'SYNC',
    SyncRole.PULL: 'RESTORE',
}


class SyncService:

    def __init__(self, api, cache, role=None, on_reload=None, clock=time.time,
                 pull_interval=PULL_INTERVAL, push_interval=PUSH_INTERVAL):
        self.api = api
        self.cache = cache
        self.on_reload = on_reload
        self.clock = clock
        self.pull_interval = pull_interval
        self.push_interval = push_interval
        if role is None:
            role = cache.get(SYNC_ROLE, SyncRole.DISABLED.value)
        self.role = SyncRole(role)

    @property
    def interval(self):
        if self.role is SyncRole.PULL:
            return self.pull_interval
        if self.role is SyncRole.PUSH:
            return self.push_interval
        return None

    def enable(self, role, confirm, prompt):
        """Switch to role after a yes/no question and a typed confirmation phrase.

        confirm(question) -> bool and prompt(message) -> str are supplied by
        the caller. Returns True when the role was changed.
        """
        role = SyncRole(role)
        if role is SyncRole.DISABLED:
            self.disable()
            return True

        if not confirm(CONFIRM_QUESTIONS[role]):
            return False
        phrase = CONFIRM_PHRASES[role]
        typed = prompt(f'Type {phrase} to confirm:')
        if (typed or '').strip() != phrase:
            logger.warning("%s not enabled: confirmation failed", role.value)
            return False

        self._set_role(role)
        logger.info("Sync role set to %s, every %s seconds", role.value, self.interval)
        return True

    def disable(self):
        self._set_role(SyncRole.DISABLED)
        logger.info("Sync disabled")

    def _set_role(self, role):
        self.role = role
        self.cache.set(SYNC_ROLE, role.value)

    def refresh_role(self):
        """Pick up a role written to the cache by another process."""
        stored = self.cache.get(SYNC_ROLE)
        if stored is not None:
            self.role = SyncRole(stored)
        return self.role

    def recently_active(self):
        last = self.cache.last_activity()
        if last is None:
            return False
        return self.clock() * 1000 - last < ACTIVITY_GRACE * 1000

    def pull_now(self):
        """Replace the local cache with the server's copy."""
        vehicles = self.api.get_vehicles()
        clients = self.api.get_permanent_clients()
        settings = self.api.get_settings()
        stats = self.api.get_daily_stats()

        self.cache.replace_all(vehicles, clients, settings, stats)
        logger.info("Restored %d vehicles and %d clients from server", len(vehicles), len(clients))
        if self.on_reload:
            self.on_reload()

    def push_now(self):
        """Replace the server state with the local cache."""
        result = self.api.restore_backup(self.cache.snapshot())
        logger.info("Backed up local data to server")
        return result

    def tick(self):
        if self.role is SyncRole.PULL:
            if self.recently_active():
                logger.info("Skipping auto restore - user recently active")
                return 'skipped'
            try:
                self.pull_now()
            except ApiError as e:
                logger.error("Auto restore failed: %s", e)
                return 'failed'
            return 'pulled'

        if self.role is SyncRole.PUSH:
            try:
                self.push_now()
            except ApiError as e:
                logger.error("Auto sync failed: %s", e)
                return 'failed'
            return 'pushed'

        return 'idle'

    def run(self, stop_event=None, max_ticks=None):
        """Tick once per interval until disabled, stopped, or max_ticks reached."""
        stop_event = stop_event or threading.Event()
        ticks = 0
        while self.refresh_role() is not SyncRole.DISABLED:
            if stop_event.wait(self.interval):
                break
            if self.refresh_role() is SyncRole.DISABLED:
                break
            self.tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
        return ticks
