import threading

import pytest

from parkmaster.client.api_client import ApiError
from parkmaster.client.local_cache import LocalCache, SYNC_ROLE, VEHICLES
from parkmaster.client.sync_service import SyncRole, SyncService

NOW = 1792400400.0


class FakeApi:
    def __init__(self):
        self.vehicles = [{'id': 'srv', 'vehicleNumber': 'SRV-1', 'vehicleType': 'car',
                          'entryTime': '2026-10-19T09:00:00.000Z', 'exitTime': None, 'fee': None}]
        self.clients = []
        self.settings = {'siteName': 'Server'}
        self.stats = []
        self.pushed = []
        self.fail = False

    def _check(self):
        if self.fail:
            raise ApiError('server down')

    def get_vehicles(self):
        self._check()
        return self.vehicles

    def get_permanent_clients(self):
        self._check()
        return self.clients

    def get_settings(self):
        self._check()
        return self.settings

    def get_daily_stats(self):
        self._check()
        return self.stats

    def restore_backup(self, snapshot):
        self._check()
        self.pushed.append(snapshot)
        return {'success': True}


@pytest.fixture
def cache(tmp_path):
    cache = LocalCache(str(tmp_path / 'cache.json'))
    cache.replace_all([{'id': 'local'}], [], {'siteName': 'Local'}, [])
    return cache


@pytest.fixture
def api():
    return FakeApi()


def service(api, cache, role=SyncRole.DISABLED, **kwargs):
    return SyncService(api, cache, role=role, clock=lambda: NOW, **kwargs)


def test_enable_needs_yes_and_the_typed_phrase(api, cache):
    sync = service(api, cache)

    assert not sync.enable(SyncRole.PULL, confirm=lambda q: False, prompt=lambda m: 'RESTORE')
    assert not sync.enable(SyncRole.PULL, confirm=lambda q: True, prompt=lambda m: 'restore please')
    assert sync.role is SyncRole.DISABLED

    assert sync.enable(SyncRole.PULL, confirm=lambda q: True, prompt=lambda m: 'RESTORE')
    assert sync.role is SyncRole.PULL
    assert sync.interval == 60


def test_push_phrase_is_sync(api, cache):
    sync = service(api, cache)
    prompts = []
    assert sync.enable('push', confirm=lambda q: True, prompt=lambda m: prompts.append(m) or 'SYNC')
    assert 'SYNC' in prompts[0]
    assert sync.interval == 120


def test_only_one_direction_at_a_time(api, cache):
    sync = service(api, cache)
    sync.enable(SyncRole.PUSH, lambda q: True, lambda m: 'SYNC')
    sync.enable(SyncRole.PULL, lambda q: True, lambda m: 'RESTORE')
    assert sync.role is SyncRole.PULL
    assert sync.tick() == 'pulled'
    assert api.pushed == []


def test_role_is_persisted_in_cache(api, cache):
    service(api, cache).enable(SyncRole.PUSH, lambda q: True, lambda m: 'SYNC')
    assert cache.get(SYNC_ROLE) == 'push'
    assert SyncService(api, LocalCache(cache.path)).role is SyncRole.PUSH


def test_disable_needs_no_confirmation(api, cache):
    sync = service(api, cache, role=SyncRole.PUSH)
    sync.disable()
    assert sync.role is SyncRole.DISABLED
    assert sync.interval is None
    assert sync.tick() == 'idle'


def test_pull_overwrites_cache_and_reloads(api, cache):
    reloads = []
    sync = service(api, cache, role=SyncRole.PULL, on_reload=lambda: reloads.append(1))
    assert sync.tick() == 'pulled'
    assert cache.vehicles == api.vehicles
    assert cache.settings == {'siteName': 'Server'}
    assert reloads == [1]


def test_pull_skipped_after_recent_activity(api, cache):
    cache.touch_activity((NOW - 5) * 1000)
    sync = service(api, cache, role=SyncRole.PULL)
    assert sync.tick() == 'skipped'
    assert cache.vehicles == [{'id': 'local'}]

    cache.touch_activity((NOW - 16) * 1000)
    assert sync.tick() == 'pulled'


def test_push_sends_whole_cache(api, cache):
    sync = service(api, cache, role=SyncRole.PUSH)
    assert sync.tick() == 'pushed'
    sent = api.pushed[0]
    assert sent['vehicles'] == [{'id': 'local'}]
    assert sent['settings'] == {'siteName': 'Local'}
    assert 'backupDate' in sent


def test_failures_are_reported_not_raised(api, cache):
    api.fail = True
    assert service(api, cache, role=SyncRole.PULL).tick() == 'failed'
    assert service(api, cache, role=SyncRole.PUSH).tick() == 'failed'
    assert cache.vehicles == [{'id': 'local'}]


def test_run_ticks_until_limit(api, cache):
    sync = service(api, cache, role=SyncRole.PUSH, push_interval=0)
    assert sync.run(max_ticks=3) == 3
    assert len(api.pushed) == 3


def test_run_stops_when_event_set(api, cache):
    stop = threading.Event()
    stop.set()
    sync = service(api, cache, role=SyncRole.PULL, pull_interval=0)
    assert sync.run(stop_event=stop) == 0


def test_run_does_nothing_when_disabled(api, cache):
    assert service(api, cache).run() == 0


def test_push_sends_what_another_process_wrote(api, cache):
    sync = service(api, cache, role=SyncRole.PUSH)
    desk_cache = LocalCache(cache.path)
    desk_cache.set(VEHICLES, [{'id': 'local'}, {'id': 'from-desk'}])

    assert sync.tick() == 'pushed'
    assert [v['id'] for v in api.pushed[0]['vehicles']] == ['local', 'from-desk']


def test_activity_from_another_process_delays_pull(api, cache):
    sync = service(api, cache, role=SyncRole.PULL)
    LocalCache(cache.path).touch_activity((NOW - 5) * 1000)

    assert sync.recently_active()
    assert sync.tick() == 'skipped'


def test_pull_keeps_role_and_activity_written_elsewhere(api, cache):
    other = LocalCache(cache.path)
    other.set(SYNC_ROLE, 'disabled')
    other.touch_activity((NOW - 60) * 1000)

    service(api, cache, role=SyncRole.PULL).pull_now()

    fresh = LocalCache(cache.path)
    assert fresh.get(SYNC_ROLE) == 'disabled'
    assert fresh.last_activity() == (NOW - 60) * 1000
    assert fresh.vehicles == api.vehicles


def test_run_stops_when_another_process_disables(api, cache):
    class DisablingApi(FakeApi):
        def restore_backup(self, snapshot):
            SyncService(self, LocalCache(cache.path)).disable()
            return super().restore_backup(snapshot)

    api = DisablingApi()
    sync = service(api, cache, role=SyncRole.PUSH, push_interval=0)
    assert sync.run(max_ticks=5) == 1
    assert sync.role is SyncRole.DISABLED
    assert len(api.pushed) == 1
