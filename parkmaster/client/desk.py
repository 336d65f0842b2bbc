import logging
import time
import uuid
from types import SimpleNamespace

from ..services.settings_service import default_settings
from ..services.stats_service import build_daily_stats
from ..utils.calculations import calculate_parking_fee, find_parked, generate_barcode, normalize_plate
from ..utils.timestamps import from_epoch_ms, parse_timestamp, to_iso
from . import local_cache
from .api_client import ApiError

logger = logging.getLogger(__name__)


class DuplicateEntryError(Exception):
    pass


class VehicleNotFoundError(Exception):
    pass


def _as_vehicle(record):
    return SimpleNamespace(
        record=record,
        vehicle_number=record.get('vehicleNumber') or record.get('number') or '',
        vehicle_type=record.get('vehicleType') or record.get('type'),
        entry_time=parse_timestamp(record['entryTime']),
        exit_time=parse_timestamp(record.get('exitTime')),
        fee=record.get('fee'),
        to_dict=lambda: record,
    )


class ParkingDesk:
    """Operator actions against the API, mirrored in the local cache.

    Reads fall back to the cached copy when the server is unreachable.
    """

    def __init__(self, api, cache, clock=time.time):
        self.api = api
        self.cache = cache
        self.clock = clock

    def _load(self, key, fetch):
        try:
            data = fetch()
        except ApiError as e:
            logger.warning("API failed, using local cache for %s: %s", key, e)
            return self.cache.get(key, [] if key != local_cache.SETTINGS else default_settings())
        self.cache.set(key, data)
        return data

    def load_vehicles(self):
        return self._load(local_cache.VEHICLES, self.api.get_vehicles)

    def load_permanent_clients(self):
        return self._load(local_cache.PERMANENT_CLIENTS, self.api.get_permanent_clients)

    def load_settings(self):
        return self._load(local_cache.SETTINGS, self.api.get_settings)

    def load_daily_stats(self):
        return self._load(local_cache.DAILY_STATS, self.api.get_daily_stats)

    def pricing(self):
        return self.cache.settings.get('pricing') or default_settings()['pricing']

    def currently_parked(self):
        return [r for r in self.cache.vehicles if not r.get('exitTime')]

    def _mark_activity(self):
        self.cache.touch_activity(self.clock() * 1000)

    def _store_vehicles(self, records):
        self.cache.set(local_cache.VEHICLES, records)
        self.cache.set(local_cache.DAILY_STATS, build_daily_stats(_as_vehicle(r) for r in records))

    def check_in(self, vehicle_number, vehicle_type):
        vehicle_number = vehicle_number.strip()
        if not vehicle_number:
            raise ValueError('Please enter vehicle number')

        wanted = normalize_plate(vehicle_number)
        for record in self.currently_parked():
            if normalize_plate(_as_vehicle(record).vehicle_number) == wanted:
                raise DuplicateEntryError(f'Vehicle {vehicle_number.upper()} is already parked!')

        self._mark_activity()
        try:
            record = self.api.add_vehicle(vehicle_number, vehicle_type)
        except ApiError as e:
            if e.status_code == 409:
                raise DuplicateEntryError(str(e)) from e
            if e.is_client_error:
                raise
            # Keep the entry locally; a later push carries it to the server
            logger.error("Failed to save vehicle to API, keeping it locally: %s", e)
            now_ms = int(self.clock() * 1000)
            record = {
                'id': uuid.uuid4().hex,
                'vehicleNumber': vehicle_number,
                'vehicleType': vehicle_type,
                'entryTime': to_iso(from_epoch_ms(now_ms)),
                'exitTime': None,
                'fee': None,
            }

        record.pop('barcode', None)
        self._store_vehicles(self.cache.vehicles + [record])
        entry = _as_vehicle(record)
        return dict(record, barcode=generate_barcode(entry.vehicle_number, entry.entry_time))

    def check_out(self, query):
        """Exit the parked vehicle matching a plate number or scanned barcode."""
        candidates = [_as_vehicle(r) for r in self.currently_parked()]
        vehicle = find_parked(query, candidates)
        if vehicle is None:
            raise VehicleNotFoundError(f'Vehicle not found or already exited: {query}')

        self._mark_activity()
        exit_time = max(from_epoch_ms(int(self.clock() * 1000)), vehicle.entry_time)
        fee = calculate_parking_fee(vehicle.entry_time, exit_time, vehicle.vehicle_type, self.pricing())
        record = vehicle.record

        try:
            self.api.exit_vehicle(record['id'], fee, exit_time=to_iso(exit_time))
        except ApiError as e:
            logger.error("Failed to exit vehicle %s via API: %s", record['id'], e)

        updated = dict(record, exitTime=to_iso(exit_time), fee=fee)
        self._store_vehicles([
            updated if r.get('id') == record['id'] else r for r in self.cache.vehicles
        ])
        return updated
