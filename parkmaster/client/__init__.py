"""Operator-side client: local mirror cache, API access and server sync."""
from .api_client import ApiClient, ApiError
from .local_cache import LocalCache
from .sync_service import SyncRole, SyncService
from .desk import ParkingDesk, DuplicateEntryError, VehicleNotFoundError

__all__ = [
    'ApiClient', 'ApiError', 'LocalCache', 'SyncRole', 'SyncService',
    'ParkingDesk', 'DuplicateEntryError', 'VehicleNotFoundError',
]
