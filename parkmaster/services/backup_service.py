"""Whole-state snapshot and restore.

A restore replaces every vehicle, permanent client and daily stat, plus the
settings record, inside one transaction. Rows are parsed after the deletes
have been issued, so a malformed row fails the transaction part-way and the
caller's rollback restores the prior state.
"""
import logging
from numbers import Number

from ..extensions import db
from ..models.daily_stat import DailyStat
from ..models.permanent_client import PermanentClient
from ..models.vehicle import Vehicle
from ..utils.calculations import VEHICLE_TYPES
from ..utils.timestamps import parse_timestamp, to_iso, utcnow
from .settings_service import get_settings, stage_settings, validate_settings
from .stats_service import stat_from_dict

logger = logging.getLogger(__name__)


def _text(data, *keys, required=True):
    for key in keys:
        value = data.get(key)
        if value is not None:
            if not isinstance(value, (str, int)) or isinstance(value, bool):
                raise ValueError(f'{keys[0]} must be a string')
            value = str(value).strip()
            if value:
                return value
    if required:
        raise ValueError(f'{keys[0]} is required')
    return None


def _number(data, key):
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, Number):
        raise ValueError(f'{key} must be a number')
    return value


def _timestamp(data, key, required=True):
    value = data.get(key)
    if value is None:
        if required:
            raise ValueError(f'{key} is required')
        return None
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError):
        raise ValueError(f'{key} is not a valid timestamp: {value!r}')


def vehicle_from_dict(data):
    if not isinstance(data, dict):
        raise ValueError('Vehicle must be an object')

    vehicle_type = data.get('vehicleType', data.get('type'))
    if vehicle_type not in VEHICLE_TYPES:
        raise ValueError(f'vehicleType must be one of {", ".join(VEHICLE_TYPES)}')

    vehicle = Vehicle(
        id=_text(data, 'id'),
        vehicle_number=_text(data, 'vehicleNumber', 'number'),
        vehicle_type=vehicle_type,
        entry_time=_timestamp(data, 'entryTime'),
        exit_time=_timestamp(data, 'exitTime', required=False),
        fee=_number(data, 'fee')
    )

    if vehicle.exit_time is None and vehicle.fee is not None:
        raise ValueError(f'Vehicle {vehicle.id}: fee set without exitTime')
    if vehicle.exit_time is not None and vehicle.exit_time < vehicle.entry_time:
        raise ValueError(f'Vehicle {vehicle.id}: exitTime before entryTime')
    return vehicle


def client_from_dict(data):
    if not isinstance(data, dict):
        raise ValueError('Permanent client must be an object')

    vehicle_type = data.get('vehicleType', data.get('type')) or 'car'
    if vehicle_type not in VEHICLE_TYPES:
        raise ValueError(f'vehicleType must be one of {", ".join(VEHICLE_TYPES)}')
    payment_status = data.get('paymentStatus') or 'unpaid'
    if payment_status not in ('paid', 'unpaid'):
        raise ValueError('paymentStatus must be paid or unpaid')

    return PermanentClient(
        id=_text(data, 'id'),
        name=_text(data, 'name', 'clientName'),
        vehicle_number=_text(data, 'vehicleNumber', 'number'),
        vehicle_type=vehicle_type,
        cnic=_text(data, 'cnic', required=False),
        monthly_fee=_number(data, 'monthlyFee'),
        payment_status=payment_status,
        payment_date=_timestamp(data, 'paymentDate', required=False),
        contact=_text(data, 'contact'),
        entry_time=_timestamp(data, 'entryTime')
    )


def build_snapshot():
    return {
        'vehicles': [v.to_dict() for v in Vehicle.query.order_by(Vehicle.entry_time).all()],
        'permanentClients': [c.to_dict() for c in PermanentClient.query.order_by(PermanentClient.entry_time).all()],
        'settings': get_settings(),
        'dailyStats': [s.to_dict() for s in DailyStat.query.order_by(DailyStat.date.desc()).all()],
        'backupDate': to_iso(utcnow()),
    }


def _list(payload, key):
    value = payload.get(key, [])
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f'{key} must be a list')
    return value


def restore_snapshot(payload):
    """Replace all state with payload. Does not commit on failure; the caller rolls back.

    Raises ValueError for malformed input and SQLAlchemyError for store failures.
    """
    if not isinstance(payload, dict):
        raise ValueError('Backup must be an object')

    vehicles = _list(payload, 'vehicles')
    clients = _list(payload, 'permanentClients')
    stats = _list(payload, 'dailyStats')
    settings = payload.get('settings')

    Vehicle.query.delete()
    PermanentClient.query.delete()
    DailyStat.query.delete()

    for row in vehicles:
        db.session.add(vehicle_from_dict(row))
    for row in clients:
        db.session.add(client_from_dict(row))
    for row in stats:
        db.session.add(stat_from_dict(row))

    # An empty settings object leaves the current settings in place
    if settings:
        error = validate_settings(settings)
        if error:
            raise ValueError(error)
        stage_settings(settings)

    db.session.flush()
    db.session.commit()

    counts = {
        'vehicles': len(vehicles),
        'permanentClients': len(clients),
        'dailyStats': len(stats),
    }
    logger.info("Restored backup: %s", counts)
    return counts
