import logging
from numbers import Number

from ..extensions import db
from ..models.daily_stat import DailyStat
from ..models.vehicle import Vehicle

logger = logging.getLogger(__name__)

TYPE_COUNTERS = {
    'car': 'totalCars',
    'bike': 'totalBikes',
    'rickshaw': 'totalRickshaws',
}


def build_daily_stats(vehicles):
    """Derive per-day stats from a vehicle set, newest date first.

    Counts come from vehicles that entered on the date, income from vehicles
    that exited on it.
    """
    days = {}

    def day(date_key):
        if date_key not in days:
            days[date_key] = {
                'date': date_key,
                'totalCars': 0,
                'totalBikes': 0,
                'totalRickshaws': 0,
                'totalVehicles': 0,
                'totalIncome': 0,
                'vehicles': [],
            }
        return days[date_key]

    for vehicle in vehicles:
        entered = day(vehicle.entry_time.date().isoformat())
        counter = TYPE_COUNTERS.get(vehicle.vehicle_type)
        if counter:
            entered[counter] += 1
        entered['totalVehicles'] += 1
        entered['vehicles'].append(vehicle.to_dict())

        if vehicle.exit_time is not None:
            exited = day(vehicle.exit_time.date().isoformat())
            exited['totalIncome'] += vehicle.fee or 0

    return sorted(days.values(), key=lambda s: s['date'], reverse=True)


def list_daily_stats():
    return DailyStat.query.order_by(DailyStat.date.desc()).all()


def stat_from_dict(data):
    """Build a DailyStat row from its JSON form. Raises ValueError when malformed."""
    if not isinstance(data, dict):
        raise ValueError('Daily stat must be an object')
    date = data.get('date')
    if not isinstance(date, str) or not date.strip():
        raise ValueError('Daily stat date is required')

    stat = DailyStat(date=date.strip())
    numbers = {
        'total_cars': data.get('totalCars', 0),
        'total_bikes': data.get('totalBikes', 0),
        'total_rickshaws': data.get('totalRickshaws', 0),
        'total_vehicles': data.get('totalVehicles', 0),
        'total_income': data.get('totalIncome', data.get('totalRevenue', 0)),
    }
    for column, value in numbers.items():
        if isinstance(value, bool) or not isinstance(value, Number):
            raise ValueError(f'Daily stat {date}: {column} must be a number')
        setattr(stat, column, value)

    vehicles = data.get('vehicles', [])
    if not isinstance(vehicles, list):
        raise ValueError(f'Daily stat {date}: vehicles must be a list')
    stat.vehicles = vehicles
    return stat


def upsert_daily_stats(items):
    """Insert or replace stats by date. Accepts one object or a list."""
    if isinstance(items, dict):
        items = [items]
    if not isinstance(items, list):
        raise ValueError('Expected a daily stat object or a list of them')

    stats = [db.session.merge(stat_from_dict(item)) for item in items]
    db.session.commit()
    return stats


def rebuild_daily_stats():
    rebuilt = build_daily_stats(Vehicle.query.all())
    DailyStat.query.delete()
    for item in rebuilt:
        db.session.add(stat_from_dict(item))
    db.session.commit()
    logger.info("Rebuilt daily stats for %d days", len(rebuilt))
    return rebuilt
