import re

from .timestamps import to_epoch_ms, utcnow

VEHICLE_TYPES = ('car', 'bike', 'rickshaw')
MS_PER_HOUR = 1000 * 60 * 60

_WHITESPACE = re.compile(r'\s+')
_DIGIT_RUN = re.compile(r'[0-9]{6,}')


def elapsed_hours(entry_time, exit_time):
    """Whole hours between entry and exit, rounded up. Never negative."""
    elapsed_ms = to_epoch_ms(exit_time) - to_epoch_ms(entry_time)
    hours = -(-elapsed_ms // MS_PER_HOUR)
    return max(hours, 0)


def calculate_parking_fee(entry_time, exit_time, vehicle_type, pricing):
    vehicle_pricing = pricing[vehicle_type]
    hours = elapsed_hours(entry_time, exit_time)

    if hours <= vehicle_pricing['baseHours']:
        return vehicle_pricing['baseFee']

    extra_hours = hours - vehicle_pricing['baseHours']
    return vehicle_pricing['baseFee'] + extra_hours * vehicle_pricing['extraHourFee']


def normalize_plate(vehicle_number):
    return vehicle_number.strip().lower()


def generate_barcode(vehicle_number, entry_time):
    plate = _WHITESPACE.sub('', vehicle_number).upper()
    return f"{plate}-{to_epoch_ms(entry_time)}"


def looks_like_barcode(value):
    # Scanner output: long, with a run of timestamp digits
    return len(value) >= 10 and bool(_DIGIT_RUN.search(value))


def find_by_plate(vehicle_number, vehicles):
    wanted = normalize_plate(vehicle_number)
    for vehicle in vehicles:
        if vehicle.exit_time is None and normalize_plate(vehicle.vehicle_number) == wanted:
            return vehicle
    return None


def find_by_barcode(scanned, vehicles):
    scanned = scanned.strip().upper()
    if not scanned:
        return None
    for vehicle in vehicles:
        if vehicle.exit_time is not None:
            continue
        barcode = generate_barcode(vehicle.vehicle_number, vehicle.entry_time)
        if barcode == scanned or barcode in scanned:
            return vehicle
    return None


def find_parked(query, vehicles):
    """Resolve a plate number or a scanned barcode to a parked vehicle."""
    query = query.strip()
    if looks_like_barcode(query):
        vehicle = find_by_barcode(query, vehicles)
        if vehicle:
            return vehicle
    return find_by_plate(query, vehicles)


def format_currency(amount):
    return f"{amount} PKR"


def format_duration(entry_time, exit_time):
    minutes = max(to_epoch_ms(exit_time) - to_epoch_ms(entry_time), 0) // 60000
    hours, minutes = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def is_today(dt, now=None):
    now = now or utcnow()
    return dt.date() == now.date()
