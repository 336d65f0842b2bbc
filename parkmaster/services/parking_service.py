import logging
import uuid

from ..extensions import db
from ..models.vehicle import Vehicle
from ..utils.calculations import calculate_parking_fee, find_parked, normalize_plate
from ..utils.timestamps import utcnow
from .settings_service import get_pricing

logger = logging.getLogger(__name__)


def new_id():
    return uuid.uuid4().hex


def list_vehicles(status=None):
    query = Vehicle.query
    if status == 'parked':
        query = query.filter(Vehicle.exit_time.is_(None))
    elif status == 'exited':
        query = query.filter(Vehicle.exit_time.isnot(None))
    return query.order_by(Vehicle.entry_time.desc()).all()


def parked_vehicles():
    return Vehicle.query.filter(Vehicle.exit_time.is_(None)).all()


def find_parked_by_plate(vehicle_number):
    wanted = normalize_plate(vehicle_number)
    return Vehicle.query.filter(
        Vehicle.exit_time.is_(None),
        db.func.lower(db.func.trim(Vehicle.vehicle_number)) == wanted
    ).first()


def check_in(vehicle_number, vehicle_type, entry_time=None):
    vehicle_number = vehicle_number.strip()

    # Prevent duplicate entry if the vehicle is already parked
    if find_parked_by_plate(vehicle_number):
        return None, f"Vehicle {vehicle_number.upper()} is already parked"

    vehicle = Vehicle(
        id=new_id(),
        vehicle_number=vehicle_number,
        vehicle_type=vehicle_type,
        entry_time=entry_time or utcnow()
    )
    db.session.add(vehicle)
    db.session.commit()
    logger.info("Vehicle entered: %s (%s) id=%s", vehicle.vehicle_number, vehicle.vehicle_type, vehicle.id)
    return vehicle, None


def _exit(vehicle, fee=None, exit_time=None):
    exit_time = exit_time or utcnow()
    # Keep exit_time >= entry_time on the stored record
    if exit_time < vehicle.entry_time:
        exit_time = vehicle.entry_time

    if fee is None:
        fee = calculate_parking_fee(vehicle.entry_time, exit_time, vehicle.vehicle_type, get_pricing())

    vehicle.exit_time = exit_time
    vehicle.fee = fee
    db.session.commit()
    logger.info("Vehicle exited: %s fee=%s", vehicle.vehicle_number, fee)
    return vehicle


def check_out(vehicle_id, fee=None, exit_time=None):
    vehicle = db.session.get(Vehicle, vehicle_id)
    if vehicle is None or not vehicle.is_parked:
        return None, "Vehicle not found or already exited"
    return _exit(vehicle, fee, exit_time), None


def check_out_by_query(query, exit_time=None):
    """Check out the parked vehicle matching a plate number or scanned barcode."""
    vehicle = find_parked(query, parked_vehicles())
    if vehicle is None:
        return None, f"Invalid barcode or vehicle already exited: {query}"
    return _exit(vehicle, exit_time=exit_time), None


def get_receipt(vehicle_id):
    vehicle = db.session.get(Vehicle, vehicle_id)
    if vehicle is None:
        return None
    receipt = vehicle.to_dict()
    receipt['barcode'] = vehicle.barcode
    return receipt
