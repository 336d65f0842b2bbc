import logging
from numbers import Number

from ..extensions import db
from ..models.permanent_client import PermanentClient
from ..utils.calculations import VEHICLE_TYPES, generate_barcode
from ..utils.timestamps import parse_timestamp, to_iso, utcnow
from .parking_service import new_id

logger = logging.getLogger(__name__)

# JSON key -> column, for partial updates
UPDATABLE_FIELDS = {
    'name': 'name',
    'clientName': 'name',
    'vehicleNumber': 'vehicle_number',
    'number': 'vehicle_number',
    'vehicleType': 'vehicle_type',
    'type': 'vehicle_type',
    'cnic': 'cnic',
    'monthlyFee': 'monthly_fee',
    'paymentStatus': 'payment_status',
    'paymentDate': 'payment_date',
    'contact': 'contact',
}

REQUIRED_COLUMNS = ('name', 'vehicle_number', 'contact')
PAYMENT_STATUSES = ('paid', 'unpaid')


def _coerce(column, value):
    if column in REQUIRED_COLUMNS:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f'{column} must be a non-empty string')
        return value.strip()
    if column == 'vehicle_type' and value not in VEHICLE_TYPES:
        raise ValueError(f'vehicleType must be one of {", ".join(VEHICLE_TYPES)}')
    if column == 'payment_status' and value not in PAYMENT_STATUSES:
        raise ValueError('paymentStatus must be paid or unpaid')
    if column == 'monthly_fee' and value is not None:
        if isinstance(value, bool) or not isinstance(value, Number):
            raise ValueError('monthlyFee must be a number')
    if column == 'payment_date':
        return parse_timestamp(value)
    return value


def list_clients():
    return PermanentClient.query.order_by(PermanentClient.entry_time.desc()).all()


def create_client(data):
    client = PermanentClient(
        id=new_id(),
        entry_time=utcnow(),
        payment_status='unpaid',
        vehicle_type='car'
    )
    for key, column in UPDATABLE_FIELDS.items():
        if key in data and column not in ('payment_status', 'payment_date'):
            setattr(client, column, _coerce(column, data[key]))

    missing = [column for column in REQUIRED_COLUMNS if not getattr(client, column)]
    if missing:
        raise ValueError(f'Missing required fields: {", ".join(missing)}')

    db.session.add(client)
    db.session.commit()
    logger.info("Permanent client registered: %s (%s)", client.name, client.vehicle_number)
    return client


def update_client(client_id, updates):
    client = db.session.get(PermanentClient, client_id)
    if client is None:
        return None
    for key, value in updates.items():
        column = UPDATABLE_FIELDS.get(key)
        if column:
            setattr(client, column, _coerce(column, value))
    db.session.commit()
    return client


def toggle_payment(client_id):
    client = db.session.get(PermanentClient, client_id)
    if client is None:
        return None
    if client.payment_status == 'paid':
        client.payment_status = 'unpaid'
        client.payment_date = None
    else:
        client.payment_status = 'paid'
        client.payment_date = utcnow()
    db.session.commit()
    logger.info("Payment status for %s changed to %s", client.vehicle_number, client.payment_status)
    return client


def delete_client(client_id):
    client = db.session.get(PermanentClient, client_id)
    if client is None:
        return False
    db.session.delete(client)
    db.session.commit()
    logger.info("Permanent client removed: %s", client.vehicle_number)
    return True


def get_receipt(client_id):
    client = db.session.get(PermanentClient, client_id)
    if client is None:
        return None
    issued_at = utcnow()
    receipt = client.to_dict()
    receipt['receiptDate'] = to_iso(issued_at)
    receipt['barcode'] = generate_barcode(client.vehicle_number, issued_at)
    return receipt
