import logging
from numbers import Number

from flask import Blueprint, request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..services import parking_service
from ..utils.calculations import VEHICLE_TYPES
from ..utils.timestamps import parse_timestamp

logger = logging.getLogger(__name__)

vehicle_bp = Blueprint('vehicle_bp', __name__)


@vehicle_bp.route('', methods=['GET'])
def get_vehicles():
    status = request.args.get('status')
    if status not in (None, 'parked', 'exited'):
        return jsonify({'error': 'Invalid status. Use: parked, exited'}), 400
    try:
        vehicles = parking_service.list_vehicles(status)
        return jsonify([v.to_dict() for v in vehicles]), 200
    except SQLAlchemyError:
        logger.exception("Failed to fetch vehicles")
        return jsonify({'error': 'Failed to fetch vehicles'}), 500


# Vehicle entry
@vehicle_bp.route('', methods=['POST'])
def add_vehicle():
    data = request.get_json(silent=True) or {}
    vehicle_number = data.get('vehicleNumber', data.get('number'))
    vehicle_type = data.get('vehicleType', data.get('type'))

    if not isinstance(vehicle_number, str) or not vehicle_number.strip():
        return jsonify({'error': 'Please enter vehicle number'}), 400
    if vehicle_type not in VEHICLE_TYPES:
        return jsonify({'error': f'Vehicle type must be one of: {", ".join(VEHICLE_TYPES)}'}), 400

    try:
        vehicle, error = parking_service.check_in(vehicle_number, vehicle_type)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to add vehicle %s", vehicle_number)
        return jsonify({'error': 'Failed to add vehicle'}), 500

    if error:
        return jsonify({'error': error}), 409

    response = vehicle.to_dict()
    response['barcode'] = vehicle.barcode
    return jsonify(response), 201


def _parse_exit_body(data):
    fee = data.get('fee')
    if fee is not None and (isinstance(fee, bool) or not isinstance(fee, Number) or fee < 0):
        raise ValueError('Fee must be a non-negative number')
    exit_time = parse_timestamp(data.get('exitTime'))
    return fee, exit_time


# Vehicle exit by id
@vehicle_bp.route('/<vehicle_id>/exit', methods=['PUT'])
def exit_vehicle(vehicle_id):
    data = request.get_json(silent=True) or {}
    try:
        fee, exit_time = _parse_exit_body(data)
    except (TypeError, ValueError) as e:
        return jsonify({'error': str(e)}), 400

    try:
        vehicle, error = parking_service.check_out(vehicle_id, fee=fee, exit_time=exit_time)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to update vehicle %s", vehicle_id)
        return jsonify({'error': 'Failed to update vehicle'}), 500

    if error:
        return jsonify({'error': error}), 404
    return jsonify(vehicle.to_dict()), 200


# Vehicle exit by plate number or scanned barcode
@vehicle_bp.route('/exit', methods=['POST'])
def exit_vehicle_by_query():
    data = request.get_json(silent=True) or {}
    query = data.get('query') or data.get('barcode') or data.get('vehicleNumber')
    if not isinstance(query, str) or not query.strip():
        return jsonify({'error': 'Please enter vehicle number or barcode'}), 400

    try:
        exit_time = parse_timestamp(data.get('exitTime'))
    except (TypeError, ValueError) as e:
        return jsonify({'error': str(e)}), 400

    try:
        vehicle, error = parking_service.check_out_by_query(query, exit_time=exit_time)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to exit vehicle for %s", query)
        return jsonify({'error': 'Failed to update vehicle'}), 500

    if error:
        return jsonify({'error': error}), 404
    return jsonify(vehicle.to_dict()), 200


@vehicle_bp.route('/<vehicle_id>/receipt', methods=['GET'])
def get_vehicle_receipt(vehicle_id):
    receipt = parking_service.get_receipt(vehicle_id)
    if receipt is None:
        return jsonify({'error': 'Vehicle not found'}), 404
    return jsonify(receipt), 200
