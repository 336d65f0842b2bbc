import logging

from flask import Blueprint, request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..services import client_service

logger = logging.getLogger(__name__)

client_bp = Blueprint('client_bp', __name__)


@client_bp.route('', methods=['GET'])
def get_clients():
    try:
        return jsonify([c.to_dict() for c in client_service.list_clients()]), 200
    except SQLAlchemyError:
        logger.exception("Failed to fetch permanent clients")
        return jsonify({'error': 'Failed to fetch permanent clients'}), 500


@client_bp.route('', methods=['POST'])
def add_client():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Client details are required'}), 400
    try:
        client = client_service.create_client(data)
    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to add permanent client")
        return jsonify({'error': 'Failed to add permanent client'}), 500
    return jsonify(client.to_dict()), 201


@client_bp.route('/<client_id>', methods=['PUT'])
def update_client(client_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'No updates provided'}), 400
    try:
        client = client_service.update_client(client_id, data)
    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to update permanent client %s", client_id)
        return jsonify({'error': 'Failed to update permanent client'}), 500

    if client is None:
        return jsonify({'error': 'Client not found'}), 404
    return jsonify(client.to_dict()), 200


@client_bp.route('/<client_id>/toggle-payment', methods=['POST'])
def toggle_payment(client_id):
    try:
        client = client_service.toggle_payment(client_id)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to update payment for %s", client_id)
        return jsonify({'error': 'Failed to update permanent client'}), 500

    if client is None:
        return jsonify({'error': 'Client not found'}), 404
    return jsonify(client.to_dict()), 200


@client_bp.route('/<client_id>/receipt', methods=['GET'])
def get_client_receipt(client_id):
    receipt = client_service.get_receipt(client_id)
    if receipt is None:
        return jsonify({'error': 'Client not found'}), 404
    return jsonify(receipt), 200


@client_bp.route('/<client_id>', methods=['DELETE'])
def remove_client(client_id):
    try:
        removed = client_service.delete_client(client_id)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to remove permanent client %s", client_id)
        return jsonify({'error': 'Failed to remove permanent client'}), 500

    if not removed:
        return jsonify({'error': 'Client not found'}), 404
    return jsonify({'success': True}), 200
