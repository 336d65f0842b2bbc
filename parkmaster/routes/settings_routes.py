import logging

from flask import Blueprint, request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..services.settings_service import get_settings, replace_settings

logger = logging.getLogger(__name__)

settings_bp = Blueprint('settings_bp', __name__)


@settings_bp.route('', methods=['GET'])
def read_settings():
    try:
        return jsonify(get_settings()), 200
    except SQLAlchemyError:
        logger.exception("Failed to fetch settings")
        return jsonify({'error': 'Failed to fetch settings'}), 500


@settings_bp.route('', methods=['PUT'])
def update_settings():
    data = request.get_json(silent=True)
    try:
        settings, error = replace_settings(data)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to update settings")
        return jsonify({'error': 'Failed to update settings'}), 500

    if error:
        return jsonify({'error': error}), 400
    return jsonify(settings), 200
