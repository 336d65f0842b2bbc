import logging

from flask import Blueprint, request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..services import stats_service

logger = logging.getLogger(__name__)

stats_bp = Blueprint('stats_bp', __name__)


@stats_bp.route('', methods=['GET'])
def get_daily_stats():
    try:
        return jsonify([s.to_dict() for s in stats_service.list_daily_stats()]), 200
    except SQLAlchemyError:
        logger.exception("Failed to fetch daily stats")
        return jsonify({'error': 'Failed to fetch daily stats'}), 500


@stats_bp.route('', methods=['POST'])
def update_daily_stats():
    data = request.get_json(silent=True)
    try:
        stats = stats_service.upsert_daily_stats(data)
    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to update daily stats")
        return jsonify({'error': 'Failed to update daily stats'}), 500
    return jsonify([s.to_dict() for s in stats]), 200


@stats_bp.route('/rebuild', methods=['POST'])
def rebuild_daily_stats():
    """Recompute every day from the vehicle records."""
    try:
        stats = stats_service.rebuild_daily_stats()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to rebuild daily stats")
        return jsonify({'error': 'Failed to rebuild daily stats'}), 500
    return jsonify(stats), 200
