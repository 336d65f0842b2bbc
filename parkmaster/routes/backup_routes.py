import io
import json
import logging

from flask import Blueprint, request, jsonify, send_file
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..services.backup_service import build_snapshot, restore_snapshot

logger = logging.getLogger(__name__)

backup_bp = Blueprint('backup_bp', __name__)


# Restore: replaces all server-side state with the posted snapshot
@backup_bp.route('', methods=['POST'])
def restore_backup():
    data = request.get_json(silent=True)
    try:
        counts = restore_snapshot(data)
    except ValueError as e:
        db.session.rollback()
        logger.warning("Rejected backup: %s", e)
        return jsonify({'success': False, 'error': f'Invalid backup: {e}'}), 400
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to restore backup")
        return jsonify({'success': False, 'error': 'Failed to restore backup'}), 500

    return jsonify({
        'success': True,
        'message': 'Restore from backup successful.',
        'restored': counts
    }), 200


@backup_bp.route('/download', methods=['GET'])
def download_backup():
    try:
        snapshot = build_snapshot()
    except SQLAlchemyError:
        logger.exception("Failed to create backup for download")
        return jsonify({'error': 'Failed to create backup for download'}), 500

    payload = io.BytesIO(json.dumps(snapshot, indent=2).encode('utf-8'))
    return send_file(
        payload,
        mimetype='application/json',
        as_attachment=True,
        download_name='backup.json'
    )
