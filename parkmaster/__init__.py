from flask import Flask, jsonify
from parkmaster.extensions import db, bcrypt, cors, migrate
from config import Config
from parkmaster.routes.auth_routes import auth_bp
from parkmaster.routes.vehicle_routes import vehicle_bp
from parkmaster.routes.client_routes import client_bp
from parkmaster.routes.settings_routes import settings_bp
from parkmaster.routes.stats_routes import stats_bp
from parkmaster.routes.backup_routes import backup_bp
from parkmaster.utils.timestamps import to_iso, utcnow


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    db.init_app(app)
    bcrypt.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})
    migrate.init_app(app, db)
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(vehicle_bp, url_prefix='/api/vehicles')
    app.register_blueprint(client_bp, url_prefix='/api/permanent-clients')
    app.register_blueprint(settings_bp, url_prefix='/api/settings')
    app.register_blueprint(stats_bp, url_prefix='/api/daily-stats')
    app.register_blueprint(backup_bp, url_prefix='/api/backup')

    @app.route('/api/health')
    def health():
        return jsonify({'status': 'OK', 'timestamp': to_iso(utcnow())})

    return app


def init_database(app):
    """Create tables and seed the default settings row."""
    from parkmaster.services.settings_service import ensure_default_settings

    with app.app_context():
        db.create_all()
        ensure_default_settings()
