from datetime import datetime

import pytest

from config import TestConfig
from parkmaster import create_app, init_database
from parkmaster.extensions import db
from parkmaster.services import parking_service


@pytest.fixture
def app():
    app = create_app(TestConfig)
    init_database(app)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def park(app):
    """Check a vehicle in at a fixed time and return its id."""
    def _park(number='ABC-123', vehicle_type='car', entry_time=datetime(2026, 10, 19, 9, 0)):
        with app.app_context():
            vehicle, error = parking_service.check_in(number, vehicle_type, entry_time=entry_time)
            assert error is None
            return vehicle.id
    return _park
