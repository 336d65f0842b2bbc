from ..extensions import db
from ..utils.calculations import generate_barcode
from ..utils.timestamps import to_iso, utcnow


class Vehicle(db.Model):
    __tablename__ = 'vehicles'

    id = db.Column(db.String(64), primary_key=True)
    vehicle_number = db.Column(db.String(32), nullable=False, index=True)
    vehicle_type = db.Column(db.String(16), nullable=False)
    entry_time = db.Column(db.DateTime, nullable=False, default=utcnow)
    exit_time = db.Column(db.DateTime, nullable=True)
    fee = db.Column(db.Float, nullable=True)

    @property
    def is_parked(self):
        return self.exit_time is None

    @property
    def barcode(self):
        return generate_barcode(self.vehicle_number, self.entry_time)

    def to_dict(self):
        return {
            'id': self.id,
            'vehicleNumber': self.vehicle_number,
            'vehicleType': self.vehicle_type,
            'entryTime': to_iso(self.entry_time),
            'exitTime': to_iso(self.exit_time),
            'fee': self.fee,
        }

    def __repr__(self):
        return f'<Vehicle {self.vehicle_number} ({self.vehicle_type})>'
