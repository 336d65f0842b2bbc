from ..extensions import db
from ..utils.timestamps import to_iso, utcnow


class PermanentClient(db.Model):
    __tablename__ = 'permanent_clients'

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    vehicle_number = db.Column(db.String(32), nullable=False)
    vehicle_type = db.Column(db.String(16), nullable=False, default='car')
    cnic = db.Column(db.String(20))
    monthly_fee = db.Column(db.Float)
    payment_status = db.Column(db.String(10), nullable=False, default='unpaid')  # paid / unpaid
    payment_date = db.Column(db.DateTime, nullable=True)
    contact = db.Column(db.String(20), nullable=False)
    entry_time = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'vehicleNumber': self.vehicle_number,
            'vehicleType': self.vehicle_type,
            'cnic': self.cnic,
            'monthlyFee': self.monthly_fee,
            'paymentStatus': self.payment_status,
            'paymentDate': to_iso(self.payment_date),
            'contact': self.contact,
            'entryTime': to_iso(self.entry_time),
        }

    def __repr__(self):
        return f'<PermanentClient {self.name} ({self.vehicle_number})>'
