from ..extensions import db


class DailyStat(db.Model):
    __tablename__ = 'daily_stats'

    date = db.Column(db.String(10), primary_key=True)  # YYYY-MM-DD
    total_cars = db.Column(db.Integer, nullable=False, default=0)
    total_bikes = db.Column(db.Integer, nullable=False, default=0)
    total_rickshaws = db.Column(db.Integer, nullable=False, default=0)
    total_vehicles = db.Column(db.Integer, nullable=False, default=0)
    total_income = db.Column(db.Float, nullable=False, default=0)
    vehicles = db.Column(db.JSON, nullable=False, default=list)

    def to_dict(self):
        return {
            'date': self.date,
            'totalCars': self.total_cars,
            'totalBikes': self.total_bikes,
            'totalRickshaws': self.total_rickshaws,
            'totalVehicles': self.total_vehicles,
            'totalIncome': self.total_income,
            'vehicles': self.vehicles or [],
        }
