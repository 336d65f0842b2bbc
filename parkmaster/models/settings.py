from ..extensions import db

SETTINGS_KEY = 'app_settings'


class AppSettings(db.Model):
    __tablename__ = 'settings'

    key = db.Column(db.String(50), primary_key=True)
    value = db.Column(db.JSON, nullable=False)
