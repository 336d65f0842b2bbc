from .vehicle import Vehicle
from .permanent_client import PermanentClient
from .settings import AppSettings
from .daily_stat import DailyStat

__all__ = ['Vehicle', 'PermanentClient', 'AppSettings', 'DailyStat']
