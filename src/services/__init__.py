from services.storage import KeyValueStore, MemoryStore, JsonFileStore
from services.auth_service import AuthService, User
from services.activity_service import ActivityService, ActivityType, ActivityIcon, Activity
from services.data_service import DataService, StorageItem
from services.favorites_service import FavoritesService
from services.history_store import HistoryStore

__all__ = [
    'KeyValueStore',
    'MemoryStore',
    'JsonFileStore',
    'AuthService',
    'User',
    'ActivityService',
    'ActivityType',
    'ActivityIcon',
    'Activity',
    'DataService',
    'StorageItem',
    'FavoritesService',
    'HistoryStore',
]
