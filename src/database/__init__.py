# Database module for StudyBuddy
from .connection import DatabaseManager
from .setup import DatabaseSetup
from .storage import KeyValueStore, STORAGE_KEYS, get_storage_key

__all__ = ['DatabaseManager', 'DatabaseSetup', 'KeyValueStore', 'STORAGE_KEYS', 'get_storage_key']
