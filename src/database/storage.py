"""
Key-Value Storage
Persists JSON documents (tasks, study logs, settings, gamification, quests)
under per-user keys, plus the runtime config table
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from .connection import db_manager


STORAGE_KEYS = {
    'tasks': 'taskflow_tasks',
    'studyLogs': 'taskflow_study_logs',
    'settings': 'taskflow_settings',
    'gamification': 'taskflow_gamification',
    'quests': 'taskflow_quests',
}


def get_storage_key(kind: str, user_id: Optional[Union[int, str]] = None) -> str:
    """Build the storage key for a kind, scoped to a user when one is given"""
    base_key = STORAGE_KEYS.get(kind, kind)
    return f"{base_key}_{user_id}" if user_id else base_key


class KeyValueStore:
    """JSON key-value persistence on top of the database manager"""

    def __init__(self, db=None):
        self.db = db or db_manager

    def get(self, key: str, default: Any = None) -> Any:
        """Read and decode a stored value"""
        try:
            result = self.db.fetch_one('SELECT value FROM kv_store WHERE key = ?', (key,))
            return json.loads(result[0]) if result else default
        except Exception as e:
            print(f"[STORAGE] ⚠️ Error reading {key}: {e}")
            return default

    def set(self, key: str, value: Any) -> bool:
        """Encode and store a value, returning False if the write failed"""
        try:
            payload = json.dumps(value)
            now = datetime.now(timezone.utc).isoformat()
            if self.db.db_type == 'postgresql':
                self.db.execute_query('''INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                                         ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value,
                                         updated_at = EXCLUDED.updated_at''',
                                      (key, payload, now))
            else:
                self.db.execute_query('INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)',
                                      (key, payload, now))
            return True
        except Exception as e:
            print(f"[STORAGE] ⚠️ Error writing {key}: {e}")
            return False

    def remove(self, key: str) -> bool:
        """Delete a stored value"""
        try:
            self.db.execute_query('DELETE FROM kv_store WHERE key = ?', (key,))
            return True
        except Exception as e:
            print(f"[STORAGE] ⚠️ Error removing {key}: {e}")
            return False

    def load(self, kind: str, user_id: Optional[Union[int, str]] = None, default: Any = None) -> Any:
        """Load the document of one kind for a user"""
        return self.get(get_storage_key(kind, user_id), default)

    def save(self, kind: str, value: Any, user_id: Optional[Union[int, str]] = None) -> bool:
        """Save the document of one kind for a user"""
        return self.set(get_storage_key(kind, user_id), value)

    def get_config(self, key: str) -> Optional[str]:
        """Get configuration value"""
        try:
            result = self.db.fetch_one('SELECT value FROM config WHERE key = ?', (key,))
            return result[0] if result else None
        except Exception as e:
            print(f"Error getting config {key}: {e}")
            return None

    def set_config(self, key: str, value: str) -> bool:
        """Set configuration value"""
        try:
            if self.db.db_type == 'postgresql':
                self.db.execute_query('INSERT INTO config (key, value) VALUES (?, ?) ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value',
                                      (key, value))
            else:
                self.db.execute_query('INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)', (key, value))
            return True
        except Exception as e:
            print(f"Error setting config {key}: {e}")
            return False

    def list_config(self) -> Dict[str, str]:
        """List every configuration key and value"""
        try:
            return dict(self.db.fetch_all('SELECT key, value FROM config ORDER BY key'))
        except Exception as e:
            print(f"Error listing config: {e}")
            return {}


# Global key-value store instance
kv_store = KeyValueStore()
