"""
Database Setup and Initialization
Creates the config and key-value tables, applies schema migrations, and
seeds default configuration
"""
from .connection import db_manager


DEFAULT_CONFIG = {
    'game_enabled': 'True',
    'announce_channel': 'None',
    'quest_poll_minutes': '1',
    'level_up_message': 'Congratulations {user}! You reached level {level}!',
}

# Same DDL works on both backends
TABLES = [
    'CREATE TABLE IF NOT EXISTS config (key TEXT PRIMARY KEY, value TEXT)',
    'CREATE TABLE IF NOT EXISTS db_version (version INTEGER PRIMARY KEY)',
    'CREATE TABLE IF NOT EXISTS kv_store (key TEXT PRIMARY KEY, value TEXT NOT NULL)',
]

SCHEMA_VERSION = 1


class DatabaseSetup:
    """Brings a fresh or older database up to the current schema"""

    def __init__(self, db=None):
        self.db = db or db_manager

    def initialize_database(self):
        print("[DB] 🔧 Initializing database...")
        self._in_transaction('create tables', self._create_tables)
        self._in_transaction('run migrations', self._run_migrations)
        self._in_transaction('seed config', self._populate_initial_data)
        print("[DB] ✅ Database ready")

    def _in_transaction(self, step: str, work):
        """Run one setup step on its own connection, committing only if it succeeds"""
        conn = self.db.get_connection()
        try:
            work(conn.cursor())
            conn.commit()
        except Exception as e:
            print(f"[DB] ❌ Failed to {step}: {e}")
            raise
        finally:
            conn.close()

    def _create_tables(self, cursor):
        for statement in TABLES:
            cursor.execute(statement)

    def _run_migrations(self, cursor):
        cursor.execute('SELECT version FROM db_version ORDER BY version DESC LIMIT 1')
        row = cursor.fetchone()
        current_version = row[0] if row else 0

        if current_version < 1:
            # v1: record when each stored document last changed
            self._add_updated_at_column(cursor)
            self._record_version(cursor, 1)

        print(f"[DB] Schema at version {max(current_version, SCHEMA_VERSION)}")

    def _add_updated_at_column(self, cursor):
        if self.db.db_type == 'postgresql':
            cursor.execute('ALTER TABLE kv_store ADD COLUMN IF NOT EXISTS updated_at TEXT')
            return

        cursor.execute('PRAGMA table_info(kv_store)')
        if 'updated_at' not in [column[1] for column in cursor.fetchall()]:
            cursor.execute('ALTER TABLE kv_store ADD COLUMN updated_at TEXT')

    def _record_version(self, cursor, version: int):
        if self.db.db_type == 'postgresql':
            cursor.execute('INSERT INTO db_version (version) VALUES (%s) ON CONFLICT (version) DO NOTHING', (version,))
        else:
            cursor.execute('INSERT OR IGNORE INTO db_version (version) VALUES (?)', (version,))

    def _populate_initial_data(self, cursor):
        """Insert default config keys without overwriting edited values"""
        if self.db.db_type == 'postgresql':
            insert = 'INSERT INTO config (key, value) VALUES (%s, %s) ON CONFLICT (key) DO NOTHING'
        else:
            insert = 'INSERT OR IGNORE INTO config (key, value) VALUES (?, ?)'

        for key, value in DEFAULT_CONFIG.items():
            cursor.execute(insert, (key, value))


# Global database setup instance
db_setup = DatabaseSetup()
