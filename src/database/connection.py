"""
Database Connection Manager
Picks PostgreSQL when DATABASE_URL points at one, otherwise a local SQLite file
"""
import os
import sqlite3
from typing import Optional

POSTGRES_CONNECT_TIMEOUT = 10


class DatabaseManager:
    """Opens short-lived connections and runs single statements against them"""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path
        self.db_type = self._detect_backend()

    def _connect_postgres(self):
        import psycopg2
        return psycopg2.connect(os.getenv('DATABASE_URL'), connect_timeout=POSTGRES_CONNECT_TIMEOUT,
                                sslmode='require')

    def _detect_backend(self) -> str:
        """Probe PostgreSQL once; any failure means SQLite"""
        database_url = os.getenv('DATABASE_URL') or ''

        # An explicit file path always wins, tests rely on it
        if not self.db_path and database_url.startswith('postgresql://'):
            print("[DB] 🗄️ DATABASE_URL found, probing PostgreSQL...")
            try:
                self._connect_postgres().close()
                print("[DB] ✅ Using PostgreSQL")
                return 'postgresql'
            except ImportError:
                print("[DB] ❌ psycopg2 missing (pip install studybuddy-bot[postgres]); using SQLite")
            except Exception as e:
                print(f"[DB] ❌ PostgreSQL unreachable ({e}); using SQLite")

        print(f"[DB] 🗄️ Using SQLite at {self._get_sqlite_path()}")
        return 'sqlite'

    def _get_sqlite_path(self) -> str:
        """Resolve the SQLite file for this environment"""
        if self.db_path:
            return self.db_path
        if os.getenv('SQLITE_PATH'):
            return os.getenv('SQLITE_PATH')
        if any(os.getenv(var) for var in ('RENDER', 'RAILWAY_ENVIRONMENT', 'PORT')):
            # Cloud hosts only guarantee /tmp to be writable
            return '/tmp/bot_data.db'
        return 'bot_data.db'

    def get_connection(self):
        """Open a new connection to the active backend"""
        if self.db_type == 'postgresql':
            return self._connect_postgres()
        return sqlite3.connect(self._get_sqlite_path())

    def _convert(self, query: str) -> str:
        """Queries are written with ? placeholders; psycopg2 wants %s"""
        return query.replace('?', '%s') if self.db_type == 'postgresql' else query

    def _run(self, query: str, params: Optional[tuple], fetch: Optional[str]):
        conn = self.get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(self._convert(query), params or ())
            if fetch == 'one':
                return cursor.fetchone()
            if fetch == 'all':
                return cursor.fetchall()
            conn.commit()
            return True
        finally:
            conn.close()

    def execute_query(self, query: str, params: Optional[tuple] = None):
        """Run a write statement and commit; errors are printed and re-raised"""
        try:
            return self._run(query, params, None)
        except Exception as e:
            print(f"[DB] ❌ Write failed: {e}\n[DB]    {query} {params}")
            raise

    def fetch_all(self, query: str, params: Optional[tuple] = None) -> list:
        try:
            return self._run(query, params, 'all')
        except Exception as e:
            print(f"[DB] ❌ Read failed: {e}")
            raise

    def fetch_one(self, query: str, params: Optional[tuple] = None):
        """Fetch a single row; a failed read counts as no row"""
        try:
            return self._run(query, params, 'one')
        except Exception as e:
            print(f"[DB] ⚠️ Read failed, treating as empty: {e}\n[DB]    {query} {params}")
            return None


# Global database manager instance
db_manager = DatabaseManager()
