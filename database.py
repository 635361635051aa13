import os
import time
import logging

import psycopg2
from psycopg2.extras import RealDictCursor

from preferences import PreferenceStore

logger = logging.getLogger(__name__)


class PreferenceDB:
    def __init__(self, db_url=None):
        self.db_url = db_url or os.getenv('DATABASE_URL')
        if not self.db_url:
            raise ValueError("DATABASE_URL environment variable not set")

    def get_connection(self):
        """Get database connection with retry logic"""
        max_retries = 3
        for attempt in range(max_retries):
            try:
                return psycopg2.connect(self.db_url, cursor_factory=RealDictCursor)
            except psycopg2.OperationalError as e:
                logger.error(f"Database connection attempt {attempt + 1} failed: {e}")
                if attempt == max_retries - 1:
                    raise
                time.sleep(1)

    def init_database(self):
        """Initialize database tables"""
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS pet_preferences (
                        user_id VARCHAR(64) NOT NULL,
                        pref_key VARCHAR(64) NOT NULL,
                        pref_value TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        PRIMARY KEY (user_id, pref_key)
                    )
                """)
                conn.commit()
                logger.info("Database tables initialized successfully")

    def get_preference(self, user_id, key):
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("""
                    SELECT pref_value FROM pet_preferences
                    WHERE user_id = %s AND pref_key = %s
                """, (str(user_id), key))

                row = cur.fetchone()
                return row['pref_value'] if row else None

    def set_preference(self, user_id, key, value):
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO pet_preferences (user_id, pref_key, pref_value)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (user_id, pref_key) DO UPDATE SET
                        pref_value = EXCLUDED.pref_value,
                        updated_at = CURRENT_TIMESTAMP
                """, (str(user_id), key, value))
                conn.commit()


class PostgresPreferenceStore(PreferenceStore):
    """Preferences for one user stored in the pet_preferences table"""

    def __init__(self, user_id, db=None):
        self.user_id = str(user_id)
        self.db = db or PreferenceDB()

    def get(self, key):
        return self.db.get_preference(self.user_id, key)

    def set(self, key, value):
        self.db.set_preference(self.user_id, key, value)
