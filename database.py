import json
import sqlite3


class Database:
    def __init__(self, db_name="events.db"):
        """
        Initialize the SQLite-backed key/value store.
        Behaves like browser local storage: string keys, string values,
        everything else is JSON serialized by the caller or the json helpers.
        """
        self.conn = sqlite3.connect(db_name, check_same_thread=False)
        self.create_tables()

    def create_tables(self):
        """Create the storage table."""
        cursor = self.conn.cursor()
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS storage (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        ''')
        self.conn.commit()

    def get_item(self, key):
        """Return the raw string stored under key, or None."""
        cursor = self.conn.cursor()
        cursor.execute('SELECT value FROM storage WHERE key = ?', (key,))
        row = cursor.fetchone()
        return row[0] if row else None

    def set_item(self, key, value):
        """Store value under key, stringified like local storage does."""
        cursor = self.conn.cursor()
        cursor.execute('''
            INSERT INTO storage (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
        ''', (key, str(value)))
        self.conn.commit()

    def remove_item(self, key):
        """Remove key. Missing keys are ignored."""
        cursor = self.conn.cursor()
        cursor.execute('DELETE FROM storage WHERE key = ?', (key,))
        self.conn.commit()

    def has_item(self, key):
        return self.get_item(key) is not None

    def keys(self):
        """Return all stored keys in insertion order."""
        cursor = self.conn.cursor()
        cursor.execute('SELECT key FROM storage ORDER BY rowid')
        return [row[0] for row in cursor.fetchall()]

    def clear(self):
        """Remove every key."""
        cursor = self.conn.cursor()
        cursor.execute('DELETE FROM storage')
        self.conn.commit()

    def get_json(self, key, default=None):
        """Parse the JSON value under key; default when the key is absent."""
        raw = self.get_item(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set_json(self, key, value):
        self.set_item(key, json.dumps(value))

    def close(self):
        """Close the database connection."""
        self.conn.close()
