import sqlite3
from typing import Optional, Tuple
from app_logging import app_logger


class StoreError(Exception):
    """Raised for any database failure other than a missing row."""


SCHEMA = '''
    CREATE TABLE IF NOT EXISTS comics (
        id INTEGER NOT NULL PRIMARY KEY,
        imageURL TEXT
    );
    CREATE TABLE IF NOT EXISTS prefs (
        key TEXT NOT NULL PRIMARY KEY,
        val TEXT NOT NULL
    );
'''


class ComicStore:
    """
    Local cache of comic id -> image URL, backed by SQLite.

    Holds a single connection and exposes only the operations the sync loop
    needs. The prefs table is created but never read or written.
    """

    def __init__(self, conn: sqlite3.Connection, path: str):
        self._conn = conn
        self.path = path

    @classmethod
    def open(cls, path: str) -> "ComicStore":
        """
        Open (or create) the database at path and ensure the tables exist.

        Raises:
            StoreError: if the file cannot be opened or the schema fails
        """
        try:
            conn = sqlite3.connect(path, timeout=30)
        except sqlite3.Error as e:
            raise StoreError(f'Failed to open db "{path}": {e}') from e

        try:
            conn.executescript(SCHEMA)
            conn.commit()
        except sqlite3.Error as e:
            app_logger.error(f"Schema creation failed for {path}: {e}")
            conn.close()
            raise StoreError(f"Failed to initialize db schema: {e}") from e

        app_logger.debug(f"Opened comic store at {path}")
        return cls(conn, path)

    def lookup_image_url(self, comic_id: int) -> Tuple[Optional[str], bool]:
        """
        Look up the cached image URL for a comic.

        Returns:
            (url, True) when cached, (None, False) when the id is unknown

        Raises:
            StoreError: on any query failure
        """
        try:
            row = self._conn.execute(
                'SELECT imageURL FROM comics WHERE id = ?', (comic_id,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Lookup of comic {comic_id} failed: {e}") from e

        if row is None:
            return None, False
        return row[0], True

    def insert_comic(self, comic_id: int, image_url: str):
        """Insert a new comic record. The id must not already be cached."""
        try:
            self._conn.execute(
                'INSERT INTO comics (id, imageURL) VALUES (?, ?)',
                (comic_id, image_url)
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Insert of comic {comic_id} failed: {e}") from e

    def count_comics(self) -> int:
        try:
            return self._conn.execute('SELECT COUNT(*) FROM comics').fetchone()[0]
        except sqlite3.Error as e:
            raise StoreError(f"Counting comics failed: {e}") from e

    def close(self):
        self._conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
