# database.py
import sqlite3
import os
import logging
from urllib.parse import urlparse

import psycopg2

from config import Config

logger = logging.getLogger(__name__)


def get_db():
    """Get database connection with proper error handling"""
    # Use PostgreSQL if DATABASE_URL is set (production)
    database_url = os.environ.get('DATABASE_URL')
    if database_url:
        try:
            # Parse the database URL
            result = urlparse(database_url)

            # Connect to PostgreSQL
            return psycopg2.connect(
                database=result.path[1:],
                user=result.username,
                password=result.password,
                host=result.hostname,
                port=result.port,
                sslmode='require'
            )
        except Exception as e:
            logger.warning(f"PostgreSQL connection failed: {e}. Falling back to SQLite.")
            return get_sqlite_db()
    else:
        # Use SQLite for development
        return get_sqlite_db()


def get_sqlite_db():
    """Get SQLite database connection"""
    path = os.environ.get('DB_PATH') or Config.DB_PATH
    try:
        conn = sqlite3.connect(path)
        conn.row_factory = sqlite3.Row
        return conn
    except Exception as e:
        logger.error(f"SQLite connection failed: {e}")
        raise


def is_postgres(conn):
    """Check if connection is PostgreSQL"""
    return hasattr(conn, 'pgconn') or 'psycopg2' in str(type(conn))


def execute_query(cur, query, params=None):
    """Execute query with proper parameter formatting for database type"""
    if params is None:
        params = ()

    # Check if we're using PostgreSQL by looking at cursor type
    if 'psycopg2' in str(type(cur)):
        # Convert SQLite ? placeholders to %s for PostgreSQL
        query = query.replace('?', '%s')

    cur.execute(query, params)
    return cur


def init_db():
    conn = None
    try:
        conn = get_db()
        cur = conn.cursor()

        # Both dialects accept the same DDL for these tables
        cur.execute("""
            CREATE TABLE IF NOT EXISTS players(
                name TEXT PRIMARY KEY,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cur.execute("""
            CREATE TABLE IF NOT EXISTS best_times(
                player_name TEXT NOT NULL REFERENCES players(name),
                difficulty TEXT NOT NULL,
                seconds INTEGER NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY(player_name, difficulty)
            )
        """)

        conn.commit()
        logger.info(f"Database tables ready ({'postgresql' if is_postgres(conn) else 'sqlite'})")

    except Exception as e:
        logger.error(f"Database initialization error: {e}")
        if conn:
            conn.rollback()
        raise
    finally:
        if conn:
            conn.close()


def get_db_connection():
    """Get database connection with proper error handling"""
    try:
        return get_db()
    except Exception as e:
        logger.error(f"Database connection error: {e}")
        # Try to reinitialize and reconnect once
        try:
            init_db()
            return get_db()
        except Exception as e2:
            logger.error(f"Failed to reconnect to database: {e2}")
            raise Exception("Database connection failed") from e2


def _value(row, key, index):
    return row[key] if isinstance(row, (dict, sqlite3.Row)) else row[index]


def create_player(name):
    """Create a player profile. Creating an existing profile is a no-op."""
    name = (name or '').strip()
    if not name:
        raise ValueError("Player name is required")

    conn = get_db_connection()
    cur = conn.cursor()
    try:
        execute_query(cur, 'SELECT name FROM players WHERE name=?', (name,))
        if cur.fetchone() is None:
            execute_query(cur, 'INSERT INTO players(name) VALUES(?)', (name,))
            conn.commit()
            logger.info(f"Player profile created: {name}")
        return name
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


def get_best_times(name):
    """All personal bests for a player as {difficulty: seconds}."""
    conn = get_db_connection()
    cur = conn.cursor()
    try:
        execute_query(cur, 'SELECT difficulty, seconds FROM best_times WHERE player_name=?', (name,))
        return {_value(row, 'difficulty', 0): _value(row, 'seconds', 1) for row in cur.fetchall()}
    finally:
        cur.close()
        conn.close()


def get_best_time(name, difficulty):
    conn = get_db_connection()
    cur = conn.cursor()
    try:
        execute_query(cur, 'SELECT seconds FROM best_times WHERE player_name=? AND difficulty=?',
                      (name, difficulty))
        row = cur.fetchone()
        return _value(row, 'seconds', 0) if row else None
    finally:
        cur.close()
        conn.close()


def save_best_time(name, difficulty, seconds):
    """
    Store seconds as the player's best for difficulty if there is no
    record yet or it is strictly faster. The read, compare and write run
    in one transaction. Returns True when a record was written.
    """
    conn = None
    cur = None
    try:
        conn = get_db_connection()
        cur = conn.cursor()
        execute_query(cur, 'SELECT seconds FROM best_times WHERE player_name=? AND difficulty=?',
                      (name, difficulty))
        row = cur.fetchone()

        if row is None:
            execute_query(cur, 'INSERT INTO best_times(player_name, difficulty, seconds) VALUES(?,?,?)',
                          (name, difficulty, seconds))
        elif seconds < _value(row, 'seconds', 0):
            execute_query(cur, '''
                UPDATE best_times SET seconds=?, updated_at=CURRENT_TIMESTAMP
                WHERE player_name=? AND difficulty=?
            ''', (seconds, name, difficulty))
        else:
            return False

        conn.commit()
        logger.info(f"New best time for {name} ({difficulty}): {seconds}s")
        return True

    except Exception as e:
        logger.error(f"Best time write failed for {name} ({difficulty}): {e}")
        if conn:
            conn.rollback()
        return False

    finally:
        if cur:
            cur.close()
        if conn:
            conn.close()
