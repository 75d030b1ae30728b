"""SQLite helpers for the web application."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, Iterable, Sequence

import click
from flask import Flask, current_app, g
from flask.cli import with_appcontext

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"
SEEDS_DIR = Path(__file__).resolve().parent.parent / "seeds"
SCHEMA_VERSION = "0001_init"

logger = logging.getLogger(__name__)


class DatabaseError(RuntimeError):
    """Raised when the SQLite layer encounters an unexpected error."""


def get_db() -> sqlite3.Connection:
    """Return a connection for the current app context."""
    if "db" not in g:
        conn = sqlite3.connect(current_app.config["DATABASE"])
        conn.row_factory = sqlite3.Row
        g.db = conn
    return g.db  # type: ignore[return-value]


def close_db(_: object | None = None) -> None:
    """Close the connection stored in the application context."""
    db = g.pop("db", None)
    if db is not None:
        db.close()


def init_app(app: Flask) -> None:
    """Attach teardown handlers and CLI commands to the app."""
    app.teardown_appcontext(close_db)
    app.cli.add_command(init_db_command)


def ensure_schema(app: Flask) -> None:
    """Ensure the database schema and seed data are present."""
    initialize_database(app, drop_existing=False)


def initialize_database(app: Flask, *, drop_existing: bool) -> None:
    database_path = Path(app.config["DATABASE"])
    if drop_existing and database_path.exists():
        database_path.unlink()

    with app.app_context():
        db = get_db()
        try:
            if not _has_version(db, SCHEMA_VERSION):
                logger.info("Applying schema %s to %s", SCHEMA_VERSION, database_path)
                _apply_scripts(db, [MIGRATIONS_DIR / f"{SCHEMA_VERSION}.sql", SEEDS_DIR / "seed.sql"])
                db.commit()
        finally:
            close_db(None)


def _apply_scripts(db: sqlite3.Connection, scripts: Iterable[Path]) -> None:
    for script in scripts:
        try:
            db.executescript(script.read_text(encoding="utf-8"))
        except sqlite3.Error as exc:
            raise DatabaseError(f"{script.name}: {exc}") from exc


def _has_version(db: sqlite3.Connection, version: str) -> bool:
    cursor = db.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_migrations'"
    )
    if cursor.fetchone() is None:
        return False
    version_cursor = db.execute("SELECT 1 FROM schema_migrations WHERE version = ?", (version,))
    return version_cursor.fetchone() is not None


def query_one(sql: str, params: Sequence[Any] | None = None) -> sqlite3.Row | None:
    db = get_db()
    try:
        cur = db.execute(sql, params or [])
    except sqlite3.Error as exc:
        raise DatabaseError(str(exc)) from exc
    try:
        return cur.fetchone()
    finally:
        cur.close()


def query_all(sql: str, params: Sequence[Any] | None = None) -> list[sqlite3.Row]:
    db = get_db()
    try:
        cur = db.execute(sql, params or [])
    except sqlite3.Error as exc:
        raise DatabaseError(str(exc)) from exc
    try:
        return cur.fetchall()
    finally:
        cur.close()


def execute(sql: str, params: Sequence[Any] | None = None, *, commit: bool = True) -> sqlite3.Cursor:
    db = get_db()
    try:
        cur = db.execute(sql, params or [])
        if commit:
            db.commit()
    except sqlite3.Error as exc:
        db.rollback()
        raise DatabaseError(str(exc)) from exc
    return cur


def executemany(sql: str, seq_of_params: Iterable[Sequence[Any]], *, commit: bool = True) -> None:
    db = get_db()
    try:
        db.executemany(sql, seq_of_params)
        if commit:
            db.commit()
    except sqlite3.Error as exc:
        db.rollback()
        raise DatabaseError(str(exc)) from exc


def commit() -> None:
    get_db().commit()


@click.command("init-db")
@click.option("--force", is_flag=True, help="Recreate the database from scratch.")
@with_appcontext
def init_db_command(force: bool) -> None:
    """Initialize the database using the bundled migrations and seeds."""
    app = current_app._get_current_object()  # type: ignore[attr-defined]
    initialize_database(app, drop_existing=force)
    click.echo("Database initialized.")
