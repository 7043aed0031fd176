"""Database setup utilities.

This module centralises the configuration of the SQLAlchemy
engine and session. It exposes the ``db`` object used by
models throughout the application. Keeping database setup in
a single place makes it easier to test and to switch
configurations if needed.

Import ``db`` from ``wellness_api`` rather than from this module
directly. The application factory initialises ``db`` with the
Flask app.
"""
from __future__ import annotations

import sqlite3

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

db = SQLAlchemy()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ships with foreign key enforcement switched off per connection.
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
