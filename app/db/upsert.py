# File: app/db/upsert.py
"""
Dialect-aware INSERT ... ON CONFLICT helpers.

Uniqueness constraints are the arbiter for concurrent writers, so rows are
written with the database's native upsert instead of SELECT-then-INSERT.
"""
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


def insert_for(db: Session, model):
    """Return an ``insert()`` construct for ``model`` that supports ``on_conflict_*``."""
    table = getattr(model, "__table__", model)
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise RuntimeError(f"Unsupported database dialect for upsert: {dialect}")
