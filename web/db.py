"""Database utilities for SQLAlchemy session and engine management."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, scoped_session, sessionmaker

Base = declarative_base()
SessionLocal = scoped_session(sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False))
_ENGINE: Optional[Engine] = None


def init_db(app) -> Engine:
    """Initialize DB engine and scoped session for the application."""
    global _ENGINE

    db_url = app.config["DATABASE_URL"]
    kwargs = {"future": True, "pool_pre_ping": True}
    if db_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}

    _ENGINE = create_engine(db_url, **kwargs)
    SessionLocal.configure(bind=_ENGINE)

    from web import models  # noqa: F401 - registers model metadata

    if app.config.get("AUTO_CREATE_SCHEMA", False):
        Base.metadata.create_all(bind=_ENGINE)
        _ensure_schema_updates(_ENGINE)

    @app.teardown_appcontext
    def remove_session(exception=None):  # pylint: disable=unused-argument
        SessionLocal.remove()

    return _ENGINE


def _ensure_schema_updates(engine: Engine) -> None:
    """Apply lightweight additive schema upgrades for local/dev environments."""
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())

    statements = []
    if "yt_videos" in tables:
        columns = {col["name"] for col in inspector.get_columns("yt_videos")}
        if "duration" not in columns:
            statements.append("ALTER TABLE yt_videos ADD COLUMN duration INTEGER NOT NULL DEFAULT 0")
    if "yt_channels" in tables:
        columns = {col["name"] for col in inspector.get_columns("yt_channels")}
        if "videos_synced_at" not in columns:
            statements.append("ALTER TABLE yt_channels ADD COLUMN videos_synced_at DATETIME")

    if not statements:
        return

    with engine.begin() as conn:
        for stmt in statements:
            conn.execute(text(stmt))


def get_engine() -> Engine:
    if _ENGINE is None:
        raise RuntimeError("Database engine has not been initialized. Call init_db(app) first.")
    return _ENGINE
