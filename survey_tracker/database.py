"""
Database engine factory + declarative Base.

Defaults to SQLite for local dev, Postgres in production. Nothing is created
at import time: the app factory builds an engine for the configured URL and
hands it to SqlRecordStore.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def normalize_url(url):
    """Hosting platforms inject postgres:// but SQLAlchemy 2.x requires postgresql://"""
    return url.replace('postgres://', 'postgresql://', 1)


def make_engine(url):
    """Create an engine with kwargs suited to the backend."""
    url = normalize_url(url)

    # SQLite needs different engine kwargs than Postgres
    if url.startswith('sqlite'):
        return create_engine(url, connect_args={'check_same_thread': False})
    return create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)
