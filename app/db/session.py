from sqlalchemy import event
from sqlmodel import Session, create_engine
from app.core.config import settings
from app.db import triggers  # noqa: F401


def _engine_kwargs(url: str) -> dict:
    if url.startswith('sqlite'):
        return {'connect_args': {'check_same_thread': False}}
    return {'pool_pre_ping': True}


def enable_sqlite_foreign_keys(target) -> None:
    """SQLite ignores ON DELETE rules unless the pragma is set per connection."""
    if target.dialect.name != 'sqlite':
        return

    @event.listens_for(target, 'connect')
    def _set_pragma(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))
enable_sqlite_foreign_keys(engine)


def get_session():
    with Session(engine) as session:
        yield session
