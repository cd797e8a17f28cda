import threading

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

import config

DATABASE_URL = config.DATABASE_URL

if DATABASE_URL.startswith("sqlite"):
    # Sync endpoints run on the threadpool, so one connection may cross threads
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
    # SQLite leaves declared foreign keys unenforced unless asked per connection
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# Single writer for the whole store: every read-modify-commit sequence that
# mutates accounts, shares or files holds this lock until it has committed.
write_lock = threading.RLock()


def get_db():
    """Dependency - yields a DB session and always closes it after the request."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
