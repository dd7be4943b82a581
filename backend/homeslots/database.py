from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from .config import settings

_is_sqlite = settings.is_sqlite

# check_same_thread=False is required for SQLite under FastAPI's threadpool
engine = create_engine(
    settings.resolved_database_url,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
)


if _is_sqlite:
    @event.listens_for(engine, "connect")
    def configure_sqlite(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
        # Let SQLAlchemy emit BEGIN itself (see begin_sqlite_transaction)
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def begin_sqlite_transaction(conn):
        # Booking commits ask for a write lock up front so that two
        # concurrent capacity checks for the same day serialize.
        if conn.get_execution_options().get("sqlite_begin") == "IMMEDIATE":
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# FastAPI dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
