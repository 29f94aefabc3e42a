import logging
import psycopg2
from psycopg2 import errors as pg_errors, sql
from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from socialfeed.core.config import DATABASE_URL


def ensure_database(url: str) -> None:
    """Create the PostgreSQL database named in ``url`` if it doesn't exist yet."""
    db_url = make_url(url)
    if not db_url.drivername.startswith("postgresql"):
        return
    try:
        conn = psycopg2.connect(
            dbname="postgres",
            user=db_url.username,
            password=db_url.password,
            host=db_url.host,
            port=db_url.port,
        )
        conn.autocommit = True
        cur = conn.cursor()
        cur.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(db_url.database)))
        cur.close()
        conn.close()
    except pg_errors.DuplicateDatabase:
        pass
    except psycopg2.Error as e:
        logging.warning(f"Could not create database {db_url.database}: {e}")


def build_engine(url: str):
    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})

        # SQLite leaves foreign keys unenforced unless asked per connection
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    ensure_database(url)
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
