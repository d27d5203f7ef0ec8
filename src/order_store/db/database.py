"""Database connection and session management"""
from contextlib import contextmanager
from sqlalchemy import create_engine, make_url, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = None
SessionLocal = None


def is_in_memory_sqlite(database_url: str) -> bool:
    """True for sqlite:// and :memory: URLs, where the database lives inside one connection"""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return False
    return url.database in (None, "", ":memory:") or url.query.get("mode") == "memory"


def build_engine(database_url: str) -> Engine:
    """Create an engine suited to the database behind the URL"""
    if is_in_memory_sqlite(database_url):
        # One shared connection so an in-memory database is visible to every thread
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False
        )

    if make_url(database_url).get_backend_name() == "sqlite":
        # File databases keep a connection per session so transactions stay isolated
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=False
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        echo=False
    )


def build_session_factory(bind: Engine) -> sessionmaker:
    """Session factory bound to an engine"""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


def init_database(database_url: str) -> Engine:
    """Initialize the application's database connection"""
    global engine, SessionLocal

    logger.info("Initializing database connection")

    engine = build_engine(database_url)
    SessionLocal = build_session_factory(engine)
    logger.info("Database connection initialized")

    return engine


def create_tables(bind: Engine = None):
    """Create all tables"""
    # Registers the order tables on Base.metadata
    from order_store.models import order  # noqa: F401

    logger.info("Creating database tables")
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created")


def drop_tables(bind: Engine = None):
    """Drop all tables"""
    from order_store.models import order  # noqa: F401

    logger.info("Dropping database tables")
    Base.metadata.drop_all(bind=bind or engine)


@contextmanager
def session_scope(session_factory: sessionmaker = None) -> Generator[Session, None, None]:
    """Yield a session and close it when the block exits"""
    factory = session_factory or SessionLocal
    if factory is None:
        raise RuntimeError("Database is not initialized; call init_database() first")

    db = factory()
    try:
        yield db
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """Dependency for getting database session"""
    with session_scope() as db:
        yield db


def check_connection(db: Session) -> None:
    """Run a trivial query; raises when the database is unreachable"""
    db.execute(text("SELECT 1"))
