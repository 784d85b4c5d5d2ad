import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import declarative_base, sessionmaker
from filemanager.core.config import settings

logger = logging.getLogger(__name__)

# Choose engine options based on the database backend
db_url = settings.DATABASE_URL

if db_url.startswith("sqlite"):
    # SQLite settings
    connect_args = {"check_same_thread": False}
    engine = create_engine(
        db_url,
        echo=settings.DB_ECHO,
        connect_args=connect_args
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA temp_store=MEMORY")
        cursor.close()
else:
    # PostgreSQL / MySQL settings
    engine = create_engine(
        db_url,
        pool_size=settings.DB_POOL_SIZE,
        pool_pre_ping=True,  # check connection before handing it out
        pool_recycle=3600,   # recycle connections after 1 hour
        echo=settings.DB_ECHO,
    )

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def ensure_indexes():
    """Create indexes backing the sortable listing columns."""
    index_statements = [
        "CREATE INDEX IF NOT EXISTS idx_files_name ON files (name)",
        "CREATE INDEX IF NOT EXISTS idx_files_size ON files (size)",
        "CREATE INDEX IF NOT EXISTS idx_files_uploaded_at ON files (uploaded_at)",
    ]
    with engine.begin() as conn:
        for stmt in index_statements:
            conn.execute(text(stmt))


def init_db(drop: bool = False):
    """Create all tables, optionally dropping existing ones first."""
    from filemanager.db import base  # noqa: F401  registers models on Base

    if drop:
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    ensure_indexes()
    logger.info("Database ready (%s)", engine.url.render_as_string(hide_password=True))


def close_db():
    """Drain the connection pool."""
    engine.dispose()
    logger.info("Database connections closed")


def check_connection() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("Database connection check failed")
        return False


def get_db():
    """Dependency yielding a database session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
