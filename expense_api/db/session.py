from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from fastapi import Request

from expense_api.core.config import Settings

# This Base class tracks all our models
Base = declarative_base()


class Database:
    """Owns the engine and the session factory for one process.

    Built once at startup and passed around explicitly instead of living in
    a module global. The pool has a fixed size with no overflow, so extra
    callers wait up to ``DB_POOL_TIMEOUT`` seconds for a free connection.
    """

    def __init__(self, url: str, pool_size: int = 10, pool_timeout: float = 30):
        connect_args = {}
        if url.startswith("sqlite"):
            # Requests are served from a threadpool
            connect_args["check_same_thread"] = False

        # pool_pre_ping=True handles "stale" connections gracefully
        self.engine = create_engine(
            url,
            pool_pre_ping=True,
            pool_size=pool_size,
            max_overflow=0,
            pool_timeout=pool_timeout,
            connect_args=connect_args,
        )
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.DATABASE_URL,
            pool_size=settings.DB_POOL_SIZE,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )

    def create_all(self) -> None:
        # Import models so they register on Base.metadata
        from expense_api.models import expense, snapshot  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self):
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


# The Dependency
# One session per request, closed automatically when the request is done.
def get_db(request: Request):
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
