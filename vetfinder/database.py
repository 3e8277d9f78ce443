"""DB connection and session management"""
import logging
import math
import threading
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session
from sqlalchemy.pool import StaticPool

from .config import DATABASE_URL, DB_ECHO
from .errors import StoreUnavailable, QueryFailed

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _null_safe(fn):
    def wrapper(*args):
        if any(a is None for a in args):
            return None
        return fn(*args)
    return wrapper


# Math functions used by geo.distance_expression; most SQLite builds lack them.
# lower() replaces the builtin, which only folds ASCII letters.
SQLITE_FUNCTIONS = {
    "lower": (1, lambda s: s.lower() if isinstance(s, str) else s),
    "radians": (1, math.radians),
    "sin": (1, math.sin),
    "cos": (1, math.cos),
    "asin": (1, lambda x: math.asin(max(-1.0, min(1.0, x)))),
    "sqrt": (1, lambda x: math.sqrt(max(0.0, x))),
    "power": (2, math.pow),
}


def _configure_sqlite(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    for name, (nargs, fn) in SQLITE_FUNCTIONS.items():
        dbapi_conn.create_function(name, nargs, _null_safe(fn), deterministic=True)


class Database:
    """Lazily connected engine + session factory, shared for the life of the process.

    The engine is created on first use; concurrent first users are serialised
    by a lock so only one engine is ever built.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine = None
        self._sessionmaker = None
        self._lock = threading.Lock()

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def _create_engine(self) -> Engine:
        kwargs = {"echo": self.echo}
        if self.is_sqlite:
            kwargs["connect_args"] = {"check_same_thread": False}
            # in-memory databases live as long as their single connection
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True

        engine = create_engine(self.url, **kwargs)
        if self.is_sqlite:
            event.listen(engine, "connect", _configure_sqlite)
        logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
        return engine

    def _ensure_engine(self) -> Engine:
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    engine = self._create_engine()
                    self._sessionmaker = sessionmaker(bind=engine, autocommit=False, autoflush=False)
                    self._engine = engine
        return self._engine

    @property
    def engine(self) -> Engine:
        return self._ensure_engine()

    def session(self) -> Session:
        self._ensure_engine()
        return self._sessionmaker()

    def create_all(self):
        with translate_store_errors():
            Base.metadata.create_all(self.engine)

    def dispose(self):
        if self._engine is not None:
            self._engine.dispose()


@contextmanager
def translate_store_errors():
    """Re-raise SQLAlchemy failures as StoreUnavailable / QueryFailed"""
    try:
        yield
    except OperationalError as e:
        if _is_query_error(e):
            logger.error(f"Query failed: {e}")
            raise QueryFailed(str(e)) from e
        logger.error(f"Store unavailable: {e}")
        raise StoreUnavailable(str(e)) from e
    except (InterfaceError, DisconnectionError) as e:
        logger.error(f"Store unavailable: {e}")
        raise StoreUnavailable(str(e)) from e
    except SQLAlchemyError as e:
        logger.error(f"Query failed: {e}")
        raise QueryFailed(str(e)) from e


def _is_query_error(e: OperationalError) -> bool:
    # SQLite reports schema problems ("no such table") as OperationalError
    if e.connection_invalidated:
        return False
    message = str(e.orig).lower() if e.orig is not None else ""
    return "no such" in message or "syntax error" in message


database = Database(DATABASE_URL, echo=DB_ECHO)


def get_db():
    """FastAPI Depends"""
    db = database.session()
    try:
        yield db
    finally:
        db.close()
