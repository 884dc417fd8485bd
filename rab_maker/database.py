"""Database configuration and initialization."""
import logging
import threading
from contextlib import contextmanager

from sqlalchemy import BigInteger, Integer, create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Create SQLAlchemy base
Base = declarative_base()

# BIGINT keys do not autoincrement on SQLite, INTEGER ones do
IdType = BigInteger().with_variant(Integer, 'sqlite')

# Global session and engine
engine = None
db_session = None

# Single writer per process: every mutating service call holds this lock
_write_lock = threading.RLock()

# Nesting depth of write_transaction per thread
_write_state = threading.local()


def _configure_sqlite(sqlite_engine):
    """
    Enable foreign keys and let SQLAlchemy own transaction boundaries.

    pysqlite does not emit BEGIN on its own in a way that supports SAVEPOINT,
    so autocommit is switched off at the driver level and BEGIN is emitted
    explicitly when a transaction starts.
    """
    @event.listens_for(sqlite_engine, 'connect')
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()

    @event.listens_for(sqlite_engine, 'begin')
    def _on_begin(conn):
        conn.exec_driver_sql('BEGIN')


def build_engine(database_uri, echo=False):
    """Create the engine for a database URL, with the SQLite setup applied."""
    engine_kwargs = {'echo': echo}

    if database_uri.startswith('sqlite'):
        engine_kwargs['connect_args'] = {'check_same_thread': False}
        if database_uri in ('sqlite://', 'sqlite:///:memory:'):
            # In-memory database must be shared by every session
            engine_kwargs['poolclass'] = StaticPool
    else:
        engine_kwargs.update(pool_pre_ping=True, pool_size=10, max_overflow=20)

    new_engine = create_engine(database_uri, **engine_kwargs)

    if new_engine.dialect.name == 'sqlite':
        _configure_sqlite(new_engine)
    return new_engine


def init_db(app):
    """Initialize database connection."""
    global engine, db_session

    engine = build_engine(
        app.config['SQLALCHEMY_DATABASE_URI'],
        echo=app.config.get('SQLALCHEMY_ECHO', False)
    )

    db_session = scoped_session(
        sessionmaker(autoflush=False, bind=engine)
    )

    Base.query = db_session.query_property()

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def create_all():
    """Create every table known to the models package."""
    import rab_maker.models  # noqa: F401  (registers the mappers)
    Base.metadata.create_all(bind=engine)


def drop_all():
    """Drop every table known to the models package."""
    import rab_maker.models  # noqa: F401
    Base.metadata.drop_all(bind=engine)


def get_session():
    """Get database session."""
    return db_session


@contextmanager
def write_transaction(session):
    """
    Run a block of writes as one serialized, atomic unit.

    Commits when the block finishes, rolls back on any exception.
    Application errors are re-raised unchanged; driver errors are
    re-raised as StorageError. A nested call joins the outer unit.
    """
    from rab_maker.exceptions import RabError, StorageError

    if getattr(_write_state, 'depth', 0):
        yield session
        return

    # A read transaction still open on this session keeps a SQLite SHARED
    # lock, which would stop the lock holder from committing while we wait.
    real_session = session() if isinstance(session, scoped_session) else session
    if real_session.in_transaction():
        try:
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Could not close pending read transaction: {e}")
            raise StorageError(f'Gagal menyimpan data: {str(e)}') from e

    with _write_lock:
        _write_state.depth = 1
        try:
            yield session
            session.commit()
        except RabError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Write transaction rolled back: {e}")
            raise StorageError(f'Gagal menyimpan data: {str(e)}') from e
        except Exception:
            session.rollback()
            raise
        finally:
            _write_state.depth = 0
