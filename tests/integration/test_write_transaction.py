"""
Integration tests for write_transaction on a file-backed SQLite database.
"""

import threading
import time

import pytest
from sqlalchemy.orm import sessionmaker

from rab_maker.database import Base, build_engine, write_transaction
from rab_maker.exceptions import BusinessLogicError
from rab_maker.models import AppUser, Project
from rab_maker.services.project_service import create_project


@pytest.fixture
def file_engine(tmp_path):
    """Engine on a SQLite file, so each session gets its own connection."""
    engine = build_engine(f"sqlite:///{tmp_path / 'rab_maker.sqlite'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def owner_id(file_engine):
    session = sessionmaker(bind=file_engine)()
    user = AppUser(username='budi', active=True)
    session.add(user)
    session.commit()
    user_id = user.id
    session.close()
    return user_id


class TestConcurrentWriters:

    def test_reader_waiting_for_lock_does_not_block_writer(self, file_engine, owner_id):
        """A session that has read before writing must not hold the current writer's commit hostage."""
        Session = sessionmaker(bind=file_engine, autoflush=False)
        writer_flushed = threading.Event()
        reader_started = threading.Event()
        results = {}

        def writer():
            session = Session()
            try:
                with write_transaction(session):
                    session.add(Project(user_id=owner_id, name='Gudang', location='Cimahi', client_name='PT Maju'))
                    session.flush()
                    writer_flushed.set()
                    reader_started.wait(5)
                    # Give the other thread time to queue on the lock
                    time.sleep(0.3)
                results['writer'] = 'committed'
            except Exception as e:
                results['writer'] = f'{type(e).__name__}: {e}'
            finally:
                session.close()

        def reader_then_writer():
            session = Session()
            try:
                writer_flushed.wait(5)
                # Same pattern as a request: load the user, then write
                session.query(AppUser).filter_by(id=owner_id).first()
                reader_started.set()
                create_project(session, owner_id, 'Rumah Tinggal', 'Bandung', 'Pak Joko')
                results['reader'] = 'committed'
            except Exception as e:
                results['reader'] = f'{type(e).__name__}: {e}'
            finally:
                session.close()

        threads = [threading.Thread(target=writer), threading.Thread(target=reader_then_writer)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(30)

        assert results == {'writer': 'committed', 'reader': 'committed'}

        session = Session()
        names = sorted(name for (name,) in session.query(Project.name).all())
        session.close()
        assert names == ['Gudang', 'Rumah Tinggal']


class TestNesting:

    def test_inner_block_joins_outer_transaction(self, file_engine, owner_id):
        session = sessionmaker(bind=file_engine, autoflush=False)()

        with pytest.raises(BusinessLogicError):
            with write_transaction(session):
                session.add(Project(user_id=owner_id, name='Ruko', location='Garut', client_name='Bu Rina'))
                with write_transaction(session):
                    session.add(Project(user_id=owner_id, name='Kios', location='Garut', client_name='Bu Rina'))
                raise BusinessLogicError('batal')

        assert session.query(Project).count() == 0
        session.close()
