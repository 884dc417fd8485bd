import pytest

from rab_maker import create_app
from rab_maker.database import create_all, drop_all, get_session
from rab_maker.models import (
    AppUser, Material, LaborType, WorkCategory, AHSPTemplate,
    TemplateMaterialComponent, TemplateLaborComponent, Project,
)


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing (in-memory SQLite)."""
    app = create_app('config.TestConfig')
    return app


@pytest.fixture(autouse=True)
def app_context(app):
    """Fresh schema and an active app context for every test."""
    with app.app_context():
        create_all()
        yield
        get_session().remove()
        drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session():
    """Database session for testing."""
    session = get_session()
    yield session
    session.rollback()


@pytest.fixture(scope='function')
def user1(session):
    """Create first test user."""
    user = AppUser(username='budi', full_name='Budi Santoso', active=True)
    user.set_password('password123')
    session.add(user)
    session.commit()
    return user


@pytest.fixture(scope='function')
def user2(session):
    """Create second test user for ownership tests."""
    user = AppUser(username='siti', full_name='Siti Aminah', active=True)
    user.set_password('password123')
    session.add(user)
    session.commit()
    return user


@pytest.fixture(scope='function')
def semen(session, user1):
    """Material priced 100 per zak."""
    material = Material(user_id=user1.id, name='Semen', unit='zak', unit_price=100.0)
    session.add(material)
    session.commit()
    return material


@pytest.fixture(scope='function')
def pasir(session, user1):
    material = Material(user_id=user1.id, name='Pasir', unit='m3', unit_price=250000.0)
    session.add(material)
    session.commit()
    return material


@pytest.fixture(scope='function')
def pekerja(session, user1):
    """Labor type with a daily wage of 110.000."""
    labor_type = LaborType(user_id=user1.id, name='Pekerja', unit='OH', daily_wage=110000.0)
    session.add(labor_type)
    session.commit()
    return labor_type


@pytest.fixture(scope='function')
def category(session, user1):
    category = WorkCategory(user_id=user1.id, name='Pekerjaan Beton', display_order=1)
    session.add(category)
    session.commit()
    return category


@pytest.fixture(scope='function')
def template(session, user1, semen, pekerja):
    """
    Template 'Beton' per m3:
    - Semen x 0.5
    - Pekerja x 1.5
    """
    template = AHSPTemplate(user_id=user1.id, name='Beton', unit='m3')
    session.add(template)
    session.flush()
    session.add_all([
        TemplateMaterialComponent(template_id=template.id, material_id=semen.id, coefficient=0.5),
        TemplateLaborComponent(template_id=template.id, labor_type_id=pekerja.id, coefficient=1.5),
    ])
    session.commit()
    return template


@pytest.fixture(scope='function')
def sand_template(session, user1, pasir):
    """Second template using only Pasir x 2.0."""
    template = AHSPTemplate(user_id=user1.id, name='Urugan Pasir', unit='m3')
    session.add(template)
    session.flush()
    session.add(TemplateMaterialComponent(template_id=template.id, material_id=pasir.id, coefficient=2.0))
    session.commit()
    return template


@pytest.fixture(scope='function')
def project(session, user1):
    project = Project(user_id=user1.id, name='Rumah Tinggal', location='Bandung', client_name='Pak Joko')
    session.add(project)
    session.commit()
    return project


@pytest.fixture(scope='function')
def authenticated_client(client, user1):
    """Test client logged in as user1."""
    with client.session_transaction() as sess:
        sess['user_id'] = user1.id
    return client
