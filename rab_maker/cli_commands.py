"""
Flask CLI commands.

Commands:
- flask init-db: Create every table
- flask seed-defaults: Load the shared default catalog and work categories
- flask create-user: Create a user account
"""

import click

from rab_maker.database import create_all, get_session, write_transaction
from rab_maker.exceptions import RabError
from rab_maker.models import LaborType, Material, WorkCategory
from rab_maker.services.auth_service import register_user

DEFAULT_MATERIALS = [
    ('Semen Portland', 'zak', 65000),
    ('Pasir beton', 'm3', 280000),
    ('Pasir pasang', 'm3', 250000),
    ('Batu kali', 'm3', 300000),
    ('Kerikil / split', 'm3', 320000),
    ('Bata merah', 'buah', 900),
    ('Besi beton polos', 'kg', 15000),
    ('Kawat beton', 'kg', 25000),
    ('Kayu bekisting', 'm3', 3500000),
    ('Paku', 'kg', 22000),
]

DEFAULT_LABOR_TYPES = [
    ('Pekerja', 'OH', 110000),
    ('Tukang batu', 'OH', 130000),
    ('Tukang kayu', 'OH', 130000),
    ('Tukang besi', 'OH', 130000),
    ('Kepala tukang', 'OH', 150000),
    ('Mandor', 'OH', 160000),
]

DEFAULT_WORK_CATEGORIES = [
    ('Pekerjaan Persiapan', 1),
    ('Pekerjaan Tanah', 2),
    ('Pekerjaan Pondasi', 3),
    ('Pekerjaan Beton', 4),
    ('Pekerjaan Pasangan', 5),
    ('Pekerjaan Atap', 6),
    ('Pekerjaan Finishing', 7),
]


def _seed(session, model, rows, build):
    """Insert system-wide rows whose name is not present yet. Returns the count added."""
    existing = {
        name for (name,) in session.query(model.name).filter(model.user_id.is_(None)).all()
    }
    added = 0
    for row in rows:
        if row[0] in existing:
            continue
        session.add(build(*row))
        added += 1
    return added


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create the database tables."""
        create_all()
        click.echo(click.style('Tabel database berhasil dibuat.', fg='green'))

    @app.cli.command('seed-defaults')
    def seed_defaults():
        """Load the default materials, labor types and work categories."""
        session = get_session()

        try:
            with write_transaction(session):
                materials = _seed(
                    session, Material, DEFAULT_MATERIALS,
                    lambda name, unit, price: Material(user_id=None, name=name, unit=unit, unit_price=price)
                )
                labor_types = _seed(
                    session, LaborType, DEFAULT_LABOR_TYPES,
                    lambda name, unit, wage: LaborType(user_id=None, name=name, unit=unit, daily_wage=wage)
                )
                categories = _seed(
                    session, WorkCategory, DEFAULT_WORK_CATEGORIES,
                    lambda name, order: WorkCategory(user_id=None, name=name, display_order=order)
                )
        except RabError as e:
            click.echo(click.style(f'Gagal memuat data awal: {e.message}', fg='red'))
            raise SystemExit(1)

        click.echo(click.style('Data awal berhasil dimuat.', fg='green', bold=True))
        click.echo(f'   Material: {materials}')
        click.echo(f'   Jenis pekerja: {labor_types}')
        click.echo(f'   Kategori pekerjaan: {categories}')

    @app.cli.command('create-user')
    @click.option('--username', prompt=True, help='Login name')
    @click.option('--full-name', default='', help='Display name')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='User password')
    def create_user(username, full_name, password):
        """Create a user account."""
        session = get_session()

        try:
            user = register_user(session, username, password, full_name)
        except RabError as e:
            click.echo(click.style(f'Gagal membuat pengguna: {e.message}', fg='red'))
            raise SystemExit(1)

        click.echo(click.style('Pengguna berhasil dibuat.', fg='green', bold=True))
        click.echo(f'   Username: {user.username}')
        click.echo(f'   ID: {user.id}')
