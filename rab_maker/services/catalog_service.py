"""
Reference catalog service - materials and labor types.

Entries without an owner form the shared default catalog: every user can
read them and use them in templates, nobody can edit them through here.
Price updates only change the catalog row; stored cost snapshots keep the
price they were calculated with.
"""
import logging
from typing import Optional

from sqlalchemy import or_

from rab_maker.database import write_transaction
from rab_maker.exceptions import BusinessLogicError, NotFoundError, OwnershipError
from rab_maker.models import LaborType, Material

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 100
UNIT_MAX_LENGTH = 20


def _validate_entry(name: str, unit: str, price, price_label: str) -> None:
    if not name or not name.strip():
        raise BusinessLogicError('Nama wajib diisi')
    if len(name.strip()) > NAME_MAX_LENGTH:
        raise BusinessLogicError(f'Nama maksimal {NAME_MAX_LENGTH} karakter')
    if not unit or not unit.strip():
        raise BusinessLogicError('Satuan wajib diisi')
    if len(unit.strip()) > UNIT_MAX_LENGTH:
        raise BusinessLogicError(f'Satuan maksimal {UNIT_MAX_LENGTH} karakter')
    if price is None or price < 0:
        raise BusinessLogicError(f'{price_label} harus lebih besar atau sama dengan 0')


def _get_entry(session, model, entry_id: int, user_id: int, label: str, for_update: bool):
    entry = session.get(model, entry_id)
    if not entry:
        raise NotFoundError(f'{label} #{entry_id} tidak ditemukan')
    if entry.user_id is not None and entry.user_id != user_id:
        raise OwnershipError(f'{label} #{entry_id} bukan milik Anda')
    if for_update and entry.user_id is None:
        raise OwnershipError(f'{label} bawaan sistem tidak dapat diubah')
    return entry


def _visible_query(session, model, user_id: int, search: Optional[str]):
    query = session.query(model).filter(
        or_(model.user_id == user_id, model.user_id.is_(None))
    )
    if search:
        query = query.filter(model.name.ilike(f'%{search.strip()}%'))
    return query.order_by(model.name, model.id)


# --- Materials ---------------------------------------------------------------

def get_material(session, material_id: int, user_id: int, for_update: bool = False) -> Material:
    """
    Fetch a material visible to the user.

    Raises:
        NotFoundError: no such material
        OwnershipError: material belongs to another user, or is a system
            entry and for_update is set
    """
    return _get_entry(session, Material, material_id, user_id, 'Material', for_update)


def list_materials(session, user_id: int, search: Optional[str] = None):
    """User's own materials plus the shared default ones."""
    return _visible_query(session, Material, user_id, search).all()


def create_material(session, user_id: int, name: str, unit: str, unit_price: float) -> Material:
    _validate_entry(name, unit, unit_price, 'Harga satuan')
    with write_transaction(session):
        material = Material(user_id=user_id, name=name.strip(), unit=unit.strip(), unit_price=unit_price)
        session.add(material)
        session.flush()
    logger.info(f"Material {material.id} created by user {user_id}")
    return material


def update_material(session, material_id: int, user_id: int, name: str, unit: str, unit_price: float) -> Material:
    """Update a material. Existing cost snapshots are not recalculated."""
    _validate_entry(name, unit, unit_price, 'Harga satuan')
    with write_transaction(session):
        material = get_material(session, material_id, user_id, for_update=True)
        old_price = material.unit_price
        material.name = name.strip()
        material.unit = unit.strip()
        material.unit_price = unit_price
    if old_price != unit_price:
        logger.info(f"Material {material_id} price changed {old_price} -> {unit_price}")
    return material


# --- Labor types -------------------------------------------------------------

def get_labor_type(session, labor_type_id: int, user_id: int, for_update: bool = False) -> LaborType:
    """Fetch a labor type visible to the user. Same rules as get_material."""
    return _get_entry(session, LaborType, labor_type_id, user_id, 'Jenis pekerja', for_update)


def list_labor_types(session, user_id: int, search: Optional[str] = None):
    """User's own labor types plus the shared default ones."""
    return _visible_query(session, LaborType, user_id, search).all()


def create_labor_type(session, user_id: int, name: str, unit: str, daily_wage: float) -> LaborType:
    _validate_entry(name, unit, daily_wage, 'Upah harian')
    with write_transaction(session):
        labor_type = LaborType(user_id=user_id, name=name.strip(), unit=unit.strip(), daily_wage=daily_wage)
        session.add(labor_type)
        session.flush()
    logger.info(f"Labor type {labor_type.id} created by user {user_id}")
    return labor_type


def update_labor_type(session, labor_type_id: int, user_id: int, name: str, unit: str, daily_wage: float) -> LaborType:
    """Update a labor type. Existing cost snapshots are not recalculated."""
    _validate_entry(name, unit, daily_wage, 'Upah harian')
    with write_transaction(session):
        labor_type = get_labor_type(session, labor_type_id, user_id, for_update=True)
        old_wage = labor_type.daily_wage
        labor_type.name = name.strip()
        labor_type.unit = unit.strip()
        labor_type.daily_wage = daily_wage
    if old_wage != daily_wage:
        logger.info(f"Labor type {labor_type_id} wage changed {old_wage} -> {daily_wage}")
    return labor_type
