"""Work category service."""
from sqlalchemy import or_

from rab_maker.database import write_transaction
from rab_maker.exceptions import BusinessLogicError, NotFoundError, OwnershipError
from rab_maker.models import WorkCategory


def _validate(name: str, display_order) -> None:
    if not name or not name.strip():
        raise BusinessLogicError('Nama kategori wajib diisi')
    if len(name.strip()) > 100:
        raise BusinessLogicError('Nama kategori maksimal 100 karakter')
    if display_order is not None and display_order < 0:
        raise BusinessLogicError('Urutan tampilan tidak boleh negatif')


def get_work_category(session, category_id: int, user_id: int, for_update: bool = False) -> WorkCategory:
    """Fetch a category visible to the user (own or system-wide)."""
    category = session.get(WorkCategory, category_id)
    if not category:
        raise NotFoundError(f'Kategori pekerjaan #{category_id} tidak ditemukan')
    if category.user_id is not None and category.user_id != user_id:
        raise OwnershipError(f'Kategori pekerjaan #{category_id} bukan milik Anda')
    if for_update and category.user_id is None:
        raise OwnershipError('Kategori bawaan sistem tidak dapat diubah')
    return category


def list_work_categories(session, user_id: int):
    """Categories ordered the way they appear in the bill of quantities."""
    return session.query(WorkCategory).filter(
        or_(WorkCategory.user_id == user_id, WorkCategory.user_id.is_(None))
    ).order_by(WorkCategory.display_order, WorkCategory.name, WorkCategory.id).all()


def create_work_category(session, user_id: int, name: str, display_order: int = 0) -> WorkCategory:
    _validate(name, display_order)
    with write_transaction(session):
        category = WorkCategory(user_id=user_id, name=name.strip(), display_order=display_order or 0)
        session.add(category)
        session.flush()
    return category


def update_work_category(session, category_id: int, user_id: int, name: str, display_order: int = 0) -> WorkCategory:
    _validate(name, display_order)
    with write_transaction(session):
        category = get_work_category(session, category_id, user_id, for_update=True)
        category.name = name.strip()
        category.display_order = display_order or 0
    return category
