"""
Project and work item service.

Work item writes and their cost recalculation run in one write
transaction. How a failed calculation is treated depends on
COST_CALCULATION_STRICT:

- strict (default): the whole write fails and nothing is stored
- lenient: the calculation runs in a SAVEPOINT; on failure only the
  calculation is rolled back, the error is logged and the work item is
  still saved
"""
import logging
from typing import Any, Dict, List, Optional

from flask import current_app, has_app_context
from sqlalchemy import func

from rab_maker.database import write_transaction
from rab_maker.exceptions import BusinessLogicError, NotFoundError, OwnershipError
from rab_maker.models import AHSPTemplate, Project, ProjectItemCost, WorkCategory, WorkItem
from rab_maker.services.cost_snapshot_service import calculate_and_replace
from rab_maker.services.template_service import get_template
from rab_maker.services.work_category_service import get_work_category

logger = logging.getLogger(__name__)


# --- Projects ----------------------------------------------------------------

def _validate_project(name: str, location: str, client_name: str) -> None:
    for value, label in ((name, 'Nama proyek'), (location, 'Lokasi'), (client_name, 'Nama klien')):
        value = (value or '').strip()
        if len(value) < 3:
            raise BusinessLogicError(f'{label} minimal 3 karakter')
        if len(value) > 100:
            raise BusinessLogicError(f'{label} maksimal 100 karakter')


def get_project(session, project_id: int, user_id: int) -> Project:
    """
    Fetch a project owned by the user.

    Raises:
        NotFoundError: no such project
        OwnershipError: project belongs to another user
    """
    project = session.get(Project, project_id)
    if not project:
        raise NotFoundError(f'Proyek #{project_id} tidak ditemukan')
    if project.user_id != user_id:
        raise OwnershipError(f'Proyek #{project_id} bukan milik Anda')
    return project


def list_projects(session, user_id: int, search: Optional[str] = None) -> List[Project]:
    query = session.query(Project).filter(Project.user_id == user_id)
    if search:
        query = query.filter(Project.name.ilike(f'%{search.strip()}%'))
    return query.order_by(Project.created_at.desc(), Project.id.desc()).all()


def create_project(session, user_id: int, name: str, location: str, client_name: str) -> Project:
    _validate_project(name, location, client_name)
    with write_transaction(session):
        project = Project(
            user_id=user_id,
            name=name.strip(),
            location=location.strip(),
            client_name=client_name.strip()
        )
        session.add(project)
        session.flush()
    logger.info(f"Project {project.id} created by user {user_id}")
    return project


def update_project(session, project_id: int, user_id: int, name: str, location: str, client_name: str) -> Project:
    _validate_project(name, location, client_name)
    with write_transaction(session):
        project = get_project(session, project_id, user_id)
        project.name = name.strip()
        project.location = location.strip()
        project.client_name = client_name.strip()
    return project


def delete_project(session, project_id: int, user_id: int) -> None:
    """Delete a project together with its work items and their cost rows."""
    with write_transaction(session):
        project = get_project(session, project_id, user_id)
        session.delete(project)
    logger.info(f"Project {project_id} deleted by user {user_id}")


# --- Work items --------------------------------------------------------------

def _validate_work_item(description: str, volume, unit: str) -> None:
    if not description or not description.strip():
        raise BusinessLogicError('Uraian pekerjaan wajib diisi')
    if len(description.strip()) > 255:
        raise BusinessLogicError('Uraian pekerjaan maksimal 255 karakter')
    if volume is None or volume <= 0:
        raise BusinessLogicError('Volume harus lebih besar dari 0')
    if not unit or not unit.strip():
        raise BusinessLogicError('Satuan wajib diisi')
    if len(unit.strip()) > 50:
        raise BusinessLogicError('Satuan maksimal 50 karakter')


def _strict_mode(strict: Optional[bool]) -> bool:
    if strict is not None:
        return strict
    if has_app_context():
        return current_app.config.get('COST_CALCULATION_STRICT', True)
    return True


def _apply_costs(session, work_item: WorkItem, strict: bool) -> None:
    """Recalculate the work item's snapshot inside the current transaction."""
    if strict:
        calculate_and_replace(session, work_item.id, work_item.template_id, work_item.volume)
        return

    try:
        with session.begin_nested():
            calculate_and_replace(session, work_item.id, work_item.template_id, work_item.volume)
    except Exception as e:
        # Lenient mode: keep the work item, report the missing costs
        logger.error(
            f"Cost calculation failed for work item {work_item.id} "
            f"(template {work_item.template_id}); saved without recalculated costs: {e}",
            exc_info=True
        )


def get_work_item(session, work_item_id: int, user_id: int, project_id: Optional[int] = None) -> WorkItem:
    """
    Fetch a work item whose project is owned by the user.

    When project_id is given the work item must belong to that project.
    """
    work_item = session.get(WorkItem, work_item_id)
    if not work_item:
        raise NotFoundError(f'Item pekerjaan #{work_item_id} tidak ditemukan')
    if project_id is not None and work_item.project_id != project_id:
        raise OwnershipError(f'Item pekerjaan #{work_item_id} bukan bagian dari proyek ini')
    get_project(session, work_item.project_id, user_id)
    return work_item


def create_work_item(
    session,
    project_id: int,
    user_id: int,
    category_id: int,
    description: str,
    volume: float,
    unit: str,
    template_id: Optional[int] = None,
    strict: Optional[bool] = None
) -> WorkItem:
    """
    Create a work item and, when a template is attached, its cost snapshot.

    Args:
        session: SQLAlchemy session
        project_id: Owning project (must belong to user_id)
        user_id: Current user
        category_id: Work category visible to the user
        description, volume, unit: Bill of quantities line
        template_id: Optional AHSP template owned by the user
        strict: Override COST_CALCULATION_STRICT

    Returns:
        The created WorkItem
    """
    _validate_work_item(description, volume, unit)
    strict = _strict_mode(strict)

    with write_transaction(session):
        get_project(session, project_id, user_id)
        get_work_category(session, category_id, user_id)
        if template_id is not None:
            get_template(session, template_id, user_id)

        work_item = WorkItem(
            project_id=project_id,
            category_id=category_id,
            description=description.strip(),
            volume=volume,
            unit=unit.strip(),
            template_id=template_id
        )
        session.add(work_item)
        session.flush()

        if template_id is not None:
            _apply_costs(session, work_item, strict)

    logger.info(f"Work item {work_item.id} created in project {project_id}")
    return work_item


def update_work_item(
    session,
    work_item_id: int,
    project_id: int,
    user_id: int,
    category_id: int,
    description: str,
    volume: float,
    unit: str,
    template_id: Optional[int] = None,
    strict: Optional[bool] = None
) -> WorkItem:
    """
    Update a work item and rebuild its cost snapshot from scratch.

    The old cost rows are always removed; new ones are calculated from the
    (possibly new) template, volume and today's catalog prices. Detaching
    the template leaves the work item without cost rows.
    """
    _validate_work_item(description, volume, unit)
    strict = _strict_mode(strict)

    with write_transaction(session):
        work_item = get_work_item(session, work_item_id, user_id, project_id=project_id)
        get_work_category(session, category_id, user_id)
        if template_id is not None:
            get_template(session, template_id, user_id)

        work_item.category_id = category_id
        work_item.description = description.strip()
        work_item.volume = volume
        work_item.unit = unit.strip()
        work_item.template_id = template_id
        session.flush()

        _apply_costs(session, work_item, strict)

    logger.info(f"Work item {work_item_id} updated in project {project_id}")
    return work_item


def delete_work_item(session, work_item_id: int, project_id: int, user_id: int) -> None:
    """Delete a work item; its cost rows go with it (ON DELETE CASCADE)."""
    with write_transaction(session):
        work_item = get_work_item(session, work_item_id, user_id, project_id=project_id)
        session.delete(work_item)
    logger.info(f"Work item {work_item_id} deleted from project {project_id}")


def list_work_items(session, project_id: int) -> List[Dict[str, Any]]:
    """
    Work items of a project with category, template and total cost.

    Ordered by category display order, then creation.
    """
    cost_totals = (
        session.query(
            ProjectItemCost.work_item_id.label('work_item_id'),
            func.sum(ProjectItemCost.total_cost).label('total_cost')
        )
        .group_by(ProjectItemCost.work_item_id)
        .subquery()
    )

    rows = (
        session.query(
            WorkItem,
            WorkCategory.name.label('category_name'),
            AHSPTemplate.name.label('template_name'),
            func.coalesce(cost_totals.c.total_cost, 0.0).label('total_cost')
        )
        .join(WorkCategory, WorkCategory.id == WorkItem.category_id)
        .outerjoin(AHSPTemplate, AHSPTemplate.id == WorkItem.template_id)
        .outerjoin(cost_totals, cost_totals.c.work_item_id == WorkItem.id)
        .filter(WorkItem.project_id == project_id)
        .order_by(WorkCategory.display_order, WorkCategory.name, WorkItem.id)
        .all()
    )

    result = []
    for work_item, category_name, template_name, total_cost in rows:
        row = work_item.to_dict()
        row['category_name'] = category_name
        row['template_name'] = template_name
        row['total_cost'] = float(total_cost or 0.0)
        row['unit_price'] = row['total_cost'] / work_item.volume if work_item.volume else 0.0
        result.append(row)

    logger.debug(f"Project {project_id} has {len(result)} work items")
    return result
