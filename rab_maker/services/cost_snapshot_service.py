"""
Cost snapshot store.

Owns the project_item_costs rows of a work item. Every write here happens
inside the caller's write transaction; nothing in this module commits.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import case
from sqlalchemy.exc import SQLAlchemyError

from rab_maker.exceptions import StorageError
from rab_maker.models import ItemType, LaborType, Material, ProjectItemCost
from rab_maker.services.cost_calculation_service import calculate_cost_lines

logger = logging.getLogger(__name__)


def replace_snapshot(session, work_item_id: int, items: List[Dict[str, Any]]) -> int:
    """
    Replace every cost row of a work item with `items`.

    An empty list clears the snapshot. The delete and the inserts are
    flushed in the caller's transaction, so readers see either the old
    rows or the new ones.

    Returns:
        Number of rows inserted
    """
    try:
        deleted = delete_by_work_item(session, work_item_id)
        session.add_all([ProjectItemCost(**item) for item in items])
        session.flush()
    except SQLAlchemyError as e:
        raise StorageError(f'Gagal menyimpan rincian biaya: {str(e)}') from e

    logger.info(f"Work item {work_item_id}: replaced {deleted} cost rows with {len(items)}")
    return len(items)


def delete_by_work_item(session, work_item_id: int) -> int:
    """Delete all cost rows of a work item. Returns the number deleted."""
    costs = session.query(ProjectItemCost).filter(
        ProjectItemCost.work_item_id == work_item_id
    ).all()

    for cost in costs:
        session.delete(cost)
    session.flush()

    return len(costs)


def calculate_and_replace(session, work_item_id: int, template_id: Optional[int], volume: float) -> int:
    """
    Recalculate a work item's costs from its template and store them.

    Without a template the snapshot is cleared.
    """
    lines = calculate_cost_lines(session, template_id, volume, work_item_id)
    return replace_snapshot(session, work_item_id, lines)


def find_by_work_item(session, work_item_id: int) -> List[Dict[str, Any]]:
    """
    Cost rows of a work item, ordered by (item_type, item_name).

    Each row carries the unit of the current catalog entry, or '' if the
    entry is gone.
    """
    unit = case(
        (ProjectItemCost.item_type == ItemType.MATERIAL, Material.unit),
        (ProjectItemCost.item_type == ItemType.LABOR, LaborType.unit),
        else_='',
    ).label('unit')

    try:
        rows = (
            session.query(ProjectItemCost, unit)
            .outerjoin(Material, (ProjectItemCost.item_type == ItemType.MATERIAL) & (Material.id == ProjectItemCost.master_item_id))
            .outerjoin(LaborType, (ProjectItemCost.item_type == ItemType.LABOR) & (LaborType.id == ProjectItemCost.master_item_id))
            .filter(ProjectItemCost.work_item_id == work_item_id)
            .order_by(ProjectItemCost.item_type, ProjectItemCost.item_name, ProjectItemCost.id)
            .all()
        )
    except SQLAlchemyError as e:
        raise StorageError(f'Gagal membaca rincian biaya: {str(e)}') from e

    result = []
    for cost, unit_value in rows:
        row = cost.to_dict()
        row['unit'] = unit_value or ''
        result.append(row)
    return result


# Name used by the work item handlers
get_line_items = find_by_work_item
