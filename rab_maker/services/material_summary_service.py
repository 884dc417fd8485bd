"""
Material and labor summaries (rekap kebutuhan bahan dan upah).

Rolls up project_item_costs rows by catalog item, either for a single
project or for every project of an owner. Display name and unit come from
the live catalog entry, not from the frozen item_name of the cost rows.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from rab_maker.exceptions import StorageError
from rab_maker.models import ItemType, LaborType, Material, Project, ProjectItemCost, WorkItem

logger = logging.getLogger(__name__)

# Catalog table backing each item type
_CATALOGS = (
    (ItemType.MATERIAL, Material),
    (ItemType.LABOR, LaborType),
)


def _grouped_query(session, item_type: ItemType, catalog_cls):
    """Sum quantity and cost of one item type, grouped by catalog entry."""
    return (
        session.query(
            catalog_cls.id.label('item_id'),
            catalog_cls.name.label('item_name'),
            func.sum(ProjectItemCost.quantity_needed).label('total_quantity'),
            catalog_cls.unit.label('unit'),
            func.sum(ProjectItemCost.total_cost).label('total_cost'),
        )
        .join(catalog_cls, catalog_cls.id == ProjectItemCost.master_item_id)
        .join(WorkItem, WorkItem.id == ProjectItemCost.work_item_id)
        .filter(ProjectItemCost.item_type == item_type)
        .group_by(catalog_cls.id, catalog_cls.name, catalog_cls.unit)
    )


def _summarize(session, scope) -> List[Dict[str, Any]]:
    """Run the grouped query for both item types, apply `scope`, merge and sort."""
    summaries = []
    try:
        for item_type, catalog_cls in _CATALOGS:
            query = scope(_grouped_query(session, item_type, catalog_cls))
            for row in query.all():
                summaries.append({
                    'item_id': row.item_id,
                    'item_name': row.item_name,
                    'total_quantity': row.total_quantity or 0.0,
                    'unit': row.unit,
                    'item_type': item_type.value,
                    'total_cost': row.total_cost or 0.0,
                })
    except SQLAlchemyError as e:
        logger.error(f"Error building material summary: {e}")
        raise StorageError(f'Gagal menyusun rekap material: {str(e)}') from e

    summaries.sort(key=lambda s: (s['item_type'], s['item_name'], s['item_id']))
    return summaries


def summarize_all(session, owner_id: int) -> List[Dict[str, Any]]:
    """
    Summary across every project owned by `owner_id`.

    Returns:
        list of dicts: item_id, item_name, total_quantity, unit, item_type,
        total_cost; ordered by (item_type, item_name)
    """
    return _summarize(
        session,
        lambda q: q.join(Project, Project.id == WorkItem.project_id).filter(Project.user_id == owner_id),
    )


def summarize_project(session, project_id: int) -> List[Dict[str, Any]]:
    """Summary of a single project. Same row shape as summarize_all."""
    return _summarize(session, lambda q: q.filter(WorkItem.project_id == project_id))


def summarize_project_detailed(session, project_id: int) -> List[Dict[str, Any]]:
    """
    Project summary where each row also explains its total.

    Every row gets a `work_item_breakdown` list with one entry per
    contributing cost row: work_item_id, work_item_desc, quantity, cost,
    volume, coefficient.
    """
    summaries = summarize_project(session, project_id)
    by_key = {(s['item_type'], s['item_id']): s for s in summaries}
    for s in summaries:
        s['work_item_breakdown'] = []

    try:
        rows = (
            session.query(
                ProjectItemCost.item_type,
                ProjectItemCost.master_item_id,
                WorkItem.id.label('work_item_id'),
                WorkItem.description,
                ProjectItemCost.quantity_needed,
                ProjectItemCost.total_cost,
                WorkItem.volume,
                ProjectItemCost.coefficient,
            )
            .join(WorkItem, WorkItem.id == ProjectItemCost.work_item_id)
            .filter(WorkItem.project_id == project_id)
            .order_by(WorkItem.id, ProjectItemCost.id)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error building detailed summary for project {project_id}: {e}")
        raise StorageError(f'Gagal menyusun rincian rekap: {str(e)}') from e

    for row in rows:
        summary = by_key.get((row.item_type.value, row.master_item_id))
        if summary is None:
            # Cost row whose catalog entry is gone; it has no summary row either
            continue
        summary['work_item_breakdown'].append({
            'work_item_id': row.work_item_id,
            'work_item_desc': row.description,
            'quantity': row.quantity_needed,
            'cost': row.total_cost,
            'volume': row.volume,
            'coefficient': row.coefficient,
        })

    return summaries


def get_project_summary(session, project_id: int) -> Dict[str, Any]:
    """
    Summary for the project page.

    Tries the detailed summary first; if that fails, falls back to the plain
    summary (each row with an empty breakdown) instead of failing the page.

    Returns:
        dict with 'items', 'totals' and 'detailed' (False when the
        fallback was used)
    """
    detailed = True
    try:
        items = summarize_project_detailed(session, project_id)
    except (StorageError, SQLAlchemyError) as e:
        logger.error(f"Detailed summary failed for project {project_id}, using plain summary: {e}", exc_info=True)
        session.rollback()
        detailed = False
        items = summarize_project(session, project_id)
        for item in items:
            item['work_item_breakdown'] = []

    return {
        'items': items,
        'totals': summary_totals(items),
        'detailed': detailed,
    }


def summary_totals(summaries: List[Dict[str, Any]]) -> Dict[str, float]:
    """Material, labor and grand total of a list of summary rows."""
    material_cost = sum(s['total_cost'] for s in summaries if s['item_type'] == ItemType.MATERIAL.value)
    labor_cost = sum(s['total_cost'] for s in summaries if s['item_type'] == ItemType.LABOR.value)
    return {
        'material_cost': material_cost,
        'labor_cost': labor_cost,
        'total_cost': material_cost + labor_cost,
    }


def project_total_cost(session, project_id: int) -> float:
    """Sum of every cost row in a project."""
    total = (
        session.query(func.coalesce(func.sum(ProjectItemCost.total_cost), 0.0))
        .join(WorkItem, WorkItem.id == ProjectItemCost.work_item_id)
        .filter(WorkItem.project_id == project_id)
        .scalar()
    )
    return float(total or 0.0)
