"""
Cost calculation engine.

Turns (template, volume) into the ordered list of costed line items that
becomes a work item's cost snapshot.
"""
import logging
import math
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from rab_maker.exceptions import BusinessLogicError, StorageError
from rab_maker.models import (
    ItemType, LaborType, Material,
    TemplateLaborComponent, TemplateMaterialComponent,
)

logger = logging.getLogger(__name__)


def compute_line(coefficient: float, volume: float, unit_price: float) -> Dict[str, float]:
    """
    Apply the unit-price formula to one component.

    quantity_needed = coefficient * volume
    total_cost = quantity_needed * unit_price
    """
    quantity_needed = coefficient * volume
    total_cost = quantity_needed * unit_price
    if not (math.isfinite(quantity_needed) and math.isfinite(total_cost)):
        raise BusinessLogicError('Hasil perhitungan biaya tidak valid')
    return {'quantity_needed': quantity_needed, 'total_cost': total_cost}


def _component_rows(session, component_cls, catalog_cls, fk_column, price_column, template_id: int):
    """Components of one kind joined with their (possibly missing) catalog entry."""
    return (
        session.query(component_cls, catalog_cls.name, price_column)
        .outerjoin(catalog_cls, catalog_cls.id == fk_column)
        .filter(component_cls.template_id == template_id)
        .order_by(component_cls.id)
        .all()
    )


def _build_lines(rows, item_type: ItemType, volume: float, work_item_id: int, template_id: int) -> List[Dict[str, Any]]:
    lines = []
    for component, item_name, unit_price in rows:
        if item_name is None:
            # Stale reference: the catalog row was removed after the template was built
            logger.warning(
                f"Template {template_id}: {item_type.value.lower()} {component.item_id} "
                f"referenced by component {component.id} not found, skipping"
            )
            continue

        unit_price = unit_price or 0.0
        amounts = compute_line(component.coefficient, volume, unit_price)
        logger.debug(
            f"{item_type.value} {component.item_id}: qty={amounts['quantity_needed']:.4f} "
            f"price={unit_price:.2f} total={amounts['total_cost']:.2f}"
        )
        lines.append({
            'work_item_id': work_item_id,
            'item_type': item_type,
            'master_item_id': component.item_id,
            'item_name': item_name,
            'coefficient': component.coefficient,
            'quantity_needed': amounts['quantity_needed'],
            'unit_price_at_creation': unit_price,
            'total_cost': amounts['total_cost'],
        })
    return lines


def calculate_cost_lines(session, template_id: Optional[int], volume: float, work_item_id: int) -> List[Dict[str, Any]]:
    """
    Calculate the cost line items of a work item from its template.

    Steps:
    1. Load the template's material components with current unit prices
    2. Load the template's labor components with current daily wages
    3. Skip components whose catalog entry no longer exists (logged)
    4. quantity = coefficient x volume, total = quantity x price

    Args:
        session: SQLAlchemy session
        template_id: AHSP template ID, None when the work item has no template
        volume: Work item volume (> 0)
        work_item_id: Work item the lines will belong to

    Returns:
        list of dicts ready for ProjectItemCost(**line); materials first,
        then labor, each ordered by component id. Empty when there is no
        template or no component resolves.

    Raises:
        BusinessLogicError: volume is not positive
        StorageError: a read failed
    """
    if template_id is None:
        return []

    if volume is None or volume <= 0:
        raise BusinessLogicError('Volume harus lebih besar dari 0')

    try:
        material_rows = _component_rows(
            session, TemplateMaterialComponent, Material,
            TemplateMaterialComponent.material_id, Material.unit_price, template_id
        )
        labor_rows = _component_rows(
            session, TemplateLaborComponent, LaborType,
            TemplateLaborComponent.labor_type_id, LaborType.daily_wage, template_id
        )
    except SQLAlchemyError as e:
        logger.error(f"Error reading components of template {template_id}: {e}")
        raise StorageError(f'Gagal membaca komponen AHSP: {str(e)}') from e

    logger.info(
        f"Calculating costs for work item {work_item_id}: template {template_id}, "
        f"volume {volume}, {len(material_rows)} material / {len(labor_rows)} labor components"
    )

    lines = _build_lines(material_rows, ItemType.MATERIAL, volume, work_item_id, template_id)
    lines.extend(_build_lines(labor_rows, ItemType.LABOR, volume, work_item_id, template_id))
    return lines
