"""
Deletion guard - referential integrity policy for master data.

Policy per entity:

- Material / labor type: destructive cascade. Template components and cost
  rows that reference the entry are purged together with it.
- AHSP template: TEMPLATE_DELETE_POLICY. 'block' (default) refuses while a
  work item uses the template; 'cascade' deletes those work items (and
  their cost rows) first.
- Work category: block while any work item references it.

Every delete handler calls can_delete() to show the consequence to the
user, then the matching delete_* function, which re-checks inside the
write transaction.
"""
import enum
import logging
from typing import Optional, Tuple

from flask import current_app, has_app_context

from rab_maker.database import write_transaction
from rab_maker.exceptions import BusinessLogicError, ReferentialIntegrityError
from rab_maker.models import (
    ItemType, ProjectItemCost, TemplateLaborComponent,
    TemplateMaterialComponent, WorkItem,
)
from rab_maker.services.catalog_service import get_labor_type, get_material
from rab_maker.services.template_service import get_template
from rab_maker.services.work_category_service import get_work_category

logger = logging.getLogger(__name__)

TEMPLATE_POLICY_BLOCK = 'block'
TEMPLATE_POLICY_CASCADE = 'cascade'


class EntityKind(str, enum.Enum):
    """Master data kinds guarded on delete."""
    MATERIAL = 'material'
    LABOR_TYPE = 'labor_type'
    TEMPLATE = 'template'
    WORK_CATEGORY = 'work_category'


def _template_policy(policy: Optional[str]) -> str:
    if policy is None and has_app_context():
        policy = current_app.config.get('TEMPLATE_DELETE_POLICY')
    policy = (policy or TEMPLATE_POLICY_BLOCK).lower()
    if policy not in (TEMPLATE_POLICY_BLOCK, TEMPLATE_POLICY_CASCADE):
        raise BusinessLogicError(f'Kebijakan hapus AHSP tidak dikenal: {policy}')
    return policy


# --- Reference counts --------------------------------------------------------

def _catalog_references(session, item_type: ItemType, item_id: int) -> Tuple[int, int]:
    """(template components, cost rows) referencing a catalog entry."""
    if item_type == ItemType.MATERIAL:
        components = session.query(TemplateMaterialComponent).filter(
            TemplateMaterialComponent.material_id == item_id
        ).count()
    else:
        components = session.query(TemplateLaborComponent).filter(
            TemplateLaborComponent.labor_type_id == item_id
        ).count()

    costs = session.query(ProjectItemCost).filter(
        ProjectItemCost.item_type == item_type,
        ProjectItemCost.master_item_id == item_id
    ).count()
    return components, costs


def _work_items_using_template(session, template_id: int) -> int:
    return session.query(WorkItem).filter(WorkItem.template_id == template_id).count()


def _work_items_in_category(session, category_id: int) -> int:
    return session.query(WorkItem).filter(WorkItem.category_id == category_id).count()


def can_delete(session, entity_kind, entity_id: int, template_policy: Optional[str] = None) -> Tuple[bool, str]:
    """
    Tell whether an entity can be deleted and what deleting it implies.

    Args:
        session: SQLAlchemy session
        entity_kind: EntityKind (or its string value)
        entity_id: ID of the entity
        template_policy: Override TEMPLATE_DELETE_POLICY

    Returns:
        (allowed, reason). For cascading kinds allowed is True and reason
        describes what will be purged.
    """
    try:
        kind = EntityKind(entity_kind)
    except ValueError:
        raise BusinessLogicError(f'Jenis data tidak dikenal: {entity_kind}')

    if kind in (EntityKind.MATERIAL, EntityKind.LABOR_TYPE):
        item_type = ItemType.MATERIAL if kind == EntityKind.MATERIAL else ItemType.LABOR
        components, costs = _catalog_references(session, item_type, entity_id)
        if components or costs:
            return True, (
                f'Menghapus data ini juga menghapus {components} komponen AHSP '
                f'dan {costs} rincian biaya yang menggunakannya'
            )
        return True, 'Data tidak digunakan'

    if kind == EntityKind.TEMPLATE:
        work_items = _work_items_using_template(session, entity_id)
        if not work_items:
            return True, 'AHSP tidak digunakan'
        if _template_policy(template_policy) == TEMPLATE_POLICY_BLOCK:
            return False, f'AHSP masih digunakan oleh {work_items} item pekerjaan'
        return True, f'Menghapus AHSP ini juga menghapus {work_items} item pekerjaan beserta rincian biayanya'

    work_items = _work_items_in_category(session, entity_id)
    if work_items:
        return False, f'Kategori masih digunakan oleh {work_items} item pekerjaan'
    return True, 'Kategori tidak digunakan'


# --- Guarded deletes ---------------------------------------------------------

def _purge_catalog_entry(session, entry, item_type: ItemType) -> dict:
    if item_type == ItemType.MATERIAL:
        components = session.query(TemplateMaterialComponent).filter(
            TemplateMaterialComponent.material_id == entry.id
        ).all()
    else:
        components = session.query(TemplateLaborComponent).filter(
            TemplateLaborComponent.labor_type_id == entry.id
        ).all()

    costs = session.query(ProjectItemCost).filter(
        ProjectItemCost.item_type == item_type,
        ProjectItemCost.master_item_id == entry.id
    ).all()

    for component in components:
        session.delete(component)
    for cost in costs:
        session.delete(cost)
    session.delete(entry)

    if components or costs:
        logger.warning(
            f"{item_type.value} {entry.id} deleted with {len(components)} template components "
            f"and {len(costs)} cost rows"
        )
    return {'components_deleted': len(components), 'costs_deleted': len(costs)}


def delete_material(session, material_id: int, user_id: int) -> dict:
    """Delete a material and every component and cost row that references it."""
    with write_transaction(session):
        material = get_material(session, material_id, user_id, for_update=True)
        result = _purge_catalog_entry(session, material, ItemType.MATERIAL)
    return result


def delete_labor_type(session, labor_type_id: int, user_id: int) -> dict:
    """Delete a labor type and every component and cost row that references it."""
    with write_transaction(session):
        labor_type = get_labor_type(session, labor_type_id, user_id, for_update=True)
        result = _purge_catalog_entry(session, labor_type, ItemType.LABOR)
    return result


def delete_template(session, template_id: int, user_id: int, policy: Optional[str] = None) -> dict:
    """
    Delete an AHSP template and its components.

    Raises:
        ReferentialIntegrityError: policy is 'block' and work items use it
    """
    policy = _template_policy(policy)

    with write_transaction(session):
        template = get_template(session, template_id, user_id)
        work_items = session.query(WorkItem).filter(WorkItem.template_id == template_id).all()

        if work_items and policy == TEMPLATE_POLICY_BLOCK:
            raise ReferentialIntegrityError('AHSP', len(work_items), 'item pekerjaan')

        for work_item in work_items:
            session.delete(work_item)
        # Work item rows must be gone before the template row they point to
        session.flush()
        session.delete(template)

    if work_items:
        logger.warning(f"Template {template_id} deleted with {len(work_items)} work items")
    return {'work_items_deleted': len(work_items)}


def delete_work_category(session, category_id: int, user_id: int) -> None:
    """
    Delete a work category.

    Raises:
        ReferentialIntegrityError: a work item still uses the category
    """
    with write_transaction(session):
        category = get_work_category(session, category_id, user_id, for_update=True)
        in_use = _work_items_in_category(session, category_id)
        if in_use:
            raise ReferentialIntegrityError('Kategori pekerjaan', in_use, 'item pekerjaan')
        session.delete(category)
