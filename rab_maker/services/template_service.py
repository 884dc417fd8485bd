"""AHSP template service - templates and their material/labor components."""
import logging
from typing import Any, Dict, List, Optional

from rab_maker.database import write_transaction
from rab_maker.exceptions import BusinessLogicError, NotFoundError, OwnershipError
from rab_maker.models import (
    AHSPTemplate, ItemType, LaborType, Material,
    TemplateLaborComponent, TemplateMaterialComponent,
)
from rab_maker.services.catalog_service import get_labor_type, get_material
from rab_maker.services.cost_calculation_service import calculate_cost_lines

logger = logging.getLogger(__name__)

_COMPONENT_MODELS = {
    ItemType.MATERIAL: TemplateMaterialComponent,
    ItemType.LABOR: TemplateLaborComponent,
}


def _validate_template(name: str, unit: str) -> None:
    if not name or not name.strip():
        raise BusinessLogicError('Nama AHSP wajib diisi')
    if len(name.strip()) > 100:
        raise BusinessLogicError('Nama AHSP maksimal 100 karakter')
    if not unit or not unit.strip():
        raise BusinessLogicError('Satuan wajib diisi')
    if len(unit.strip()) > 20:
        raise BusinessLogicError('Satuan maksimal 20 karakter')


def _validate_coefficient(coefficient) -> None:
    if coefficient is None or coefficient <= 0:
        raise BusinessLogicError('Koefisien harus lebih besar dari 0')


def get_template(session, template_id: int, user_id: int) -> AHSPTemplate:
    """
    Fetch a template owned by the user.

    Raises:
        NotFoundError: no such template
        OwnershipError: template belongs to another user
    """
    template = session.get(AHSPTemplate, template_id)
    if not template:
        raise NotFoundError(f'AHSP #{template_id} tidak ditemukan')
    if template.user_id != user_id:
        raise OwnershipError(f'AHSP #{template_id} bukan milik Anda')
    return template


def list_templates(session, user_id: int, search: Optional[str] = None) -> List[AHSPTemplate]:
    query = session.query(AHSPTemplate).filter(AHSPTemplate.user_id == user_id)
    if search:
        query = query.filter(AHSPTemplate.name.ilike(f'%{search.strip()}%'))
    return query.order_by(AHSPTemplate.name, AHSPTemplate.id).all()


def create_template(session, user_id: int, name: str, unit: str) -> AHSPTemplate:
    _validate_template(name, unit)
    with write_transaction(session):
        template = AHSPTemplate(user_id=user_id, name=name.strip(), unit=unit.strip())
        session.add(template)
        session.flush()
    logger.info(f"AHSP template {template.id} created by user {user_id}")
    return template


def update_template(session, template_id: int, user_id: int, name: str, unit: str) -> AHSPTemplate:
    """Rename a template or change its unit. Work item costs are left as they are."""
    _validate_template(name, unit)
    with write_transaction(session):
        template = get_template(session, template_id, user_id)
        template.name = name.strip()
        template.unit = unit.strip()
    return template


def add_component(session, template_id: int, user_id: int, item_type: ItemType, item_id: int, coefficient: float):
    """
    Add a material or labor coefficient to a template.

    The referenced catalog entry must be visible to the user (own or system).
    """
    _validate_coefficient(coefficient)
    with write_transaction(session):
        get_template(session, template_id, user_id)
        if item_type == ItemType.MATERIAL:
            get_material(session, item_id, user_id)
            component = TemplateMaterialComponent(template_id=template_id, material_id=item_id, coefficient=coefficient)
        else:
            get_labor_type(session, item_id, user_id)
            component = TemplateLaborComponent(template_id=template_id, labor_type_id=item_id, coefficient=coefficient)
        session.add(component)
        session.flush()
    logger.info(f"Template {template_id}: added {item_type.value} {item_id} x {coefficient}")
    return component


def _get_component(session, item_type: ItemType, component_id: int, user_id: int):
    component = session.get(_COMPONENT_MODELS[item_type], component_id)
    if not component:
        raise NotFoundError(f'Komponen #{component_id} tidak ditemukan')
    get_template(session, component.template_id, user_id)
    return component


def update_component(session, item_type: ItemType, component_id: int, user_id: int, coefficient: float):
    _validate_coefficient(coefficient)
    with write_transaction(session):
        component = _get_component(session, item_type, component_id, user_id)
        component.coefficient = coefficient
    return component


def remove_component(session, item_type: ItemType, component_id: int, user_id: int) -> None:
    with write_transaction(session):
        component = _get_component(session, item_type, component_id, user_id)
        session.delete(component)


def get_template_detail(session, template_id: int, user_id: int) -> Dict[str, Any]:
    """
    Template with its components, resolved against the current catalog.

    unit_price is the cost of one unit of work at today's prices, i.e. the
    sum of coefficient x price over every resolvable component.
    """
    template = get_template(session, template_id, user_id)

    materials = (
        session.query(TemplateMaterialComponent, Material)
        .outerjoin(Material, Material.id == TemplateMaterialComponent.material_id)
        .filter(TemplateMaterialComponent.template_id == template_id)
        .order_by(TemplateMaterialComponent.id)
        .all()
    )
    labor = (
        session.query(TemplateLaborComponent, LaborType)
        .outerjoin(LaborType, LaborType.id == TemplateLaborComponent.labor_type_id)
        .filter(TemplateLaborComponent.template_id == template_id)
        .order_by(TemplateLaborComponent.id)
        .all()
    )

    def _rows(pairs, price_attr):
        rows = []
        for component, entry in pairs:
            row = component.to_dict()
            row['item_name'] = entry.name if entry else None
            row['unit'] = entry.unit if entry else None
            row['price'] = getattr(entry, price_attr) if entry else None
            row['missing'] = entry is None
            rows.append(row)
        return rows

    # One unit of work priced with the same engine used for work items
    unit_lines = calculate_cost_lines(session, template_id, 1.0, work_item_id=None)

    detail = template.to_dict()
    detail['material_components'] = _rows(materials, 'unit_price')
    detail['labor_components'] = _rows(labor, 'daily_wage')
    detail['unit_price'] = sum(line['total_cost'] for line in unit_lines)
    return detail
