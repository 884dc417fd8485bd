"""Catalog blueprints: materials and labor types."""
from flask import Blueprint, current_app, g, jsonify, request

from rab_maker.database import get_session
from rab_maker.middleware import require_login
from rab_maker.services import catalog_service
from rab_maker.services.deletion_guard_service import (
    EntityKind, can_delete, delete_labor_type, delete_material,
)
from rab_maker.utils.request_data import get_payload, get_number, get_str

materials_bp = Blueprint('materials', __name__, url_prefix='/materials')
labor_types_bp = Blueprint('labor_types', __name__, url_prefix='/labor-types')


# --- Materials ---------------------------------------------------------------

@materials_bp.route('/')
@require_login
def list_materials():
    """Own materials plus the default catalog, optional ?q= name filter."""
    db_session = get_session()
    materials = catalog_service.list_materials(db_session, g.user_id, request.args.get('q'))
    return jsonify({'status': 'ok', 'materials': [m.to_dict() for m in materials]})


@materials_bp.route('/new', methods=['POST'])
@require_login
def new_material():
    db_session = get_session()
    data = get_payload()
    material = catalog_service.create_material(
        db_session, g.user_id,
        name=get_str(data, 'name'),
        unit=get_str(data, 'unit'),
        unit_price=get_number(data, 'unit_price', 'Harga satuan')
    )
    return jsonify({'status': 'ok', 'material': material.to_dict()}), 201


@materials_bp.route('/<int:material_id>')
@require_login
def view_material(material_id):
    db_session = get_session()
    material = catalog_service.get_material(db_session, material_id, g.user_id)
    return jsonify({'status': 'ok', 'material': material.to_dict()})


@materials_bp.route('/<int:material_id>/edit', methods=['POST'])
@require_login
def edit_material(material_id):
    """Update a material. Prices stored on existing work items stay as they are."""
    db_session = get_session()
    data = get_payload()
    material = catalog_service.update_material(
        db_session, material_id, g.user_id,
        name=get_str(data, 'name'),
        unit=get_str(data, 'unit'),
        unit_price=get_number(data, 'unit_price', 'Harga satuan')
    )
    return jsonify({'status': 'ok', 'material': material.to_dict()})


@materials_bp.route('/<int:material_id>/delete', methods=['GET'])
@require_login
def delete_material_preview(material_id):
    """Tell the user what deleting the material implies."""
    db_session = get_session()
    catalog_service.get_material(db_session, material_id, g.user_id, for_update=True)
    allowed, reason = can_delete(db_session, EntityKind.MATERIAL, material_id)
    return jsonify({'status': 'ok', 'can_delete': allowed, 'reason': reason})


@materials_bp.route('/<int:material_id>/delete', methods=['POST'])
@require_login
def delete_material_view(material_id):
    db_session = get_session()
    result = delete_material(db_session, material_id, g.user_id)
    current_app.logger.info(f"Material {material_id} deleted by user {g.user_id}")
    return jsonify({'status': 'ok', **result})


# --- Labor types -------------------------------------------------------------

@labor_types_bp.route('/')
@require_login
def list_labor_types():
    db_session = get_session()
    labor_types = catalog_service.list_labor_types(db_session, g.user_id, request.args.get('q'))
    return jsonify({'status': 'ok', 'labor_types': [lt.to_dict() for lt in labor_types]})


@labor_types_bp.route('/new', methods=['POST'])
@require_login
def new_labor_type():
    db_session = get_session()
    data = get_payload()
    labor_type = catalog_service.create_labor_type(
        db_session, g.user_id,
        name=get_str(data, 'name'),
        unit=get_str(data, 'unit'),
        daily_wage=get_number(data, 'daily_wage', 'Upah harian')
    )
    return jsonify({'status': 'ok', 'labor_type': labor_type.to_dict()}), 201


@labor_types_bp.route('/<int:labor_type_id>')
@require_login
def view_labor_type(labor_type_id):
    db_session = get_session()
    labor_type = catalog_service.get_labor_type(db_session, labor_type_id, g.user_id)
    return jsonify({'status': 'ok', 'labor_type': labor_type.to_dict()})


@labor_types_bp.route('/<int:labor_type_id>/edit', methods=['POST'])
@require_login
def edit_labor_type(labor_type_id):
    db_session = get_session()
    data = get_payload()
    labor_type = catalog_service.update_labor_type(
        db_session, labor_type_id, g.user_id,
        name=get_str(data, 'name'),
        unit=get_str(data, 'unit'),
        daily_wage=get_number(data, 'daily_wage', 'Upah harian')
    )
    return jsonify({'status': 'ok', 'labor_type': labor_type.to_dict()})


@labor_types_bp.route('/<int:labor_type_id>/delete', methods=['GET'])
@require_login
def delete_labor_type_preview(labor_type_id):
    db_session = get_session()
    catalog_service.get_labor_type(db_session, labor_type_id, g.user_id, for_update=True)
    allowed, reason = can_delete(db_session, EntityKind.LABOR_TYPE, labor_type_id)
    return jsonify({'status': 'ok', 'can_delete': allowed, 'reason': reason})


@labor_types_bp.route('/<int:labor_type_id>/delete', methods=['POST'])
@require_login
def delete_labor_type_view(labor_type_id):
    db_session = get_session()
    result = delete_labor_type(db_session, labor_type_id, g.user_id)
    current_app.logger.info(f"Labor type {labor_type_id} deleted by user {g.user_id}")
    return jsonify({'status': 'ok', **result})
