"""AHSP template blueprint: templates and their coefficient components."""
from flask import Blueprint, current_app, g, jsonify, request

from rab_maker.database import get_session
from rab_maker.exceptions import BusinessLogicError
from rab_maker.middleware import require_login
from rab_maker.models import ItemType
from rab_maker.services import template_service
from rab_maker.services.deletion_guard_service import EntityKind, can_delete, delete_template
from rab_maker.utils.request_data import get_id, get_number, get_payload, get_str

templates_bp = Blueprint('templates', __name__, url_prefix='/ahsp')


def _item_type(value: str) -> ItemType:
    try:
        return ItemType((value or '').upper())
    except ValueError:
        raise BusinessLogicError(f'Jenis komponen tidak dikenal: {value}')


@templates_bp.route('/')
@require_login
def list_templates():
    db_session = get_session()
    templates = template_service.list_templates(db_session, g.user_id, request.args.get('q'))
    return jsonify({'status': 'ok', 'templates': [t.to_dict() for t in templates]})


@templates_bp.route('/new', methods=['POST'])
@require_login
def new_template():
    db_session = get_session()
    data = get_payload()
    template = template_service.create_template(
        db_session, g.user_id, name=get_str(data, 'name'), unit=get_str(data, 'unit')
    )
    return jsonify({'status': 'ok', 'template': template.to_dict()}), 201


@templates_bp.route('/<int:template_id>')
@require_login
def view_template(template_id):
    """Template with components and its unit price at current catalog prices."""
    db_session = get_session()
    detail = template_service.get_template_detail(db_session, template_id, g.user_id)
    return jsonify({'status': 'ok', 'template': detail})


@templates_bp.route('/<int:template_id>/edit', methods=['POST'])
@require_login
def edit_template(template_id):
    db_session = get_session()
    data = get_payload()
    template = template_service.update_template(
        db_session, template_id, g.user_id, name=get_str(data, 'name'), unit=get_str(data, 'unit')
    )
    return jsonify({'status': 'ok', 'template': template.to_dict()})


@templates_bp.route('/<int:template_id>/delete', methods=['GET'])
@require_login
def delete_template_preview(template_id):
    db_session = get_session()
    template_service.get_template(db_session, template_id, g.user_id)
    allowed, reason = can_delete(db_session, EntityKind.TEMPLATE, template_id)
    return jsonify({'status': 'ok', 'can_delete': allowed, 'reason': reason})


@templates_bp.route('/<int:template_id>/delete', methods=['POST'])
@require_login
def delete_template_view(template_id):
    """Delete a template following TEMPLATE_DELETE_POLICY (409 when blocked)."""
    db_session = get_session()
    result = delete_template(db_session, template_id, g.user_id)
    current_app.logger.info(f"Template {template_id} deleted by user {g.user_id}")
    return jsonify({'status': 'ok', **result})


# --- Components --------------------------------------------------------------

@templates_bp.route('/<int:template_id>/components/<item_type>', methods=['POST'])
@require_login
def add_component(template_id, item_type):
    """Add a material or labor coefficient: item_type is 'material' or 'labor'."""
    db_session = get_session()
    data = get_payload()
    component = template_service.add_component(
        db_session, template_id, g.user_id,
        item_type=_item_type(item_type),
        item_id=get_id(data, 'item_id', 'Item'),
        coefficient=get_number(data, 'coefficient', 'Koefisien')
    )
    return jsonify({'status': 'ok', 'component': component.to_dict()}), 201


@templates_bp.route('/components/<item_type>/<int:component_id>/edit', methods=['POST'])
@require_login
def edit_component(item_type, component_id):
    db_session = get_session()
    data = get_payload()
    component = template_service.update_component(
        db_session, _item_type(item_type), component_id, g.user_id,
        coefficient=get_number(data, 'coefficient', 'Koefisien')
    )
    return jsonify({'status': 'ok', 'component': component.to_dict()})


@templates_bp.route('/components/<item_type>/<int:component_id>/delete', methods=['POST'])
@require_login
def delete_component(item_type, component_id):
    db_session = get_session()
    template_service.remove_component(db_session, _item_type(item_type), component_id, g.user_id)
    return jsonify({'status': 'ok'})
