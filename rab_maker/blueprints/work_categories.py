"""Work category blueprint."""
from flask import Blueprint, g, jsonify

from rab_maker.database import get_session
from rab_maker.middleware import require_login
from rab_maker.services import work_category_service
from rab_maker.services.deletion_guard_service import EntityKind, can_delete, delete_work_category
from rab_maker.utils.request_data import get_id, get_payload, get_str

work_categories_bp = Blueprint('work_categories', __name__, url_prefix='/work-categories')


def _display_order(data):
    return get_id(data, 'display_order', 'Urutan tampilan', required=False) or 0


@work_categories_bp.route('/')
@require_login
def list_categories():
    db_session = get_session()
    categories = work_category_service.list_work_categories(db_session, g.user_id)
    return jsonify({'status': 'ok', 'categories': [c.to_dict() for c in categories]})


@work_categories_bp.route('/new', methods=['POST'])
@require_login
def new_category():
    db_session = get_session()
    data = get_payload()
    category = work_category_service.create_work_category(
        db_session, g.user_id, name=get_str(data, 'name'), display_order=_display_order(data)
    )
    return jsonify({'status': 'ok', 'category': category.to_dict()}), 201


@work_categories_bp.route('/<int:category_id>/edit', methods=['POST'])
@require_login
def edit_category(category_id):
    db_session = get_session()
    data = get_payload()
    category = work_category_service.update_work_category(
        db_session, category_id, g.user_id, name=get_str(data, 'name'), display_order=_display_order(data)
    )
    return jsonify({'status': 'ok', 'category': category.to_dict()})


@work_categories_bp.route('/<int:category_id>/delete', methods=['GET'])
@require_login
def delete_category_preview(category_id):
    db_session = get_session()
    work_category_service.get_work_category(db_session, category_id, g.user_id, for_update=True)
    allowed, reason = can_delete(db_session, EntityKind.WORK_CATEGORY, category_id)
    return jsonify({'status': 'ok', 'can_delete': allowed, 'reason': reason})


@work_categories_bp.route('/<int:category_id>/delete', methods=['POST'])
@require_login
def delete_category(category_id):
    """Delete an unused category; 409 while work items reference it."""
    db_session = get_session()
    delete_work_category(db_session, category_id, g.user_id)
    return jsonify({'status': 'ok'})
