"""Projects blueprint: projects, their work items and work item costs."""
from flask import Blueprint, current_app, g, jsonify, request

from rab_maker.database import get_session
from rab_maker.middleware import require_login
from rab_maker.services import project_service
from rab_maker.services.cost_snapshot_service import get_line_items
from rab_maker.services.material_summary_service import project_total_cost
from rab_maker.utils.request_data import get_id, get_number, get_payload, get_str

projects_bp = Blueprint('projects', __name__, url_prefix='/projects')


def _project_fields(data):
    return {
        'name': get_str(data, 'name'),
        'location': get_str(data, 'location'),
        'client_name': get_str(data, 'client_name'),
    }


def _work_item_fields(data):
    return {
        'category_id': get_id(data, 'category_id', 'Kategori pekerjaan'),
        'description': get_str(data, 'description'),
        'volume': get_number(data, 'volume', 'Volume'),
        'unit': get_str(data, 'unit'),
        'template_id': get_id(data, 'template_id', 'AHSP', required=False),
    }


# --- Projects ----------------------------------------------------------------

@projects_bp.route('/')
@require_login
def list_projects():
    db_session = get_session()
    projects = project_service.list_projects(db_session, g.user_id, request.args.get('q'))
    return jsonify({'status': 'ok', 'projects': [p.to_dict() for p in projects]})


@projects_bp.route('/new', methods=['POST'])
@require_login
def new_project():
    db_session = get_session()
    project = project_service.create_project(db_session, g.user_id, **_project_fields(get_payload()))
    return jsonify({'status': 'ok', 'project': project.to_dict()}), 201


@projects_bp.route('/<int:project_id>')
@require_login
def view_project(project_id):
    """Project with its work items and the grand total."""
    db_session = get_session()
    project = project_service.get_project(db_session, project_id, g.user_id)
    return jsonify({
        'status': 'ok',
        'project': project.to_dict(),
        'work_items': project_service.list_work_items(db_session, project_id),
        'total_cost': project_total_cost(db_session, project_id),
    })


@projects_bp.route('/<int:project_id>/edit', methods=['POST'])
@require_login
def edit_project(project_id):
    db_session = get_session()
    project = project_service.update_project(db_session, project_id, g.user_id, **_project_fields(get_payload()))
    return jsonify({'status': 'ok', 'project': project.to_dict()})


@projects_bp.route('/<int:project_id>/delete', methods=['POST'])
@require_login
def delete_project(project_id):
    db_session = get_session()
    project_service.delete_project(db_session, project_id, g.user_id)
    return jsonify({'status': 'ok'})


# --- Work items --------------------------------------------------------------

@projects_bp.route('/<int:project_id>/work-items/new', methods=['POST'])
@require_login
def new_work_item(project_id):
    """Create a work item; with a template its costs are calculated in the same write."""
    db_session = get_session()
    work_item = project_service.create_work_item(
        db_session, project_id, g.user_id, **_work_item_fields(get_payload())
    )
    return jsonify({'status': 'ok', 'work_item': work_item.to_dict()}), 201


@projects_bp.route('/<int:project_id>/work-items/<int:work_item_id>/edit', methods=['POST'])
@require_login
def edit_work_item(project_id, work_item_id):
    db_session = get_session()
    work_item = project_service.update_work_item(
        db_session, work_item_id, project_id, g.user_id, **_work_item_fields(get_payload())
    )
    return jsonify({'status': 'ok', 'work_item': work_item.to_dict()})


@projects_bp.route('/<int:project_id>/work-items/<int:work_item_id>/delete', methods=['POST'])
@require_login
def delete_work_item(project_id, work_item_id):
    db_session = get_session()
    project_service.delete_work_item(db_session, work_item_id, project_id, g.user_id)
    current_app.logger.info(f"Work item {work_item_id} deleted by user {g.user_id}")
    return jsonify({'status': 'ok'})


@projects_bp.route('/<int:project_id>/work-items/<int:work_item_id>/costs')
@require_login
def work_item_costs(project_id, work_item_id):
    """Stored cost lines of a work item, as priced when it was last saved."""
    db_session = get_session()
    work_item = project_service.get_work_item(db_session, work_item_id, g.user_id, project_id=project_id)
    lines = get_line_items(db_session, work_item_id)
    return jsonify({
        'status': 'ok',
        'work_item': work_item.to_dict(),
        'costs': lines,
        'total_cost': sum(line['total_cost'] for line in lines),
    })
