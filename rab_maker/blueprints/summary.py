"""Summary blueprint: material and labor needs per portfolio or project."""
from flask import Blueprint, current_app, g, jsonify, request, send_file
from werkzeug.utils import secure_filename

from rab_maker.database import get_session
from rab_maker.exceptions import BusinessLogicError
from rab_maker.middleware import require_login
from rab_maker.services.export_service import EXCEL_MIMETYPE, render_summary_excel, render_summary_pdf
from rab_maker.services.material_summary_service import (
    get_project_summary, summarize_all, summarize_project, summary_totals,
)
from rab_maker.services.project_service import get_project

summary_bp = Blueprint('summary', __name__, url_prefix='/summary')


EXPORT_FORMATS = ('pdf', 'excel')


def _export_format():
    export_format = request.args.get('format', 'pdf').strip().lower()
    if export_format not in EXPORT_FORMATS:
        raise BusinessLogicError("Format tidak valid. Gunakan 'pdf' atau 'excel'")
    return export_format


def _send_summary(project_data, summary, export_format, base_name):
    """Render the summary in the requested format and send it as a download."""
    if export_format == 'excel':
        return send_file(
            render_summary_excel(project_data, summary),
            mimetype=EXCEL_MIMETYPE,
            as_attachment=True,
            download_name=f'{base_name}.xlsx'
        )

    business_info = {
        'name': current_app.config.get('BUSINESS_NAME', 'RAB Maker'),
        'address': current_app.config.get('BUSINESS_ADDRESS', ''),
        'phone': current_app.config.get('BUSINESS_PHONE', ''),
        'email': current_app.config.get('BUSINESS_EMAIL', ''),
    }
    return send_file(
        render_summary_pdf(project_data, summary, business_info),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=f'{base_name}.pdf'
    )


@summary_bp.route('/')
@require_login
def all_projects():
    """Needs aggregated over every project of the current user."""
    db_session = get_session()
    items = summarize_all(db_session, g.user_id)
    return jsonify({'status': 'ok', 'items': items, 'totals': summary_totals(items)})


@summary_bp.route('/projects/<int:project_id>')
@require_login
def project_summary(project_id):
    db_session = get_session()
    project = get_project(db_session, project_id, g.user_id)
    project_data = project.to_dict()
    items = summarize_project(db_session, project_id)
    return jsonify({
        'status': 'ok',
        'project': project_data,
        'items': items,
        'totals': summary_totals(items),
    })


@summary_bp.route('/projects/<int:project_id>/detailed')
@require_login
def project_summary_detailed(project_id):
    """Per-item needs with the contribution of every work item."""
    db_session = get_session()
    project_data = get_project(db_session, project_id, g.user_id).to_dict()
    summary = get_project_summary(db_session, project_id)
    return jsonify({'status': 'ok', 'project': project_data, **summary})


@summary_bp.route('/export')
@require_login
def export_all():
    """Portfolio summary as ?format=pdf (default) or ?format=excel."""
    export_format = _export_format()
    db_session = get_session()
    items = summarize_all(db_session, g.user_id)
    summary = {'items': items, 'totals': summary_totals(items)}
    return _send_summary(None, summary, export_format, 'material-summary')


@summary_bp.route('/projects/<int:project_id>/export')
@require_login
def export_project(project_id):
    export_format = _export_format()
    db_session = get_session()
    project_data = get_project(db_session, project_id, g.user_id).to_dict()
    summary = get_project_summary(db_session, project_id)
    base_name = secure_filename(f"material-summary-{project_data['name']}") or f'material-summary-{project_id}'
    return _send_summary(project_data, summary, export_format, base_name)


@summary_bp.route('/projects/<int:project_id>/pdf')
@require_login
def project_summary_pdf(project_id):
    db_session = get_session()
    project_data = get_project(db_session, project_id, g.user_id).to_dict()
    summary = get_project_summary(db_session, project_id)
    return _send_summary(project_data, summary, 'pdf', f'rekap_proyek_{project_id}')
