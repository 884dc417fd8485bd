"""
Dashboard blueprint.
Shows project count, portfolio cost and the most recent projects.
"""
from flask import Blueprint, current_app, jsonify

from rab_maker.database import get_session
from rab_maker.middleware import get_current_user_id, require_login
from rab_maker.services.dashboard_service import get_dashboard_data

dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/dashboard')


@dashboard_bp.route('/')
@require_login
def index():
    db_session = get_session()
    data = get_dashboard_data(
        db_session, get_current_user_id(),
        recent_limit=current_app.config.get('RECENT_PROJECTS_LIMIT', 5)
    )
    return jsonify({'status': 'ok', **data})
