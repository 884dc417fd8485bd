"""
Authentication blueprint.
Handles user registration, login and logout through the signed session cookie.
"""
import logging

from flask import Blueprint, g, jsonify, session

from rab_maker.database import get_session
from rab_maker.middleware import require_login
from rab_maker.services.auth_service import authenticate, register_user
from rab_maker.utils.request_data import get_payload, get_str

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def _start_session(user):
    session.clear()
    session['user_id'] = user.id
    session.permanent = True


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an account and log it in."""
    db_session = get_session()
    data = get_payload()
    user = register_user(
        db_session,
        username=get_str(data, 'username'),
        password=data.get('password') or '',
        full_name=get_str(data, 'full_name'),
    )
    _start_session(user)
    return jsonify({'status': 'ok', 'user': user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """Validate username + password."""
    db_session = get_session()
    data = get_payload()
    user = authenticate(db_session, get_str(data, 'username'), data.get('password') or '')
    _start_session(user)
    logger.info(f"User {user.id} logged in")
    return jsonify({'status': 'ok', 'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    session.clear()
    return jsonify({'status': 'ok'})


@auth_bp.route('/me')
@require_login
def me():
    return jsonify({'status': 'ok', 'user': g.user.to_dict()})
