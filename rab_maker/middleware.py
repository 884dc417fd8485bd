"""Middleware for the current-user context."""
from functools import wraps
from flask import session, g, jsonify
from rab_maker.database import get_session
from rab_maker.models import AppUser


def load_current_user():
    """
    Load current user into g (Flask's per-request global).

    The session payload is only {'user_id': int}. Sets g.user and
    g.user_id when it points to an active user.
    """
    g.user = None
    g.user_id = None

    try:
        user_id = session.get('user_id')
        if user_id:
            db_session = get_session()
            if not db_session:
                return

            user = db_session.query(AppUser).filter_by(id=user_id, active=True).first()
            if user:
                g.user = user
                g.user_id = user.id
            else:
                session.pop('user_id', None)
    except Exception as e:
        # Avoid crashing the whole app if context loading fails
        from flask import current_app
        current_app.logger.error(f"Error in load_current_user: {e}")


def get_current_user_id():
    """ID of the logged in user, or None."""
    return g.get('user_id')


def require_login(f):
    """
    Decorator: Require user to be logged in.

    Returns a 401 JSON error when no user is loaded.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user') is None:
            return jsonify({'status': 'error', 'message': 'Silakan login terlebih dahulu'}), 401
        return f(*args, **kwargs)
    return decorated_function
