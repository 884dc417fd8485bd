"""User registration and credential checks."""
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from rab_maker.database import write_transaction
from rab_maker.exceptions import BusinessLogicError, StorageError, UnauthorizedError
from rab_maker.models import AppUser

logger = logging.getLogger(__name__)


def _validate_registration(username: str, password: str) -> list:
    errors = []
    if len(username) < 3:
        errors.append('Username minimal 3 karakter')
    elif len(username) > 100:
        errors.append('Username maksimal 100 karakter')
    if not password or len(password) < 6:
        errors.append('Password minimal 6 karakter')
    return errors


def register_user(session, username: str, password: str, full_name: str = '') -> AppUser:
    """Create an active user account. Usernames are unique, case-insensitive."""
    username = (username or '').strip()
    errors = _validate_registration(username, password)
    if errors:
        raise BusinessLogicError(', '.join(errors))

    try:
        with write_transaction(session):
            taken = session.query(AppUser.id).filter(
                func.lower(AppUser.username) == username.lower()
            ).first()
            if taken:
                raise BusinessLogicError(f'Username {username} sudah digunakan')

            user = AppUser(username=username, full_name=(full_name or '').strip() or None, active=True)
            user.set_password(password)
            session.add(user)
            session.flush()
    except StorageError as e:
        # Lost a race against another registration with the same name
        if isinstance(e.__cause__, IntegrityError):
            raise BusinessLogicError(f'Username {username} sudah digunakan') from e
        raise

    logger.info(f"User registered: {username} (id={user.id})")
    return user


def authenticate(session, username: str, password: str) -> AppUser:
    """Return the active user matching the credentials, or raise UnauthorizedError."""
    username = (username or '').strip()
    if not username or not password:
        raise BusinessLogicError('Username dan password wajib diisi')

    user = session.query(AppUser).filter(
        func.lower(AppUser.username) == username.lower()
    ).first()

    if not user or not user.active or not user.check_password(password):
        logger.info(f"Failed login for username: {username}")
        raise UnauthorizedError()
    return user
