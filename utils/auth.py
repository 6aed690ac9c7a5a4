# utils/auth.py
from functools import wraps

from flask_login import current_user

from dao.errors import Forbidden, Unauthorized


def roles_required(*roles):
    def deco(fn):
        @wraps(fn)
        def inner(*a, **kw):
            if not current_user.is_authenticated:
                raise Unauthorized("Unauthorized access")
            if not current_user.has_role(*roles):
                raise Forbidden("You do not have permission to access this resource")
            return fn(*a, **kw)

        return inner

    return deco


def current_user_id() -> int:
    """Stable id of the logged-in user; every ledger row is attributed to it."""
    if not current_user or not current_user.is_authenticated:
        raise Unauthorized("Unauthorized access")
    return int(current_user.id)
