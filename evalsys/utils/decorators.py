from functools import wraps
from flask import abort
from flask_login import current_user


def _require_role(role):
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if getattr(current_user, "role", None) != role:
                abort(401)
            return view(*args, **kwargs)
        return wrapped
    return decorator


admin_required = _require_role("admin")
evaluator_required = _require_role("evaluator")
