from functools import wraps
from flask import abort
from flask_login import current_user


def role_required(role):
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401, description='Authentication required')
            if getattr(current_user, "role", None) != role:
                abort(403, description=f'Access denied. {role.capitalize()} only.')
            return view(*args, **kwargs)
        return wrapped
    return decorator


admin_required = role_required("admin")
employee_required = role_required("employee")
