from functools import wraps
from flask import g, jsonify

def require_roles(*role_names: str):
    """
    Usage: @require_roles("admin")
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "user", None)
            if user is None:
                return jsonify(success=False, error="Not authorized to access this route"), 401

            if user.role not in role_names:
                return jsonify(
                    success=False,
                    error=f"User role {user.role} is not authorized to access this route",
                ), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
