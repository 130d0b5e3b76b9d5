from functools import wraps
from flask import g, jsonify

from models import db
from models.user import User
from security.principal import Principal
from security.session import get_session_from_request

def load_current_user():
    sess = get_session_from_request()
    if not sess:
        g.user = None
        g.session = None
        return
    g.session = sess
    g.user = db.session.get(User, sess.user_id)

def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            return jsonify(success=False, error="Not authorized to access this route"), 401
        return fn(*args, **kwargs)
    return wrapper

def current_principal() -> Principal:
    """The caller of a @login_required view as a value the services accept."""
    return Principal.from_user(g.user)
