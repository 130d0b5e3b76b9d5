import re

from flask import Blueprint, request, jsonify, g
from sqlalchemy.exc import IntegrityError

from models import db
from models.user import User
from security.password import MIN_PASSWORD_LENGTH, hash_password, verify_password
from security.session import bearer_token, create_session, revoke_session
from services.errors import DuplicateResource, NotAuthorized, ValidationError
from utils.audit import log_event
from utils.auth_context import login_required
from utils.serializers import user_to_dict


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
TEL_RE = re.compile(r"^0[689]\d{8}$|^0[689]-\d{3}-\d{4}$")


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and len(email) <= 255 and bool(EMAIL_RE.match(email))


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip().lower()
    tel = (data.get("tel") or "").strip()
    password = data.get("password") or ""

    if not name:
        raise ValidationError("Please add a name")
    if not _is_valid_email(email):
        raise ValidationError("Please add a valid email")
    if not TEL_RE.match(tel):
        raise ValidationError("Please add a valid telephone number")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if User.query.filter_by(email=email).first():
        raise DuplicateResource("Email already registered")
    if User.query.filter_by(tel=tel).first():
        raise DuplicateResource("Telephone number already registered")

    # self-registration never grants admin
    user = User(name=name, email=email, tel=tel, password_hash=hash_password(password), role="user")
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateResource("Email or telephone number already registered")

    log_event("REGISTER_SUCCESS", user_id=user.id)
    return jsonify(success=True, data=user_to_dict(user)), 201


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password:
        raise ValidationError("Please provide an email and password")

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        log_event("LOGIN_FAIL", user_id=user.id if user else None, metadata={"email": email})
        raise NotAuthorized("Invalid credentials")

    raw_token = create_session(user.id)

    log_event("LOGIN_SUCCESS", user_id=user.id)
    return jsonify(success=True, token=raw_token), 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(success=True, data=user_to_dict(g.user)), 200


@auth_bp.post("/logout")
@login_required
def logout():
    revoke_session(bearer_token())
    log_event("LOGOUT", user_id=g.user.id)
    return jsonify(success=True, data={}), 200
