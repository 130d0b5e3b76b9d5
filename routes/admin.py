from flask import Blueprint, jsonify, request

from security.rbac import require_roles
from services import users as user_service
from utils.auth_context import current_principal
from utils.serializers import user_to_dict

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


@admin_bp.get("/users")
@require_roles("admin")
def list_users():
    users = user_service.list_users()
    return jsonify(success=True, count=len(users), data=[user_to_dict(u) for u in users]), 200


@admin_bp.get("/users/<int:user_id>")
@require_roles("admin")
def get_user(user_id: int):
    return jsonify(success=True, data=user_to_dict(user_service.get_user(user_id))), 200


@admin_bp.put("/users/<int:user_id>")
@require_roles("admin")
def update_user_role(user_id: int):
    data = request.get_json(silent=True) or {}
    user = user_service.set_role(current_principal(), user_id, data.get("role"))
    return jsonify(success=True, data=user_to_dict(user)), 200


@admin_bp.delete("/users/<int:user_id>")
@require_roles("admin")
def delete_user(user_id: int):
    user_service.delete_user(current_principal(), user_id)
    return jsonify(success=True, data={}), 200
