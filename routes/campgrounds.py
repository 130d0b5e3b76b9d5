from flask import Blueprint, jsonify, request

from security.rbac import require_roles
from services import campgrounds as campground_service
from utils.auth_context import current_principal
from utils.serializers import campground_to_dict

campground_bp = Blueprint("campground", __name__, url_prefix="/campgrounds")


@campground_bp.get("")
def list_campgrounds():
    rows = campground_service.list_campgrounds()
    return jsonify(success=True, count=len(rows), data=[campground_to_dict(c) for c in rows]), 200


@campground_bp.get("/<int:campground_id>")
def get_campground(campground_id: int):
    campground = campground_service.get_campground(campground_id)
    return jsonify(success=True, data=campground_to_dict(campground, include_bookings=True)), 200


@campground_bp.post("")
@require_roles("admin")
def create_campground():
    data = request.get_json(silent=True) or {}
    campground = campground_service.create_campground(current_principal(), data)
    return jsonify(success=True, data=campground_to_dict(campground)), 201


@campground_bp.put("/<int:campground_id>")
@require_roles("admin")
def update_campground(campground_id: int):
    data = request.get_json(silent=True) or {}
    campground = campground_service.update_campground(current_principal(), campground_id, data)
    return jsonify(success=True, data=campground_to_dict(campground)), 200


@campground_bp.delete("/<int:campground_id>")
@require_roles("admin")
def delete_campground(campground_id: int):
    campground_service.delete_campground(current_principal(), campground_id)
    return jsonify(success=True, data={}), 200
