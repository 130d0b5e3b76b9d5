from flask import Blueprint, request, jsonify

from services import bookings as booking_service
from utils.auth_context import current_principal, login_required
from utils.serializers import booking_to_dict, transaction_to_dict

booking_bp = Blueprint("booking", __name__)


@booking_bp.get("/bookings")
@booking_bp.get("/campgrounds/<int:campground_id>/bookings")
@login_required
def list_bookings(campground_id=None):
    rows = booking_service.list_bookings(current_principal(), campground_id=campground_id)
    return jsonify(success=True, count=len(rows), data=[booking_to_dict(b) for b in rows]), 200


@booking_bp.get("/bookings/<int:booking_id>")
@login_required
def get_booking(booking_id: int):
    booking = booking_service.get_booking(current_principal(), booking_id)
    return jsonify(success=True, data=booking_to_dict(booking)), 200


@booking_bp.post("/campgrounds/<int:campground_id>/bookings")
@login_required
def create_booking(campground_id: int):
    data = request.get_json(silent=True) or {}
    booking, transaction = booking_service.create_booking(
        current_principal(),
        campground_id,
        data.get("apptDate"),
        data.get("paymentMethod"),
    )
    return jsonify(
        success=True,
        data={
            "booking": booking_to_dict(booking),
            "transaction": transaction_to_dict(transaction),
        },
    ), 200


@booking_bp.put("/bookings/<int:booking_id>")
@login_required
def update_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    changes = {}
    if "apptDate" in data:
        changes["appt_date"] = data["apptDate"]
    booking = booking_service.update_booking(current_principal(), booking_id, changes)
    return jsonify(success=True, data=booking_to_dict(booking)), 200


@booking_bp.delete("/bookings/<int:booking_id>")
@login_required
def delete_booking(booking_id: int):
    booking_service.delete_booking(current_principal(), booking_id)
    return jsonify(success=True, data={}), 200
