from flask import Blueprint, request, jsonify

from services import payment_methods as payment_method_service
from utils.auth_context import current_principal, login_required
from utils.serializers import payment_method_to_dict

payment_method_bp = Blueprint("payment_method", __name__, url_prefix="/paymentmethod")

# wire name -> service field
PATCH_FIELDS = {
    "method": "method",
    "cardNumber": "card_number",
    "bankAccountNumber": "bank_account_number",
    "bankName": "bank_name",
    "name": "name",
}


def _truthy(value) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


@payment_method_bp.get("")
@login_required
def list_payment_methods():
    rows = payment_method_service.list_payment_methods(current_principal())
    return jsonify(success=True, count=len(rows), data=[payment_method_to_dict(pm) for pm in rows]), 200


@payment_method_bp.get("/<int:payment_method_id>")
@login_required
def get_payment_method(payment_method_id: int):
    principal = current_principal()
    record = payment_method_service.get_payment_method(principal, payment_method_id)
    # only the owner can ask for the raw number back
    reveal = _truthy(request.args.get("reveal")) and record.user_id == principal.user_id
    return jsonify(success=True, data=payment_method_to_dict(record, include_sensitive=reveal)), 200


@payment_method_bp.post("")
@login_required
def add_payment_method():
    data = request.get_json(silent=True) or {}
    record = payment_method_service.add_payment_method(
        current_principal(),
        data.get("method"),
        card_number=data.get("cardNumber"),
        bank_account_number=data.get("bankAccountNumber"),
        bank_name=data.get("bankName"),
        name=data.get("name"),
    )
    return jsonify(success=True, data=payment_method_to_dict(record)), 201


@payment_method_bp.put("/<int:payment_method_id>")
@login_required
def update_payment_method(payment_method_id: int):
    data = request.get_json(silent=True) or {}
    patch = {field: data[wire] for wire, field in PATCH_FIELDS.items() if wire in data}
    record = payment_method_service.update_payment_method(current_principal(), payment_method_id, patch)
    return jsonify(success=True, data=payment_method_to_dict(record)), 200


@payment_method_bp.delete("/<int:payment_method_id>")
@login_required
def delete_payment_method(payment_method_id: int):
    payment_method_service.delete_payment_method(current_principal(), payment_method_id)
    return jsonify(success=True, data={}), 200
