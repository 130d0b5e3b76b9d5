from flask import Blueprint, jsonify

from services import transactions as transaction_service
from utils.auth_context import current_principal, login_required
from utils.serializers import transaction_to_dict

transaction_bp = Blueprint("transaction", __name__, url_prefix="/transaction")


@transaction_bp.get("")
@login_required
def list_transactions():
    rows = transaction_service.list_transactions(current_principal())
    return jsonify(success=True, count=len(rows), data=[transaction_to_dict(t, populate=True) for t in rows]), 200


@transaction_bp.get("/<int:transaction_id>")
@login_required
def get_transaction(transaction_id: int):
    transaction = transaction_service.get_transaction(current_principal(), transaction_id)
    return jsonify(success=True, data=transaction_to_dict(transaction, populate=True)), 200
