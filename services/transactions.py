from models import db
from models.transaction import Transaction
from security.principal import Principal
from services.errors import NotFound


def list_transactions(principal: Principal):
    """Newest first. Admins read the whole ledger."""
    q = Transaction.query
    if not principal.is_admin:
        q = q.filter_by(user_id=principal.user_id)
    return q.order_by(Transaction.transaction_date.desc(), Transaction.id.desc()).all()


def get_transaction(principal: Principal, transaction_id: int) -> Transaction:
    transaction = db.session.get(Transaction, transaction_id)
    # someone else's transaction looks exactly like a missing one
    if transaction is None or (transaction.user_id != principal.user_id and not principal.is_admin):
        raise NotFound("Transaction not found")
    return transaction
