from models import db
from models.booking import Booking
from models.payment_method import PaymentMethod
from models.session import Session
from models.user import ROLES, User
from security.principal import Principal
from services.errors import Forbidden, NotFound, ValidationError
from services.store import unit_of_work
from utils.audit import log_event


def _load(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound(f"User not found with id of {user_id}")
    return user


def list_users():
    return User.query.order_by(User.created_at.desc(), User.id.desc()).all()


def get_user(user_id: int) -> User:
    return _load(user_id)


def set_role(principal: Principal, user_id: int, role) -> User:
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")

    user = _load(user_id)
    if user.id == principal.user_id and role != "admin":
        raise Forbidden("You cannot remove your own admin role")

    previous = user.role
    with unit_of_work("update role"):
        user.role = role

    log_event(
        "ADMIN_UPDATE_ROLE",
        user_id=principal.user_id,
        entity="user",
        entity_id=user.id,
        metadata={"from": previous, "to": role},
    )
    return user


def delete_user(principal: Principal, user_id: int) -> None:
    """Remove the account with its sessions, payment methods and bookings.

    Transactions of the removed bookings stay in the ledger.
    """
    user = _load(user_id)
    if user.id == principal.user_id:
        raise Forbidden("You cannot delete your own account")

    with unit_of_work("delete user") as session:
        Session.query.filter_by(user_id=user.id).delete(synchronize_session=False)
        PaymentMethod.query.filter_by(user_id=user.id).delete(synchronize_session=False)
        bookings = Booking.query.filter_by(user_id=user.id).delete(synchronize_session=False)
        session.delete(user)

    log_event(
        "ADMIN_DELETE_USER",
        user_id=principal.user_id,
        entity="user",
        entity_id=user_id,
        metadata={"bookings_removed": bookings},
    )
