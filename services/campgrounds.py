from sqlalchemy.exc import IntegrityError

from models import db
from models.booking import Booking
from models.campground import Campground
from security.principal import Principal
from services.errors import DuplicateResource, NotFound, ValidationError
from services.store import unit_of_work
from utils.audit import log_event

REQUIRED_FIELDS = ("name", "address", "district", "province", "postalcode", "tel", "region", "price")
TEXT_FIELDS = ("name", "address", "district", "province", "postalcode", "tel", "region")
MAX_LENGTHS = {"name": 50, "postalcode": 5}


def _clean(data: dict, partial: bool) -> dict:
    out = {}
    for field in TEXT_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"Please add a {field}")
        value = value.strip()
        limit = MAX_LENGTHS.get(field)
        if limit and len(value) > limit:
            raise ValidationError(f"{field} can not be more than {limit} characters")
        out[field] = value

    if "price" in data:
        price = data["price"]
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise ValidationError("price must be a number")
        if price < 0:
            raise ValidationError("price can not be negative")
        out["price"] = float(price)

    if not partial:
        missing = [f for f in REQUIRED_FIELDS if f not in out]
        if missing:
            raise ValidationError(f"Please add a {missing[0]}", details={"missing": missing})
    return out


def _ensure_unique(fields: dict, exclude_id=None) -> None:
    for column in ("name", "tel"):
        if column not in fields:
            continue
        q = Campground.query.filter(getattr(Campground, column) == fields[column])
        if exclude_id is not None:
            q = q.filter(Campground.id != exclude_id)
        if q.first() is not None:
            raise DuplicateResource(f"A campground with this {column} already exists")


def _load(campground_id: int) -> Campground:
    campground = db.session.get(Campground, campground_id)
    if campground is None:
        raise NotFound(f"Campground not found with id of {campground_id}")
    return campground


def list_campgrounds():
    return Campground.query.order_by(Campground.created_at.desc(), Campground.id.desc()).all()


def get_campground(campground_id: int) -> Campground:
    return _load(campground_id)


def create_campground(principal: Principal, data: dict) -> Campground:
    fields = _clean(data, partial=False)
    _ensure_unique(fields)

    campground = Campground(**fields)
    try:
        with unit_of_work("create campground") as session:
            session.add(campground)
    except IntegrityError:
        raise DuplicateResource("A campground with this name or tel already exists")

    log_event("CAMPGROUND_CREATE", user_id=principal.user_id, entity="campground", entity_id=campground.id)
    return campground


def update_campground(principal: Principal, campground_id: int, data: dict) -> Campground:
    campground = _load(campground_id)
    fields = _clean(data, partial=True)
    _ensure_unique(fields, exclude_id=campground.id)

    try:
        with unit_of_work("update campground"):
            for key, value in fields.items():
                setattr(campground, key, value)
    except IntegrityError:
        raise DuplicateResource("A campground with this name or tel already exists")

    log_event(
        "CAMPGROUND_UPDATE",
        user_id=principal.user_id,
        entity="campground",
        entity_id=campground.id,
        metadata={"fields": sorted(fields)},
    )
    return campground


def delete_campground(principal: Principal, campground_id: int) -> None:
    """Delete the campground and every booking at it; their transactions stay."""
    campground = _load(campground_id)

    with unit_of_work("delete campground") as session:
        removed = (
            Booking.query
            .filter_by(campground_id=campground.id)
            .delete(synchronize_session=False)
        )
        session.delete(campground)

    log_event(
        "CAMPGROUND_DELETE",
        user_id=principal.user_id,
        entity="campground",
        entity_id=campground_id,
        metadata={"bookings_removed": removed},
    )
