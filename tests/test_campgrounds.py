import pytest
from sqlalchemy.exc import OperationalError

from models import db
from models.booking import Booking
from models.campground import Campground
from models.transaction import Transaction
from security.principal import Principal
from services.bookings import create_booking
from services.campgrounds import create_campground, delete_campground, update_campground
from services.errors import DuplicateResource, InfrastructureError, NotFound, ValidationError

VALID = {
    "name": "Doi Inthanon Camp",
    "address": "119 Moo 4",
    "district": "Chom Thong",
    "province": "Chiang Mai",
    "postalcode": "50160",
    "tel": "053-286-729",
    "region": "North",
    "price": 350,
}


def test_create_campground(admin):
    camp = create_campground(Principal.from_user(admin), dict(VALID))
    assert camp.id is not None
    assert camp.price == 350.0


@pytest.mark.parametrize(
    "override",
    [
        {"name": "x" * 51},
        {"postalcode": "501600"},
        {"price": -1},
        {"price": "free"},
        {"region": "  "},
    ],
)
def test_create_rejects_invalid_fields(admin, override):
    data = dict(VALID, **override)
    with pytest.raises(ValidationError):
        create_campground(Principal.from_user(admin), data)


def test_create_requires_every_field(admin):
    data = dict(VALID)
    del data["district"]
    with pytest.raises(ValidationError) as exc:
        create_campground(Principal.from_user(admin), data)
    assert exc.value.details == {"missing": ["district"]}


def test_duplicate_name_and_tel(admin):
    principal = Principal.from_user(admin)
    create_campground(principal, dict(VALID))

    with pytest.raises(DuplicateResource):
        create_campground(principal, dict(VALID, tel="02-000-0000"))
    with pytest.raises(DuplicateResource):
        create_campground(principal, dict(VALID, name="Other Camp"))


def test_partial_update(admin, campground):
    camp = update_campground(Principal.from_user(admin), campground.id, {"price": 2000})
    assert camp.price == 2000.0
    assert camp.province == "Chiang Mai"


def test_update_missing_is_not_found(admin):
    with pytest.raises(NotFound):
        update_campground(Principal.from_user(admin), 404, {"price": 1})


def test_delete_cascades_bookings_and_keeps_transactions(make_user, admin, make_campground, make_card, tomorrow):
    owner = make_user()
    doomed, other = make_campground(), make_campground()
    principal = Principal.from_user(owner)
    card = make_card(owner)
    create_booking(principal, doomed.id, tomorrow, card.id)
    create_booking(principal, doomed.id, tomorrow, card.id)
    create_booking(principal, other.id, tomorrow, card.id)
    doomed_id = doomed.id

    delete_campground(Principal.from_user(admin), doomed_id)

    assert Booking.query.filter_by(campground_id=doomed_id).count() == 0
    assert db.session.get(Campground, doomed_id) is None
    assert Booking.query.count() == 1
    assert Transaction.query.filter_by(campground_id=doomed_id).count() == 2


def test_http_public_reads_and_admin_writes(client, user, admin, login, campground):
    listing = client.get("/campgrounds")
    assert listing.status_code == 200
    assert listing.get_json()["count"] == 1

    detail = client.get(f"/campgrounds/{campground.id}").get_json()["data"]
    assert detail["bookings"] == []

    forbidden = client.post("/campgrounds", json=VALID, headers=login(user))
    assert forbidden.status_code == 403

    created = client.post("/campgrounds", json=VALID, headers=login(admin))
    assert created.status_code == 201
    assert created.get_json()["data"]["name"] == VALID["name"]

    assert client.get("/campgrounds/999").status_code == 404


def test_failed_campground_delete_keeps_its_bookings(monkeypatch, make_user, admin, campground, make_card, tomorrow):
    owner = make_user()
    create_booking(Principal.from_user(owner), campground.id, tomorrow, make_card(owner).id)
    campground_id = campground.id

    def disk_failure(instance):
        raise OperationalError("DELETE FROM campgrounds", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db.session, "delete", disk_failure)

    with pytest.raises(InfrastructureError) as exc:
        delete_campground(Principal.from_user(admin), campground_id)
    monkeypatch.undo()

    assert exc.value.retryable is True
    assert Booking.query.filter_by(campground_id=campground_id).count() == 1
    assert db.session.get(Campground, campground_id) is not None
