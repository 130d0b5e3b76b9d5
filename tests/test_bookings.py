from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

import services.bookings as booking_engine
from models import db
from models.booking import Booking
from models.transaction import Transaction
from security.principal import Principal
from services.bookings import (
    create_booking,
    delete_booking,
    get_booking,
    is_past,
    list_bookings,
    parse_appt_date,
    update_booking,
)
from services.errors import (
    BookingLimitReached,
    CampgroundNotFound,
    NotAuthorized,
    NotFound,
    PastDate,
    PaymentMethodRequired,
    ValidationError,
)


def test_parse_appt_date_normalises_to_naive_utc():
    assert parse_appt_date("2030-01-20T18:00:00Z") == datetime(2030, 1, 20, 18, 0, 0)
    assert parse_appt_date("2030-01-20T18:00:00+07:00") == datetime(2030, 1, 20, 11, 0, 0)


@pytest.mark.parametrize("value", [None, "", "tomorrow", 42])
def test_parse_appt_date_rejects_garbage(value):
    with pytest.raises(ValidationError):
        parse_appt_date(value)


def test_is_past_ignores_sub_second_difference():
    now = datetime(2030, 1, 1, 12, 0, 0, 900000)
    assert not is_past(datetime(2030, 1, 1, 12, 0, 0, 100000), now)
    assert is_past(datetime(2030, 1, 1, 11, 59, 59), now)


def test_create_booking_writes_booking_and_transaction(user, campground, make_card, tomorrow):
    card = make_card(user)
    booking, transaction = create_booking(Principal.from_user(user), campground.id, tomorrow, card.id)

    assert booking.user_id == user.id
    assert transaction.booking_id == booking.id
    assert transaction.payment_method_id == card.id
    assert transaction.amount == campground.price
    assert transaction.status == "success"
    assert transaction.paid_at is not None


def test_amount_is_price_at_booking_time(user, make_campground, make_card, tomorrow):
    camp = make_campground(price=900.0)
    card = make_card(user)
    _, transaction = create_booking(Principal.from_user(user), camp.id, tomorrow, card.id)

    camp.price = 1200.0
    assert transaction.amount == 900.0


def test_missing_campground_is_checked_first(user, tomorrow):
    with pytest.raises(CampgroundNotFound):
        create_booking(Principal.from_user(user), 999, "yesterday", None)


def test_missing_payment_method(user, campground, tomorrow):
    with pytest.raises(PaymentMethodRequired):
        create_booking(Principal.from_user(user), campground.id, tomorrow, None)


@pytest.mark.parametrize("role", ["user", "admin"])
def test_past_date_fails_for_any_role(make_user, campground, make_card, role):
    caller = make_user(role=role)
    card = make_card(caller)
    yesterday = datetime.utcnow() - timedelta(days=1)

    with pytest.raises(PastDate):
        create_booking(Principal.from_user(caller), campground.id, yesterday, card.id)
    assert Booking.query.count() == 0


def test_fourth_booking_hits_limit(user, campground, make_card, tomorrow):
    principal = Principal.from_user(user)
    card = make_card(user)
    for _ in range(3):
        create_booking(principal, campground.id, tomorrow, card.id)

    with pytest.raises(BookingLimitReached) as exc:
        create_booking(principal, campground.id, tomorrow, card.id)

    assert f"id of {user.id} has already made 3 bookings" in exc.value.message
    assert Booking.query.count() == 3
    assert Transaction.query.count() == 3


def test_admin_is_exempt_from_limit(admin, campground, make_card, tomorrow):
    principal = Principal.from_user(admin)
    card = make_card(admin)
    for _ in range(5):
        create_booking(principal, campground.id, tomorrow, card.id)
    assert Booking.query.filter_by(user_id=admin.id).count() == 5


def test_limit_is_configurable(app, user, campground, make_card, tomorrow):
    app.config["BOOKING_LIMIT_PER_USER"] = 1
    principal = Principal.from_user(user)
    card = make_card(user)
    create_booking(principal, campground.id, tomorrow, card.id)

    with pytest.raises(BookingLimitReached):
        create_booking(principal, campground.id, tomorrow, card.id)


def test_someone_elses_payment_method_is_not_found(make_user, campground, make_card, tomorrow):
    owner, other = make_user(), make_user()
    card = make_card(owner)

    with pytest.raises(NotFound):
        create_booking(Principal.from_user(other), campground.id, tomorrow, card.id)
    assert Transaction.query.count() == 0


def test_list_scope(make_user, make_campground, make_card, tomorrow):
    alice, bob, admin = make_user(), make_user(), make_user(role="admin")
    camp_a, camp_b = make_campground(), make_campground()
    create_booking(Principal.from_user(alice), camp_a.id, tomorrow, make_card(alice).id)
    create_booking(Principal.from_user(bob), camp_b.id, tomorrow, make_card(bob).id)

    assert [b.user_id for b in list_bookings(Principal.from_user(alice))] == [alice.id]
    assert len(list_bookings(Principal.from_user(admin))) == 2
    assert [b.campground_id for b in list_bookings(Principal.from_user(admin), camp_b.id)] == [camp_b.id]
    # the campground filter does not widen a user's view
    assert list_bookings(Principal.from_user(alice), camp_b.id) == []


def test_get_booking_masks_other_users(make_user, campground, make_card, tomorrow):
    owner, other, admin = make_user(), make_user(), make_user(role="admin")
    booking, _ = create_booking(Principal.from_user(owner), campground.id, tomorrow, make_card(owner).id)

    assert get_booking(Principal.from_user(admin), booking.id).id == booking.id
    with pytest.raises(NotFound):
        get_booking(Principal.from_user(other), booking.id)


def test_update_booking_rules(make_user, campground, make_card, tomorrow):
    owner, other = make_user(), make_user()
    booking, _ = create_booking(Principal.from_user(owner), campground.id, tomorrow, make_card(owner).id)

    with pytest.raises(NotAuthorized):
        update_booking(Principal.from_user(other), booking.id, {"appt_date": tomorrow})
    with pytest.raises(PastDate):
        update_booking(Principal.from_user(owner), booking.id, {"appt_date": datetime.utcnow() - timedelta(days=2)})

    later = (tomorrow + timedelta(days=7)).replace(microsecond=0)
    updated = update_booking(Principal.from_user(owner), booking.id, {"appt_date": later})
    assert updated.appt_date == later


def test_delete_booking_removes_only_its_transaction(user, campground, make_card, tomorrow):
    principal = Principal.from_user(user)
    card = make_card(user)
    first, first_tx = create_booking(principal, campground.id, tomorrow, card.id)
    second, second_tx = create_booking(principal, campground.id, tomorrow, card.id)
    first_id, second_tx_id = first.id, second_tx.id

    delete_booking(principal, first_id)

    assert db.session.get(Booking, first_id) is None
    assert Transaction.query.filter_by(booking_id=first_id).count() == 0
    assert [t.id for t in Transaction.query.all()] == [second_tx_id]


def test_delete_booking_not_owner(make_user, campground, make_card, tomorrow):
    owner, other, admin = make_user(), make_user(), make_user(role="admin")
    booking, _ = create_booking(Principal.from_user(owner), campground.id, tomorrow, make_card(owner).id)

    with pytest.raises(NotAuthorized) as exc:
        delete_booking(Principal.from_user(other), booking.id)
    assert "not authorized to delete" in exc.value.message

    delete_booking(Principal.from_user(admin), booking.id)
    assert Booking.query.count() == 0


def test_http_create_booking(client, user, campground, make_card, login, tomorrow):
    card = make_card(user)
    resp = client.post(
        f"/campgrounds/{campground.id}/bookings",
        json={"apptDate": tomorrow.isoformat() + "Z", "paymentMethod": card.id},
        headers=login(user),
    )
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["booking"]["campground"]["id"] == campground.id
    assert body["data"]["transaction"]["amount"] == campground.price


def test_http_error_shapes(client, user, campground, login, tomorrow):
    headers = login(user)

    missing_pm = client.post(
        f"/campgrounds/{campground.id}/bookings", json={"apptDate": tomorrow.isoformat()}, headers=headers
    )
    assert missing_pm.status_code == 400
    assert missing_pm.get_json()["code"] == "PAYMENT_METHOD_REQUIRED"

    no_camp = client.post("/campgrounds/999/bookings", json={"paymentMethod": 1}, headers=headers)
    assert no_camp.status_code == 404
    assert no_camp.get_json() == {
        "success": False,
        "error": "No Campground with the id of 999",
        "code": "CAMPGROUND_NOT_FOUND",
    }

    anonymous = client.get("/bookings")
    assert anonymous.status_code == 401


def test_failed_transaction_insert_leaves_no_booking(monkeypatch, user, campground, make_card, tomorrow):
    card = make_card(user)

    def unpriced_transaction(**fields):
        fields["amount"] = None
        return Transaction(**fields)

    monkeypatch.setattr(booking_engine, "Transaction", unpriced_transaction)

    with pytest.raises(IntegrityError):
        create_booking(Principal.from_user(user), campground.id, tomorrow, card.id)

    assert Booking.query.count() == 0
    assert Transaction.query.count() == 0
