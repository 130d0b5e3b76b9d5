from datetime import datetime, timedelta

from models.booking import Booking
from models.transaction import Transaction
from security.principal import Principal
from services.bookings import create_booking
from services.sweeper import purge_expired_bookings
from tasks.celery_app import BEAT_SCHEDULE
from tasks.cleanup import purge_expired


def _two_bookings(user, campground, make_card):
    principal = Principal.from_user(user)
    card = make_card(user)
    soon = datetime.utcnow() + timedelta(hours=1)
    later = datetime.utcnow() + timedelta(days=10)
    create_booking(principal, campground.id, soon, card.id)
    create_booking(principal, campground.id, later, card.id)
    return soon, later


def test_purge_removes_only_past_bookings(user, campground, make_card):
    soon, later = _two_bookings(user, campground, make_card)

    removed = purge_expired_bookings(now=soon + timedelta(minutes=1))

    assert removed == 1
    assert [b.appt_date for b in Booking.query.all()] == [later]
    # ledger rows are retained
    assert Transaction.query.count() == 2


def test_purge_with_nothing_expired(user, campground, make_card):
    _two_bookings(user, campground, make_card)
    assert purge_expired_bookings() == 0
    assert Booking.query.count() == 2


def test_celery_task_runs_sweeper(app):
    assert "bookings.purge_expired" in app.extensions["celery"].tasks
    assert purge_expired.delay().get() == 0


def test_beat_runs_daily_at_midnight(app):
    entry = BEAT_SCHEDULE["purge-expired-bookings"]
    assert entry["task"] == "bookings.purge_expired"
    assert entry["schedule"].hour == {0}
    assert entry["schedule"].minute == {0}
    assert app.extensions["celery"].conf.beat_schedule == BEAT_SCHEDULE


def test_cli_command(app, user, campground, make_card):
    result = app.test_cli_runner().invoke(args=["purge-expired-bookings"])
    assert result.exit_code == 0
    assert "0 expired booking(s) removed" in result.output
