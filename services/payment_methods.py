"""
Payment method store.

A stored payment method is a tagged record: ``method`` selects which of the
card or bank columns are meaningful. Inside this module the two shapes are
handled as separate instrument types so that writing one branch always
clears the other.

Uniqueness is system-wide and keyed on the SHA-256 fingerprint of the raw
number, backed by sparse unique indexes on the fingerprint columns.
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.exc import IntegrityError

from models import db
from models.payment_method import BANK_NAMES, PAYMENT_METHODS, PaymentMethod
from security.principal import Principal
from services.errors import DuplicatePaymentMethod, NotAuthorized, NotFound, ValidationError
from services.fingerprint import fingerprint
from services.store import unit_of_work
from utils.audit import log_event

CARD_NUMBER_RE = re.compile(r"^\d{13,19}$")
BANK_ACCOUNT_NUMBER_RE = re.compile(r"^\d{10,12}$")
NAME_MAX_LENGTH = 50


@dataclass(frozen=True)
class CreditCard:
    card_number: str

    method = "credit_card"

    @property
    def fingerprint(self) -> str:
        return fingerprint(self.card_number)


@dataclass(frozen=True)
class BankAccount:
    bank_account_number: str
    bank_name: str

    method = "bank_account"

    @property
    def fingerprint(self) -> str:
        return fingerprint(self.bank_account_number)


Instrument = Union[CreditCard, BankAccount]


def _clean_number(value, field: str) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValidationError(f"{field} must be a string of digits")
    return str(value).strip() or None


def parse_instrument(method, card_number=None, bank_account_number=None, bank_name=None) -> Instrument:
    """Build the instrument for ``method`` from raw input, validating its required fields."""
    if method not in PAYMENT_METHODS:
        raise ValidationError("Please select a payment method (credit_card or bank_account)")

    if method == "credit_card":
        card_number = _clean_number(card_number, "cardNumber")
        if not card_number:
            raise ValidationError("cardNumber is required for credit_card")
        if not CARD_NUMBER_RE.match(card_number):
            raise ValidationError("cardNumber must be 13-19 digits")
        return CreditCard(card_number=card_number)

    bank_account_number = _clean_number(bank_account_number, "bankAccountNumber")
    if not bank_account_number or not bank_name:
        raise ValidationError("bankAccountNumber and bankName are required for bank_account")
    if not BANK_ACCOUNT_NUMBER_RE.match(bank_account_number):
        raise ValidationError("Please provide a valid Thai bank account number (10-12 digits)")
    if bank_name not in BANK_NAMES:
        raise ValidationError(f"bankName must be one of: {', '.join(BANK_NAMES)}")
    return BankAccount(bank_account_number=bank_account_number, bank_name=bank_name)


def instrument_of(record: PaymentMethod) -> Instrument:
    if record.method == "credit_card":
        return CreditCard(card_number=record.card_number)
    if record.method == "bank_account":
        return BankAccount(bank_account_number=record.bank_account_number, bank_name=record.bank_name)
    raise ValueError(f"Unknown payment method type {record.method!r}")


def _apply_instrument(record: PaymentMethod, instrument: Instrument) -> None:
    # Drop both branches first so no field of the previous type survives a switch.
    record.card_number = None
    record.card_fingerprint = None
    record.bank_account_number = None
    record.bank_account_fingerprint = None
    record.bank_name = None

    record.method = instrument.method
    if isinstance(instrument, CreditCard):
        record.card_number = instrument.card_number
        record.card_fingerprint = instrument.fingerprint
    elif isinstance(instrument, BankAccount):
        record.bank_account_number = instrument.bank_account_number
        record.bank_account_fingerprint = instrument.fingerprint
        record.bank_name = instrument.bank_name
    else:
        raise TypeError(f"Unsupported instrument {instrument!r}")


def _ensure_unique(instrument: Instrument, exclude_id: Optional[int] = None) -> None:
    if isinstance(instrument, CreditCard):
        q = PaymentMethod.query.filter_by(card_fingerprint=instrument.fingerprint)
    else:
        q = PaymentMethod.query.filter_by(bank_account_fingerprint=instrument.fingerprint)
    if exclude_id is not None:
        q = q.filter(PaymentMethod.id != exclude_id)
    if q.first() is not None:
        raise DuplicatePaymentMethod("Payment method already exists")


def _clean_name(name) -> Optional[str]:
    if name is None:
        return None
    if not isinstance(name, str) or len(name.strip()) > NAME_MAX_LENGTH:
        raise ValidationError(f"name must be a string of at most {NAME_MAX_LENGTH} characters")
    return name.strip() or None


def _load_owned(principal: Principal, payment_method_id: int) -> PaymentMethod:
    record = db.session.get(PaymentMethod, payment_method_id)
    if record is None:
        raise NotFound("Payment method not found")
    if record.user_id != principal.user_id:
        raise NotAuthorized("Not authorized")
    return record


def list_payment_methods(principal: Principal):
    return (
        PaymentMethod.query
        .filter_by(user_id=principal.user_id)
        .order_by(PaymentMethod.created_at.asc(), PaymentMethod.id.asc())
        .all()
    )


def get_payment_method(principal: Principal, payment_method_id: int) -> PaymentMethod:
    record = db.session.get(PaymentMethod, payment_method_id)
    if record is None or (record.user_id != principal.user_id and not principal.is_admin):
        raise NotFound("Payment method not found")
    return record


def add_payment_method(
    principal: Principal,
    method,
    card_number=None,
    bank_account_number=None,
    bank_name=None,
    name=None,
) -> PaymentMethod:
    instrument = parse_instrument(
        method,
        card_number=card_number,
        bank_account_number=bank_account_number,
        bank_name=bank_name,
    )
    name = _clean_name(name)
    _ensure_unique(instrument)

    record = PaymentMethod(user_id=principal.user_id, name=name)
    _apply_instrument(record, instrument)

    try:
        with unit_of_work("create payment method") as session:
            session.add(record)
    except IntegrityError:
        # lost a race against a concurrent insert of the same number
        raise DuplicatePaymentMethod("Payment method already exists")

    log_event(
        "PAYMENT_METHOD_CREATE",
        user_id=principal.user_id,
        entity="payment_method",
        entity_id=record.id,
        metadata={"method": record.method},
    )
    return record


def update_payment_method(principal: Principal, payment_method_id: int, patch: dict) -> PaymentMethod:
    """Apply ``patch`` (snake_case keys, only those supplied) to an owned record.

    Changing ``method`` discards every field of the old type; the new type's
    fields must then all come from the patch.
    """
    record = _load_owned(principal, payment_method_id)

    new_method = patch.get("method") or record.method
    if new_method != record.method:
        instrument = parse_instrument(
            new_method,
            card_number=patch.get("card_number"),
            bank_account_number=patch.get("bank_account_number"),
            bank_name=patch.get("bank_name"),
        )
    else:
        current = instrument_of(record)
        if isinstance(current, CreditCard):
            instrument = parse_instrument(
                new_method,
                card_number=patch.get("card_number") or current.card_number,
            )
        else:
            instrument = parse_instrument(
                new_method,
                bank_account_number=patch.get("bank_account_number") or current.bank_account_number,
                bank_name=patch.get("bank_name") or current.bank_name,
            )

    _ensure_unique(instrument, exclude_id=record.id)

    name = _clean_name(patch["name"]) if "name" in patch else record.name
    previous_method = record.method

    try:
        with unit_of_work("update payment method"):
            _apply_instrument(record, instrument)
            record.name = name
    except IntegrityError:
        raise DuplicatePaymentMethod("Payment method already exists")

    log_event(
        "PAYMENT_METHOD_UPDATE",
        user_id=principal.user_id,
        entity="payment_method",
        entity_id=record.id,
        metadata={"method": record.method, "previous_method": previous_method},
    )
    return record


def delete_payment_method(principal: Principal, payment_method_id: int) -> None:
    record = _load_owned(principal, payment_method_id)

    # Transactions keep pointing at the id; they are ledger history.
    with unit_of_work("delete payment method") as session:
        session.delete(record)

    log_event("PAYMENT_METHOD_DELETE", user_id=principal.user_id, entity="payment_method", entity_id=payment_method_id)
