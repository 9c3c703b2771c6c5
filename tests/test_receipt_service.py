from decimal import Decimal

import pytest
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError

from stitchbook.errors import ConflictError, InternalError, NotFound, ValidationError, parse_unique_violation
from stitchbook.extensions import db
from stitchbook.model import Receipt, ReceiptCounter, ReceiptItem, ShirtMeasurements
from stitchbook.services import receipt_service
from stitchbook.services.receipt_service import (
    create_receipt,
    get_receipt,
    is_number_collision,
    normalize_items,
    validate_receipt_payload,
)


# ---------- validation ----------

@pytest.mark.parametrize("field", ["customerName", "phone", "date", "deliveryDate"])
def test_required_fields(make_payload, field):
    with pytest.raises(ValidationError) as exc:
        validate_receipt_payload(make_payload(**{field: "   "}))
    assert "Missing required fields" in exc.value.message


def test_missing_fields_are_named(make_payload):
    with pytest.raises(ValidationError) as exc:
        validate_receipt_payload(make_payload(customerName=None, deliveryDate=""))
    assert exc.value.message == "Missing required fields: customer name, delivery date"


def test_payload_must_be_an_object():
    with pytest.raises(ValidationError):
        validate_receipt_payload(None)
    with pytest.raises(ValidationError):
        validate_receipt_payload(["not", "an", "object"])


def test_text_fields_are_trimmed(make_payload):
    data = validate_receipt_payload(make_payload(customerName="  Ravi Kumar ", phone=" 98450 "))
    assert data["customer_name"] == "Ravi Kumar"
    assert data["phone"] == "98450"


def test_measurement_type_is_case_insensitive(make_payload):
    data = validate_receipt_payload(make_payload(measurementType="SHIRT"))
    assert data["measurement_type"] == "shirt"
    assert isinstance(data["measurements"], ShirtMeasurements)


@pytest.mark.parametrize("kind", ["robe", "", None, 3])
def test_unknown_measurement_type_is_rejected(make_payload, kind):
    with pytest.raises(ValidationError) as exc:
        validate_receipt_payload(make_payload(measurementType=kind))
    assert exc.value.message == "Measurement type must be Shirt, Pant or Suit"


@pytest.mark.parametrize("items", [[], None, "Shirt", {"type": "x"}])
def test_items_must_be_a_non_empty_list(make_payload, items):
    with pytest.raises(ValidationError) as exc:
        validate_receipt_payload(make_payload(items=items))
    assert exc.value.message == "At least one billing item is required"


def test_only_item_with_empty_type_fails(make_payload):
    with pytest.raises(ValidationError) as exc:
        validate_receipt_payload(make_payload(items=[{"type": "", "description": "Kurta", "amount": 500}]))
    assert exc.value.message == "Billing items must include type and description"


def test_incomplete_items_are_dropped_and_renumbered():
    items = normalize_items([
        {"type": "  ", "description": "Kurta", "amount": 500},
        {"type": "Stitching", "description": " Kurta ", "amount": "650.50"},
        "garbage",
        {"type": "Fabric", "description": "", "amount": 100},
        {"type": "Alteration", "description": "Hem", "amount": 80},
    ])
    assert [(i["line_no"], i["item_type"], i["description"]) for i in items] == [
        (1, "Stitching", "Kurta"),
        (2, "Alteration", "Hem"),
    ]
    assert items[0]["amount"] == Decimal("650.50")


@pytest.mark.parametrize("amount", [None, "", "abc", -20, "NaN", "Infinity", True])
def test_bad_item_amounts_become_zero(amount):
    [item] = normalize_items([{"type": "Stitching", "description": "Shirt", "amount": amount}])
    assert item["amount"] == Decimal("0.00")


def test_total_defaults_to_item_sum(make_payload):
    data = validate_receipt_payload(make_payload(advancePaid=100))
    assert data["total_amount"] == Decimal("600.00")
    assert data["balance_amount"] == Decimal("500.00")


@pytest.mark.parametrize("total", [None, "", "n/a", -5])
def test_unusable_total_falls_back_to_item_sum(make_payload, total):
    data = validate_receipt_payload(make_payload(totalAmount=total))
    assert data["total_amount"] == Decimal("600.00")


def test_supplied_total_is_kept(make_payload):
    data = validate_receipt_payload(make_payload(totalAmount="1000", advancePaid="250.25"))
    assert data["total_amount"] == Decimal("1000.00")
    assert data["advance_paid"] == Decimal("250.25")
    assert data["balance_amount"] == Decimal("749.75")


@pytest.mark.parametrize("advance", [None, "", "lots", "1e30"])
def test_unusable_advance_defaults_to_zero(make_payload, advance):
    data = validate_receipt_payload(make_payload(advancePaid=advance))
    assert data["advance_paid"] == Decimal("0.00")
    assert data["balance_amount"] == data["total_amount"]


def test_negative_advance_is_rejected(make_payload):
    with pytest.raises(ValidationError) as exc:
        validate_receipt_payload(make_payload(advancePaid="-100"))
    assert exc.value.message == "Advance paid cannot be negative"


def test_oversized_total_falls_back_to_item_sum(make_payload):
    data = validate_receipt_payload(make_payload(totalAmount=1e30))
    assert data["total_amount"] == Decimal("600.00")


def test_oversized_item_amount_becomes_zero(make_payload):
    data = validate_receipt_payload(make_payload(items=[
        {"type": "Stitching", "description": "Sherwani", "amount": "1e30"},
        {"type": "Fabric", "description": "Silk 3m", "amount": 900},
    ]))
    assert [i["amount"] for i in data["items"]] == [Decimal("0.00"), Decimal("900.00")]
    assert data["total_amount"] == Decimal("900.00")


def test_item_sum_beyond_column_range_is_rejected(make_payload):
    items = [{"type": "Fabric", "description": f"Roll {n}", "amount": "9999999999"} for n in range(2)]
    with pytest.raises(ValidationError) as exc:
        validate_receipt_payload(make_payload(items=items))
    assert exc.value.message == "Billing items total is too large"


def test_client_balance_is_ignored(make_payload):
    data = validate_receipt_payload(make_payload(totalAmount=900, advancePaid=400, balanceAmount=1))
    assert data["balance_amount"] == Decimal("500.00")


# ---------- write path ----------

def test_create_then_get_round_trip(ctx, make_payload):
    created = create_receipt(make_payload(totalAmount=1000, advancePaid=300))
    rid = created.id
    db.session.expunge_all()

    fetched = get_receipt(rid).as_api()
    assert fetched["receiptNo"] == "0001"
    assert fetched["customerName"] == "Asha Verma"
    assert fetched["date"] == "2026-10-01"
    assert fetched["deliveryDate"] == "2026-10-08"
    assert fetched["totalAmount"] == 1000.0
    assert fetched["advancePaid"] == 300.0
    assert fetched["balanceAmount"] == fetched["totalAmount"] - fetched["advancePaid"]
    assert fetched["measurementType"] == "shirt"
    assert fetched["measurements"] == {"Shoulder": "17", "Chest / Bust": "38", "Neck": "15.5"}
    assert fetched["items"] == [
        {"lineNo": 1, "type": "Stitching", "description": "Formal shirt", "amount": 450.0},
        {"lineNo": 2, "type": "Alteration", "description": "Sleeve shortening", "amount": 150.0},
    ]
    assert fetched["createdAt"]


def test_measurements_keep_only_garment_labels(ctx, make_payload):
    receipt = create_receipt(make_payload(
        measurementType="pant",
        measurements={"thigh": 24, "Knee": " 18 ", "Shoulder": "17"},
    ))
    assert receipt.as_api()["measurements"] == {"Thigh": "24", "Knee": "18"}


def test_validation_failure_writes_nothing(ctx, make_payload):
    with pytest.raises(ValidationError):
        create_receipt(make_payload(measurementType="robe"))
    assert Receipt.query.count() == 0
    assert db.session.get(ReceiptCounter, 1).value == 0


def _integrity_error(message):
    return IntegrityError("INSERT", {}, Exception(message))


@pytest.mark.parametrize("message, expected", [
    ("UNIQUE constraint failed: receipts.receipt_no", True),
    ("UNIQUE constraint failed: receipt_counter.id", True),
    ("UNIQUE constraint failed: receipt_items.id", False),
    ("UNIQUE constraint failed: receipts.id", False),
    ('duplicate key value violates unique constraint "ix_receipts_receipt_no"\n'
     "DETAIL:  Key (receipt_no)=(0001) already exists.", True),
    ('duplicate key value violates unique constraint "receipt_counter_pkey"\n'
     "DETAIL:  Key (id)=(1) already exists.", True),
    ('duplicate key value violates unique constraint "receipt_items_pkey"\n'
     "DETAIL:  Key (id)=(7) already exists.", False),
    ("NOT NULL constraint failed: receipts.phone", False),
])
def test_is_number_collision(message, expected):
    assert is_number_collision(parse_unique_violation(_integrity_error(message))) is expected


def test_number_collision_is_a_conflict(ctx, make_payload):
    create_receipt(make_payload())
    # a counter that lags the stored receipts hands out a taken number
    db.session.execute(update(ReceiptCounter).values(value=0))
    db.session.commit()

    with pytest.raises(ConflictError) as exc:
        create_receipt(make_payload(customerName="Second Customer"))

    assert exc.value.status_code == 409
    assert [r.receipt_no for r in Receipt.query.all()] == ["0001"]
    assert ReceiptItem.query.count() == 2
    assert Receipt.query.filter_by(customer_name="Second Customer").count() == 0


def test_retry_after_counter_repair_succeeds(ctx, make_payload):
    create_receipt(make_payload())
    db.session.execute(update(ReceiptCounter).values(value=0))
    db.session.commit()
    with pytest.raises(ConflictError):
        create_receipt(make_payload())

    db.session.execute(update(ReceiptCounter).values(value=1))
    db.session.commit()
    assert create_receipt(make_payload()).receipt_no == "0002"


def test_database_failure_is_internal_and_rolled_back(ctx, make_payload, monkeypatch):
    def broken():
        raise OperationalError("UPDATE receipt_counter", {}, Exception("disk I/O error"))

    monkeypatch.setattr(receipt_service, "reserve_receipt_number", broken)
    with pytest.raises(InternalError) as exc:
        create_receipt(make_payload())
    assert exc.value.message == "Failed to save receipt"
    assert Receipt.query.count() == 0


def test_items_cascade_with_receipt(ctx, make_payload):
    receipt = create_receipt(make_payload())
    db.session.delete(receipt)
    db.session.commit()
    assert ReceiptItem.query.count() == 0


# ---------- read path ----------

def test_get_receipt_rejects_non_numeric_id(ctx):
    for bad in ("abc", "1.5", "-1", "", True):
        with pytest.raises(ValidationError):
            get_receipt(bad)


def test_get_receipt_missing(ctx):
    with pytest.raises(NotFound):
        get_receipt("999")


def test_get_receipt_id_beyond_integer_range(ctx):
    with pytest.raises(NotFound):
        get_receipt("99999999999999999999")
    with pytest.raises(NotFound):
        get_receipt(2**63)
    with pytest.raises(NotFound):
        get_receipt(-2**70)


def test_get_receipt_accepts_numeric_string(ctx, make_payload):
    receipt = create_receipt(make_payload())
    assert get_receipt(str(receipt.id)).receipt_no == "0001"
