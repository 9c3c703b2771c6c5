# stitchbook/services/receipt_service.py
from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from ..errors import ConflictError, InternalError, NotFound, ValidationError, parse_unique_violation
from ..extensions import db
from ..logging import get_logger
from ..model import Receipt, ReceiptItem
from ..model.measurement import measurements_for, normalize_measurement_type
from ..utils.money import MAX_AMOUNT, ZERO, parse_money, round_money
from .numbering import reserve_receipt_number

logger = get_logger(__name__)

LIST_LIMIT = 300

REQUIRED_FIELDS = (
    ("customerName", "customer name"),
    ("phone", "phone"),
    ("date", "date"),
    ("deliveryDate", "delivery date"),
)

# largest id an INTEGER primary key can hold
MAX_RECEIPT_ID = 2**63 - 1


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_items(raw_items):
    """Trim and coerce billing rows; drop rows missing a type or description.

    Line numbers are assigned after dropping, 1-based, in input order.
    """
    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        item_type = _text(raw.get("type"))
        description = _text(raw.get("description"))
        if not item_type or not description:
            continue
        items.append({
            "line_no": len(items) + 1,
            "item_type": item_type,
            "description": description,
            "amount": parse_money(raw.get("amount"), default=ZERO),
        })
    return items


def validate_receipt_payload(payload):
    """Check and normalize a create-receipt body. Raises ValidationError.

    Total and advance from the client are hints only: the total falls back to
    the item sum and the balance is always recomputed here.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    fields = {key: _text(payload.get(key)) for key, _ in REQUIRED_FIELDS}
    missing = [label for key, label in REQUIRED_FIELDS if not fields[key]]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    measurement_type = normalize_measurement_type(payload.get("measurementType"))
    if not measurement_type:
        raise ValidationError("Measurement type must be Shirt, Pant or Suit")

    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("At least one billing item is required")
    items = normalize_items(raw_items)
    if not items:
        raise ValidationError("Billing items must include type and description")

    items_total = round_money(sum((i["amount"] for i in items), ZERO))
    if items_total > MAX_AMOUNT:
        raise ValidationError("Billing items total is too large")
    total = parse_money(payload.get("totalAmount"))
    if total is None:
        total = items_total
    advance = parse_money(payload.get("advancePaid"), default=ZERO, signed=True)
    if advance < 0:
        raise ValidationError("Advance paid cannot be negative")

    raw_measurements = payload.get("measurements")
    measurements = measurements_for(measurement_type, raw_measurements)
    dropped = measurements.unknown_labels(raw_measurements)
    if dropped:
        logger.debug("ignoring %s labels for %s: %s", len(dropped), measurement_type, dropped)

    return {
        "customer_name": fields["customerName"],
        "phone": fields["phone"],
        "order_date": fields["date"],
        "delivery_date": fields["deliveryDate"],
        "measurement_type": measurement_type,
        "measurements": measurements,
        "total_amount": total,
        "advance_paid": advance,
        "balance_amount": round_money(total - advance),
        "items": items,
    }


def is_number_collision(info) -> bool:
    """True when a unique violation means another write took this receipt number."""
    if not info:
        return False
    if info.get("column") == "receipt_no":
        return info.get("table") in (None, "receipts")
    if info.get("column") == "id":
        # postgres names the constraint, not the table
        return info.get("table") == "receipt_counter" or info.get("constraint") == "receipt_counter_pkey"
    return False


def create_receipt(payload) -> Receipt:
    """Validate, number and persist a receipt with its items in one transaction."""
    data = validate_receipt_payload(payload)
    items = data.pop("items")
    measurements = data.pop("measurements")

    try:
        receipt = Receipt(receipt_no=reserve_receipt_number(), **data)
        receipt.measurements = measurements
        for item in items:
            receipt.items.append(ReceiptItem(**item))
        db.session.add(receipt)
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        info = parse_unique_violation(e)
        if is_number_collision(info):
            logger.warning("receipt number collision: %s", info)
            raise ConflictError("Receipt number collision. Please retry.") from e
        logger.exception("failed to save receipt")
        raise InternalError("Failed to save receipt") from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("failed to save receipt")
        raise InternalError("Failed to save receipt") from e

    logger.info(
        "receipt %s saved (id=%s, %s items, total=%s)",
        receipt.receipt_no, receipt.id, len(items), data["total_amount"],
    )
    return receipt


def _list_limit():
    try:
        limit = int(current_app.config.get("RECEIPT_LIST_LIMIT", LIST_LIMIT))
    except (TypeError, ValueError):
        limit = LIST_LIMIT
    return min(max(limit, 1), LIST_LIMIT)


def list_receipts(q=None, date=None):
    """
    Newest first, capped at LIST_LIMIT rows.
      q    -> substring of customer name (any case), phone or receipt number
      date -> exact match on delivery date or order date
    """
    q = _text(q)
    date = _text(date)

    query = Receipt.query
    if q:
        query = query.filter(or_(
            Receipt.customer_name.icontains(q, autoescape=True),
            Receipt.phone.contains(q, autoescape=True),
            Receipt.receipt_no.contains(q, autoescape=True),
        ))
    if date:
        query = query.filter(or_(Receipt.delivery_date == date, Receipt.order_date == date))

    return query.order_by(Receipt.id.desc()).limit(_list_limit()).all()


def parse_receipt_id(value) -> int:
    if isinstance(value, bool):
        raise ValidationError("Invalid receipt ID")
    if isinstance(value, int):
        return value
    value = _text(value)
    if not (value.isascii() and value.isdigit()):
        raise ValidationError("Invalid receipt ID")
    return int(value)


def get_receipt(receipt_id) -> Receipt:
    rid = parse_receipt_id(receipt_id)
    if not 0 < rid <= MAX_RECEIPT_ID:
        raise NotFound("Receipt not found")
    receipt = db.session.get(Receipt, rid, options=[selectinload(Receipt.items)])
    if receipt is None:
        raise NotFound("Receipt not found")
    return receipt
