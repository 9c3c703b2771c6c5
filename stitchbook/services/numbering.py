# stitchbook/services/numbering.py
"""Sequential receipt numbers.

The last issued number lives in the single ``receipt_counter`` row. A write
reserves its number with an in-place increment of that row, so concurrent
writers queue on the row lock instead of both reading the same maximum.
"""
from sqlalchemy import Integer, cast, func, select, update

from ..extensions import db
from ..logging import get_logger
from ..model import Receipt, ReceiptCounter
from ..model.counter import COUNTER_ID

logger = get_logger(__name__)


def format_receipt_no(n) -> str:
    """1 -> '0001'. No upper bound: 12345 -> '12345'."""
    try:
        n = int(n)
    except (TypeError, ValueError):
        n = 1
    return f"{max(1, n):04d}"


def _max_stored_number() -> int:
    # receipt_no is text; compare numerically so "10000" sorts after "9999"
    value = db.session.execute(select(func.max(cast(Receipt.receipt_no, Integer)))).scalar()
    return int(value or 0)


def _counter_value():
    return db.session.execute(
        select(ReceiptCounter.value).where(ReceiptCounter.id == COUNTER_ID)
    ).scalar_one_or_none()


def ensure_counter() -> int:
    """Create the counter row from existing receipts if it is missing."""
    value = _counter_value()
    if value is None:
        value = _max_stored_number()
        db.session.add(ReceiptCounter(id=COUNTER_ID, value=value))
        db.session.commit()
        logger.info("receipt counter seeded at %s", value)
    return value


def next_receipt_number() -> str:
    """Preview of the number the next write will get. Reserves nothing."""
    value = _counter_value()
    if value is None:
        value = _max_stored_number()
    return format_receipt_no(value + 1)


def reserve_receipt_number() -> str:
    """Increment the counter inside the caller's transaction.

    The caller owns the commit/rollback; a rollback releases the number.
    """
    result = db.session.execute(
        update(ReceiptCounter)
        .where(ReceiptCounter.id == COUNTER_ID)
        .values(value=ReceiptCounter.value + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        value = _max_stored_number() + 1
        db.session.add(ReceiptCounter(id=COUNTER_ID, value=value))
        db.session.flush()
    else:
        value = _counter_value()
    return format_receipt_no(value)
