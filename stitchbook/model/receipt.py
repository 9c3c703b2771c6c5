# stitchbook/model/receipt.py
import json
from datetime import datetime, timezone

from ..extensions import db
from ..utils.money import to_float
from .measurement import measurements_for, GARMENTS


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Receipt(db.Model):
    __tablename__ = "receipts"

    id = db.Column(db.Integer, primary_key=True)
    receipt_no = db.Column(db.String(16), unique=True, nullable=False, index=True)  # "0001"

    order_date = db.Column(db.String(32), nullable=False)
    customer_name = db.Column(db.String(120), nullable=False, index=True)
    phone = db.Column(db.String(50), nullable=False, index=True)
    delivery_date = db.Column(db.String(32), nullable=False, index=True)

    # Money snapshot
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    advance_paid = db.Column(db.Numeric(12, 2), nullable=False)
    balance_amount = db.Column(db.Numeric(12, 2), nullable=False)

    measurement_type = db.Column(db.String(10), nullable=False)
    measurements_json = db.Column(db.Text, nullable=False, default="{}")

    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)

    items = db.relationship(
        "ReceiptItem",
        backref="receipt",
        cascade="all, delete-orphan",
        order_by="ReceiptItem.line_no",
        passive_deletes=True,
    )

    @property
    def measurements(self):
        try:
            raw = json.loads(self.measurements_json or "{}")
        except ValueError:
            raw = {}
        if self.measurement_type in GARMENTS:
            return measurements_for(self.measurement_type, raw)
        return raw

    @measurements.setter
    def measurements(self, value):
        data = value.as_dict() if hasattr(value, "as_dict") else dict(value or {})
        self.measurements_json = json.dumps(data)

    def as_summary(self):
        return {
            "id": self.id,
            "receiptNo": self.receipt_no,
            "date": self.order_date,
            "customerName": self.customer_name,
            "phone": self.phone,
            "deliveryDate": self.delivery_date,
            "totalAmount": to_float(self.total_amount),
            "advancePaid": to_float(self.advance_paid),
            "balanceAmount": to_float(self.balance_amount),
        }

    def as_api(self):
        measurements = self.measurements
        return {
            **self.as_summary(),
            "measurementType": self.measurement_type,
            "measurements": measurements.as_dict() if hasattr(measurements, "as_dict") else measurements,
            "items": [i.as_api() for i in self.items],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class ReceiptItem(db.Model):
    __tablename__ = "receipt_items"

    id = db.Column(db.Integer, primary_key=True)
    receipt_id = db.Column(
        db.Integer,
        db.ForeignKey("receipts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_no = db.Column(db.Integer, nullable=False)
    item_type = db.Column(db.String(120), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    def as_api(self):
        return {
            "lineNo": self.line_no,
            "type": self.item_type,
            "description": self.description,
            "amount": to_float(self.amount),
        }
