# stitchbook/model/counter.py
from ..extensions import db

COUNTER_ID = 1


class ReceiptCounter(db.Model):
    """Single row holding the last reserved receipt number."""

    __tablename__ = "receipt_counter"
    id = db.Column(db.Integer, primary_key=True)
    value = db.Column(db.Integer, nullable=False, default=0)
