# stitchbook/receipt/routes.py

from flask import request, url_for
from ..services.numbering import next_receipt_number
from ..services.receipt_service import create_receipt, get_receipt, list_receipts
from ..utils.api import api_response
from . import bp


def ok(data, status=200, headers=None):
    return api_response(data, status=status, headers=headers)


@bp.get("/next-receipt-number")
def next_number():
    return ok({"receiptNo": next_receipt_number()})


@bp.post("/receipts")
def create():
    payload = request.get_json(silent=True)
    receipt = create_receipt(payload)
    location = url_for("receipt.get_receipt_detail", rid=receipt.id, _external=True)
    return ok(receipt.as_api(), status=201, headers={"Location": location})


@bp.get("/receipts")
def list():
    """
    Query params:
      - q=...        name (any case), phone or receipt number substring
      - date=...     exact order date or delivery date
    """
    rows = list_receipts(q=request.args.get("q"), date=request.args.get("date"))
    return ok([r.as_summary() for r in rows])


@bp.get("/receipts/<rid>")
def get_receipt_detail(rid):
    # rid is matched as a string so a non-numeric id is a 400, not a routing 404
    return ok(get_receipt(rid).as_api())
