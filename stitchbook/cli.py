# stitchbook/cli.py
import random
from datetime import date, timedelta
from pathlib import Path

import click
import pandas as pd
from flask.cli import with_appcontext

from .extensions import db
from .services.numbering import ensure_counter, next_receipt_number
from .services.receipt_service import create_receipt, list_receipts
from .model.measurement import GARMENTS

EXPORT_COLUMNS = {
    "receiptNo": "Receipt No",
    "date": "Order Date",
    "customerName": "Customer Name",
    "phone": "Phone",
    "deliveryDate": "Delivery Date",
    "totalAmount": "Total Amount",
    "advancePaid": "Advance Paid",
    "balanceAmount": "Balance Amount",
}

SAMPLE_NAMES = ["Asha Verma", "Ravi Kumar", "Meera Nair", "John Mathew", "Fatima Shaikh", "Arjun Rao"]
SAMPLE_ITEMS = [
    ("Stitching", "Shirt stitching", 450),
    ("Stitching", "Pant stitching", 500),
    ("Alteration", "Sleeve shortening", 150),
    ("Fabric", "Cotton 2.5m", 750),
    ("Stitching", "Two piece suit", 3500),
]


@click.command("init-db")
@with_appcontext
def init_db():
    """Create tables and seed the receipt counter."""
    db.create_all()
    value = ensure_counter()
    click.echo(f"Database ready, last receipt number {value}")


@click.command("next-number")
@with_appcontext
def next_number():
    """Print the receipt number the next save will get."""
    click.echo(next_receipt_number())


@click.command("export-receipts")
@click.option("--out", "out_path", required=True, type=click.Path(dir_okay=False))
@click.option("--q", default=None, help="Name, phone or receipt number substring")
@click.option("--date", "on_date", default=None, help="Exact order or delivery date")
@with_appcontext
def export_receipts(out_path, q, on_date):
    """Export receipt summaries to .xlsx or .csv."""
    path = Path(out_path)
    suffix = path.suffix.lower()
    if suffix not in (".xlsx", ".csv"):
        raise click.BadParameter("output must end in .xlsx or .csv", param_hint="--out")

    rows = [r.as_summary() for r in list_receipts(q=q, date=on_date)]
    df = pd.DataFrame(rows, columns=["id", *EXPORT_COLUMNS]).drop(columns=["id"])
    df = df.rename(columns=EXPORT_COLUMNS)

    if suffix == ".xlsx":
        df.to_excel(path, index=False)
    else:
        df.to_csv(path, index=False)
    click.echo(f"{len(df)} receipts exported to {path}")


@click.command("seed-demo")
@click.option("--count", default=10, show_default=True, type=click.IntRange(min=1))
@with_appcontext
def seed_demo(count):
    """Create sample receipts through the normal save path."""
    rng = random.Random(count)
    today = date.today()
    kinds = list(GARMENTS)
    for n in range(count):
        kind = kinds[n % len(kinds)]
        items = rng.sample(SAMPLE_ITEMS, k=2)
        receipt = create_receipt({
            "customerName": rng.choice(SAMPLE_NAMES),
            "phone": f"98{rng.randrange(10**8):08d}",
            "date": today.isoformat(),
            "deliveryDate": (today + timedelta(days=7 + n % 5)).isoformat(),
            "advancePaid": 200,
            "measurementType": kind,
            "measurements": {field: str(30 + i) for i, field in enumerate(GARMENTS[kind].fields)},
            "items": [{"type": t, "description": d, "amount": a} for t, d, a in items],
        })
        click.echo(f"{receipt.receipt_no} {receipt.customer_name}")


def register_cli(app):
    app.cli.add_command(init_db)
    app.cli.add_command(next_number)
    app.cli.add_command(export_receipts)
    app.cli.add_command(seed_demo)
