"""Shared fixtures: a fresh app and SQLite file per test."""

import pytest

from stitchbook import create_app
from stitchbook.config import TestingConfig
from stitchbook.extensions import db


@pytest.fixture
def app(tmp_path):
    app = create_app(TestingConfig, SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'stitchbook.db'}")
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def make_payload():
    def _make(**overrides):
        payload = {
            "customerName": "Asha Verma",
            "phone": "9876543210",
            "date": "2026-10-01",
            "deliveryDate": "2026-10-08",
            "measurementType": "shirt",
            "measurements": {"Shoulder": "17", "Chest / Bust": "38", "Neck": "15.5"},
            "items": [
                {"type": "Stitching", "description": "Formal shirt", "amount": 450},
                {"type": "Alteration", "description": "Sleeve shortening", "amount": 150},
            ],
        }
        payload.update(overrides)
        return payload
    return _make
