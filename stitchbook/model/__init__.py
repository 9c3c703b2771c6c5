# ------ stitchbook/model/__init__.py ------

from .counter import ReceiptCounter
from .measurement import (
    GarmentMeasurements,
    ShirtMeasurements,
    PantMeasurements,
    SuitMeasurements,
    MEASUREMENT_TYPES,
)
from .receipt import Receipt, ReceiptItem

__all__ = [
    "Receipt",
    "ReceiptItem",
    "ReceiptCounter",
    "GarmentMeasurements",
    "ShirtMeasurements",
    "PantMeasurements",
    "SuitMeasurements",
    "MEASUREMENT_TYPES",
]
