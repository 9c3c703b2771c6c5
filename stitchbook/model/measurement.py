"""Garment measurement sets.

A receipt carries measurements for exactly one garment category. Each
category has a fixed, ordered set of labels; values are free text as typed
at the counter ("38", "38.5", "15 1/2").
"""

SHIRT_FIELDS = (
    "Shoulder",
    "Chest / Bust",
    "Waist",
    "Hip",
    "Sleeve Length",
    "Armhole (Round)",
    "Neck",
    "Shirt / Top Length",
)

PANT_FIELDS = (
    "Waist (Pant Waist)",
    "Hip",
    "Inseam (Inner Leg Length)",
    "Outseam (Full Pant Length)",
    "Thigh",
    "Knee",
    "Ankle / Bottom Opening",
)

# "Hip" appears in both sets; a suit records it once
SUIT_FIELDS = tuple(dict.fromkeys(SHIRT_FIELDS + PANT_FIELDS + ("Coat Length (Optional)",)))


def _measure_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value)


class GarmentMeasurements:
    kind = None
    fields = ()

    def __init__(self, values=None):
        self.values = dict(values or {})

    @classmethod
    def from_mapping(cls, raw):
        """Keep only this garment's labels, in the garment's field order.

        Labels are matched ignoring case and surrounding whitespace; unknown
        labels are dropped.
        """
        if not isinstance(raw, dict):
            raw = {}
        by_key = {}
        for label, value in raw.items():
            if isinstance(label, str):
                by_key[label.strip().lower()] = value
        values = {}
        for field in cls.fields:
            key = field.lower()
            if key in by_key:
                values[field] = _measure_value(by_key[key])
        return cls(values)

    def unknown_labels(self, raw):
        if not isinstance(raw, dict):
            return []
        known = {f.lower() for f in self.fields}
        return [k for k in raw if not isinstance(k, str) or k.strip().lower() not in known]

    def as_dict(self):
        return dict(self.values)

    def __eq__(self, other):
        return type(self) is type(other) and self.values == other.values

    def __repr__(self):
        return f"{type(self).__name__}({self.values!r})"


class ShirtMeasurements(GarmentMeasurements):
    kind = "shirt"
    fields = SHIRT_FIELDS


class PantMeasurements(GarmentMeasurements):
    kind = "pant"
    fields = PANT_FIELDS


class SuitMeasurements(GarmentMeasurements):
    kind = "suit"
    fields = SUIT_FIELDS


GARMENTS = {cls.kind: cls for cls in (ShirtMeasurements, PantMeasurements, SuitMeasurements)}

MEASUREMENT_TYPES = tuple(GARMENTS)


def normalize_measurement_type(value):
    """'SHIRT ' -> 'shirt'; anything outside the garment set -> None."""
    if not isinstance(value, str):
        return None
    kind = value.strip().lower()
    return kind if kind in GARMENTS else None


def measurements_for(kind: str, raw) -> GarmentMeasurements:
    return GARMENTS[kind].from_mapping(raw)
