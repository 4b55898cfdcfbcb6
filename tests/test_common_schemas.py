"""
Tests for the response envelope and validation-error flattening.
"""
from app.schemas.common import envelope, field_errors


def test_envelope_omits_empty_parts():
    assert envelope() == {"success": True}
    assert envelope({"id": "1"}, "Saved", count=1) == {
        "success": True,
        "message": "Saved",
        "count": 1,
        "data": {"id": "1"},
    }


def test_field_errors_strips_location_and_keeps_first_error_per_field():
    raw = [
        {"loc": ("body", "tuitionFees"), "type": "greater_than_equal", "msg": "too small"},
        {"loc": ("body", "tuitionFees"), "type": "float_type", "msg": "not a float"},
        {"loc": ("body", "degree"), "type": "missing", "msg": "Field required"},
        {"loc": ("query", "sortOrder"), "type": "value_error", "msg": "Value error, bad order"},
    ]

    errors = field_errors(raw, messages={"tuitionFees": "Tuition fees must be a non-negative number"})

    assert errors == [
        {"field": "tuitionFees", "message": "Tuition fees must be a non-negative number"},
        {"field": "degree", "message": "degree is required"},
        {"field": "sortOrder", "message": "Value error, bad order"},
    ]


def test_field_errors_keeps_nested_path():
    raw = [{"loc": ("body", "documentsRequired", 1), "type": "string_too_long", "msg": "too long"}]

    assert field_errors(raw) == [{"field": "documentsRequired.1", "message": "too long"}]
