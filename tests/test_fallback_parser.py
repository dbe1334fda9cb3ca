from healthlens.services.fallback_parser import parse_line, parse_text
from healthlens.services.validator import validate_markers


def test_parse_line_with_reference_range():
    row = parse_line("HbA1c: 7.2 (ref: 4.0-6.0)")
    assert row.name == "HbA1c"
    assert row.value == "7.2"
    assert row.unit == ""
    assert row.ref_range == "4.0-6.0"


def test_parse_line_with_unit():
    row = parse_line("Glucose Fasting: 125 mg/dL")
    assert row.name == "Glucose Fasting"
    assert row.value == "125"
    assert row.unit == "mg/dL"
    assert row.ref_range is None


def test_parse_tabular_line():
    row = parse_line("Hemoglobin (Hb) 13.5 g/dL 12 - 16")
    assert row.name == "Hemoglobin (Hb)"
    assert row.value == "13.5"
    assert row.unit == "g/dL"
    assert row.ref_range == "12 - 16"


def test_lines_without_values_are_skipped():
    assert parse_line("LABORATORY REPORT") is None
    assert parse_line("") is None
    assert parse_line("123 456") is None


def test_parse_text_feeds_validator():
    text = "Patient: John\nHbA1c: 7.2 (ref: 4.0-6.0)\nGlucose Fasting: 125 mg/dL\nLDL: 150\nDate 2024-01-01"
    markers = validate_markers(parse_text(text))
    assert [m.code for m in markers] == ["HBA1C", "GLU", "LDL"]
