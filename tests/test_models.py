import pytest

from medscript.parsers.base import (
    Diagnostic,
    extract_first_number,
    format_number,
    integral_or_float,
    leading_number_text,
    parse_number,
    round_half_away,
)
from medscript.parsers.models import Document, Duration


@pytest.mark.parametrize(
    "value,unit,days",
    [
        (5, "d", 5),
        (2.5, "d", 3),
        (-2.5, "d", -3),
        (1, "w", 7),
        (1.5, "w", 11),
        (1, "m", 30),
        (0.5, "m", 15),
        (4, "", 4),
    ],
)
def test_duration_to_days_rounded(value, unit, days):
    assert Duration(value, unit).to_days_rounded() == days


def test_round_half_away_from_zero():
    assert round_half_away(0.5) == 1
    assert round_half_away(1.5) == 2
    assert round_half_away(-0.5) == -1
    assert round_half_away(2.4) == 2


def test_allergy_set_keeps_first_insertion():
    doc = Document()
    assert doc.add_allergy("Penicillin") is True
    assert doc.add_allergy("penicillin") is False
    doc.add_allergy("Sulfa")
    doc.add_allergy("PENICILLIN")
    assert doc.allergies == ["penicillin", "sulfa"]


def test_parse_number():
    assert parse_number("5") == 5.0
    assert parse_number("0.25") == 0.25
    assert parse_number("1/4") == 0.25
    for bad in ("", "abc", "1/0", "1."):
        with pytest.raises(ValueError):
            parse_number(bad)


def test_extract_first_number():
    assert extract_first_number("500mg") == 500.0
    assert extract_first_number("5mg/5ml") == 5.0
    assert extract_first_number("0.5%") == 0.5
    assert extract_first_number("mg") == 0.0
    assert extract_first_number("") == 0.0


def test_format_number():
    assert format_number(58.0) == "58"
    assert format_number(58.5) == "58.5"
    assert format_number(0) == "0"


def test_diagnostic_rendering():
    assert str(Diagnostic.error(3, 7, "boom")) == "ERROR @ 3:7 - boom"
    assert str(Diagnostic.warning(1, 1, "hm")) == "WARNING @ 1:1 - hm"


def test_non_finite_values():
    with pytest.raises(ValueError):
        parse_number("9" * 400)
    with pytest.raises(ValueError):
        parse_number("9" * 400 + "/1")
    with pytest.raises(ValueError):
        round_half_away(float("inf"))
    assert format_number(float("inf")) == "inf"
    assert extract_first_number("9" * 400 + "mg") == float("inf")
    assert leading_number_text("x" + "9" * 400 + "mg") == "9" * 400
    assert leading_number_text("mg") == ""


def test_integral_or_float():
    assert integral_or_float(58.0) == 58
    assert isinstance(integral_or_float(58.0), int)
    assert integral_or_float(58.5) == 58.5
    assert integral_or_float(float("inf")) == float("inf")
