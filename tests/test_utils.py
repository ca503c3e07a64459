import pytest
from pydantic import ValidationError

from config import load_settings
from utils import format_currency, parse_currency, safe_filename


@pytest.mark.parametrize("amount,expected", [
    (1234.5, "₹1,234.50"),
    (-40, "-₹40.00"),
    (0, "₹0.00"),
    (-0.001, "₹0.00"),
])
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_format_currency_symbol():
    assert format_currency(5, "€") == "€5.00"


@pytest.mark.parametrize("text,expected", [
    ("12.50", 12.5),
    ("12,50", 12.5),
    (" 7 ", 7),
    ("3.457", 3.46),
])
def test_parse_currency(text, expected):
    assert parse_currency(text) == expected


@pytest.mark.parametrize("text", ["abc", "", "nan", "inf"])
def test_parse_currency_invalid(text):
    with pytest.raises(ValueError, match="Invalid amount format"):
        parse_currency(text)


def test_safe_filename():
    assert safe_filename("Trip to Goa!") == "Trip_to_Goa_"


def test_settings_defaults():
    settings = load_settings({})

    assert settings.data_file == "trips.json"
    assert settings.currency == "₹"
    assert settings.log_level == "INFO"
    assert settings.app_title == "SplitEasy"


def test_settings_from_environment():
    settings = load_settings({
        "SPLITEASY_DATA_FILE": "",
        "SPLITEASY_CURRENCY": "$",
        "SPLITEASY_LOG_LEVEL": "debug",
        "UNRELATED": "x",
    })

    assert settings.data_file is None
    assert settings.currency == "$"
    assert settings.log_level == "DEBUG"


def test_settings_reject_unknown_level():
    with pytest.raises(ValidationError):
        load_settings({"SPLITEASY_LOG_LEVEL": "chatty"})
