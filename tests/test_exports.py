import csv
import io

from openpyxl import load_workbook

from conftest import make_trip
from exports import export_csv, export_filename, export_pdf, export_xlsx


def test_filename(mixed_trip):
    trip = mixed_trip.model_copy(update={"name": "Goa 2024: Beach!"})

    assert export_filename(trip, "pdf") == "Goa_2024__Beach__expenses.pdf"


def test_csv(dinner_trip):
    content = export_csv(dinner_trip, "$")

    assert content.startswith(b"\xef\xbb\xbf")
    rows = list(csv.reader(io.StringIO(content.decode("utf-8-sig"))))
    assert ["Bob", "Alice", "$100.00"] in rows
    assert ["Carol", "-$100.00", "Owes"] in rows
    assert ["2024-05-02", "Dinner", "$300.00", "Alice", "Alice, Bob, Carol", "Equal"] in rows


def test_xlsx(mixed_trip):
    wb = load_workbook(io.BytesIO(export_xlsx(mixed_trip)))

    assert wb.sheetnames == ["Trip Summary", "Expenses", "Custom Splits", "Balances"]
    assert wb["Trip Summary"]["B1"].value == mixed_trip.name
    assert wb["Trip Summary"]["B4"].value == 4

    expenses = list(wb["Expenses"].iter_rows(min_row=2, values_only=True))
    assert [row[1] for row in expenses] == ["Hotel", "Taxi", "Tickets"]
    assert expenses[2][5] == "Custom"

    custom = list(wb["Custom Splits"].iter_rows(min_row=2, values_only=True))
    assert custom == [("Tickets", "A", 20), ("Tickets", "D", 55.5)]

    balances = list(wb["Balances"].iter_rows(values_only=True))
    assert ("D", "A", 55) in balances
    assert ("D", "C", 33.83) in balances


def test_xlsx_without_custom_splits(dinner_trip):
    wb = load_workbook(io.BytesIO(export_xlsx(dinner_trip)))

    assert "Custom Splits" not in wb.sheetnames


def test_pdf(mixed_trip):
    content = export_pdf(mixed_trip)

    assert content.startswith(b"%PDF")


def test_pdf_for_empty_trip():
    trip = make_trip(["A", "B"], name="Fish & <Chips>")

    assert export_pdf(trip).startswith(b"%PDF")
