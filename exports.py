"""
CSV, Excel and PDF renderings of a trip.

Every exporter returns the file content as bytes; the caller decides whether
to stream it, write it to disk or attach it somewhere.
"""
import csv
import io
from datetime import datetime
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import (PageBreak, Paragraph, SimpleDocTemplate,
                                Spacer, Table, TableStyle)

from models import Trip
from settlement import summarize_trip
from utils import format_currency, safe_filename

DATE_FORMAT = '%Y-%m-%d'

HEADER_COLOR = '#22D3EE'
GRID_COLOR = '#d1d5db'


def export_filename(trip: Trip, extension: str) -> str:
    return f"{safe_filename(trip.name)}_expenses.{extension}"


def _expense_rows(trip: Trip, currency: str, with_symbol: bool = True):
    for expense in trip.expenses:
        split_among = ", ".join(trip.person_name(pid) for pid in expense.split_among)
        amount = (format_currency(expense.amount, currency) if with_symbol
                  else round(expense.amount, 2))
        yield [
            expense.date.strftime(DATE_FORMAT),
            expense.title,
            amount,
            trip.person_name(expense.paid_by),
            split_among,
            expense.split_type.capitalize(),
        ]


def export_csv(trip: Trip, currency: str = "₹") -> bytes:
    summary = summarize_trip(trip)

    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(["SplitEasy - Trip export"])
    writer.writerow([f"Trip: {trip.name}"])
    writer.writerow([f"Created: {trip.created_at.strftime('%Y-%m-%d %H:%M')}"])
    writer.writerow([f"Total amount: {format_currency(summary.total_amount, currency)}"])
    writer.writerow([])

    writer.writerow(["PARTICIPANTS"])
    writer.writerow(["Name"])
    for person in trip.people:
        writer.writerow([person.name])
    writer.writerow([])

    writer.writerow(["EXPENSES"])
    writer.writerow(["Date", "Title", "Amount", "Paid By", "Split Among", "Split Type"])
    for row in _expense_rows(trip, currency):
        writer.writerow(row)
    writer.writerow([])

    writer.writerow(["BALANCES"])
    writer.writerow(["Person", "Balance", "Status"])
    for balance in summary.balances:
        writer.writerow([
            balance.person_name,
            format_currency(balance.balance, currency), balance.status
        ])
    writer.writerow([])

    writer.writerow(["SETTLEMENTS"])
    writer.writerow(["From", "To", "Amount"])
    for settlement in summary.settlements:
        writer.writerow([
            trip.person_name(settlement.from_id),
            trip.person_name(settlement.to_id),
            format_currency(settlement.amount, currency)
        ])

    return output.getvalue().encode('utf-8-sig')


def _style_header(ws, row=1):
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="22D3EE")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        if cell.value is None:
            continue
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def export_xlsx(trip: Trip, currency: str = "₹") -> bytes:
    """
    Workbook with the sheets:
    - Trip Summary
    - Expenses
    - Custom Splits (only when some expense uses them)
    - Balances, followed by the settlement suggestions
    """
    summary = summarize_trip(trip)

    wb = Workbook()
    wb.remove(wb.active)

    ws = wb.create_sheet("Trip Summary")
    ws.append(["Trip Name", trip.name])
    ws.append(["Created Date", trip.created_at.strftime(DATE_FORMAT)])
    ws.append(["Export Date", datetime.now().strftime(DATE_FORMAT)])
    ws.append(["Number of People", len(trip.people)])
    ws.append(["Total Expenses", len(trip.expenses)])
    ws.append(["Total Amount", format_currency(summary.total_amount, currency)])
    ws.append([])
    ws.append(["Participants:"])
    for person in trip.people:
        ws.append(["", person.name])
    for r in range(1, 7):
        ws.cell(r, 1).font = Font(bold=True)
    _autosize_columns(ws)

    ws = wb.create_sheet("Expenses")
    ws.append(["Date", "Title", f"Amount ({currency})", "Paid By", "Split Among", "Split Type"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for row in _expense_rows(trip, currency, with_symbol=False):
        ws.append(row)
    for r in range(2, ws.max_row + 1):
        ws.cell(r, 3).number_format = "0.00"
    _autosize_columns(ws)

    custom_rows = [
        [expense.title, trip.person_name(pid), round(amount, 2)]
        for expense in trip.expenses if expense.custom_splits
        for pid, amount in expense.custom_splits.items()
    ]
    if custom_rows:
        ws = wb.create_sheet("Custom Splits")
        ws.append(["Expense", "Person", f"Amount ({currency})"])
        _style_header(ws, 1)
        for row in custom_rows:
            ws.append(row)
        for r in range(2, ws.max_row + 1):
            ws.cell(r, 3).number_format = "0.00"
        _autosize_columns(ws)

    ws = wb.create_sheet("Balances")
    ws.append(["Person", f"Balance ({currency})", "Status"])
    _style_header(ws, 1)
    for balance in summary.balances:
        ws.append([balance.person_name, round(balance.balance, 2), balance.status])
        ws.cell(ws.max_row, 2).number_format = "0.00"
    ws.append([])
    ws.append(["Settlement Suggestions:"])
    ws.cell(ws.max_row, 1).font = Font(bold=True)
    ws.append(["From", "To", f"Amount ({currency})"])
    _style_header(ws, ws.max_row)
    for settlement in summary.settlements:
        ws.append([
            trip.person_name(settlement.from_id),
            trip.person_name(settlement.to_id),
            settlement.amount
        ])
        ws.cell(ws.max_row, 3).number_format = "0.00"
    _autosize_columns(ws)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _table_style(numeric_columns=()):
    commands = [
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(HEADER_COLOR)),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.HexColor('#1f2937')),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, 0), 11),
        ('FONTSIZE', (0, 1), (-1, -1), 9),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('TOPPADDING', (0, 0), (-1, 0), 8),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor(GRID_COLOR)),
    ]
    for col in numeric_columns:
        commands.append(('ALIGN', (col, 0), (col, -1), 'RIGHT'))
    return TableStyle(commands)


def _footer(canvas, doc):
    canvas.saveState()
    canvas.setFont('Helvetica', 9)
    canvas.setFillColor(colors.HexColor('#969696'))
    canvas.drawString(2 * cm, 1 * cm, f"Generated by SplitEasy - Page {doc.page}")
    canvas.restoreState()


def export_pdf(trip: Trip, currency: str = "₹") -> bytes:
    summary = summarize_trip(trip)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, title=trip.name)
    elements = []

    # reportlab's base fonts have no rupee glyph
    pdf_currency = "Rs." if currency == "₹" else currency

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'TripTitle',
        parent=styles['Heading1'],
        fontSize=20,
        textColor=colors.HexColor('#223332'),
        spaceAfter=12,
    )
    heading_style = ParagraphStyle(
        'TripHeading',
        parent=styles['Heading2'],
        fontSize=14,
        spaceAfter=10,
        spaceBefore=14,
    )
    normal_style = styles['Normal']

    elements.append(Paragraph(escape(trip.name), title_style))
    elements.append(Paragraph(
        f"Export Date: {datetime.now().strftime(DATE_FORMAT)}", normal_style))
    elements.append(Paragraph(
        f"Created: {trip.created_at.strftime(DATE_FORMAT)}", normal_style))
    elements.append(Spacer(1, 0.5 * cm))

    elements.append(Paragraph("Trip Summary", heading_style))
    summary_data = [
        ["Category", "Value"],
        ["Participants", str(len(trip.people))],
        ["Total Expenses", str(len(trip.expenses))],
        ["Total Amount", format_currency(summary.total_amount, pdf_currency)],
    ]
    summary_table = Table(summary_data, colWidths=[7 * cm, 7 * cm])
    summary_table.setStyle(_table_style())
    elements.append(summary_table)

    elements.append(Paragraph("Participants", heading_style))
    participant_table = Table([["Name"]] + [[p.name] for p in trip.people],
                              colWidths=[14 * cm])
    participant_table.setStyle(_table_style())
    elements.append(participant_table)

    elements.append(PageBreak())
    elements.append(Paragraph("Expenses", heading_style))
    expense_data = [["Date", "Title", "Amount", "Paid By", "Split Among"]]
    for row in _expense_rows(trip, pdf_currency):
        split_among = row[4] if len(row[4]) <= 20 else row[4][:20] + "..."
        expense_data.append(row[:4] + [split_among])
    if len(expense_data) == 1:
        expense_data.append(["No expenses yet", "", "", "", ""])

    expense_table = Table(
        expense_data, colWidths=[2.5 * cm, 4 * cm, 2.5 * cm, 3 * cm, 5 * cm])
    expense_table.setStyle(_table_style(numeric_columns=(2,)))
    elements.append(expense_table)

    elements.append(PageBreak())
    elements.append(Paragraph("Balances & Settlements", heading_style))
    balance_data = [["Person", "Balance", "Status"]]
    for balance in summary.balances:
        balance_data.append([
            balance.person_name,
            format_currency(balance.balance, pdf_currency), balance.status
        ])
    balance_table = Table(balance_data, colWidths=[6 * cm, 4 * cm, 4 * cm])
    balance_table.setStyle(_table_style(numeric_columns=(1,)))
    elements.append(balance_table)

    elements.append(Paragraph("Settlement Suggestions", heading_style))
    settlement_data = [["From", "To", "Amount"]]
    for settlement in summary.settlements:
        settlement_data.append([
            trip.person_name(settlement.from_id),
            trip.person_name(settlement.to_id),
            format_currency(settlement.amount, pdf_currency)
        ])
    if len(settlement_data) == 1:
        settlement_data.append(["Nothing to settle", "", ""])

    settlement_table = Table(settlement_data, colWidths=[5 * cm, 5 * cm, 4 * cm])
    settlement_table.setStyle(_table_style(numeric_columns=(2,)))
    elements.append(settlement_table)

    doc.build(elements, onFirstPage=_footer, onLaterPages=_footer)
    return buffer.getvalue()
