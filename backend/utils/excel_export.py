"""Spreadsheet renderings of the ledger statement, the cash statement and the daily cash report."""

from io import BytesIO
from datetime import datetime

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter

from schemas.cash_transactions import CashStatement
from schemas.daily_cash_balance import DailyReport
from schemas.ledger import LedgerStatement

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="305496", end_color="305496", fill_type="solid")
TOTAL_FONT = Font(bold=True)
MONEY_FORMAT = "#,##0.00"


def _write_header(ws, columns):
    ws.append(columns)
    for cell in ws[ws.max_row]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal="center")


def _format_money_columns(ws, first_row, column_indexes):
    for row in ws.iter_rows(min_row=first_row, max_row=ws.max_row):
        for index in column_indexes:
            row[index - 1].number_format = MONEY_FORMAT


def _autosize(ws):
    for column_cells in ws.columns:
        width = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column_cells)
        ws.column_dimensions[get_column_letter(column_cells[0].column)].width = min(max(width + 2, 10), 60)


def _to_stream(wb) -> BytesIO:
    stream = BytesIO()
    wb.save(stream)
    stream.seek(0)
    return stream


def ledger_statement_workbook(statement: LedgerStatement) -> BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = "Ledger"

    ws.append([f"Ledger: {statement.account_number} - {statement.account_name}"])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append([f"Period: {statement.period_start.isoformat()} to {statement.period_end.isoformat()}"])
    ws.append([])

    _write_header(ws, ["Date", "Entry No", "Line", "Description", "Debit", "Credit", "Balance"])
    first_data_row = ws.max_row + 1
    ws.append(["", "", "", "Opening balance", None, None, float(statement.opening_balance)])
    for row in statement.rows:
        ws.append([
            row.date.isoformat(),
            row.entry_number,
            row.line_number,
            row.description or "",
            float(row.debit),
            float(row.credit),
            float(row.balance),
        ])
    ws.append(["", "", "", "Total", float(statement.total_debit), float(statement.total_credit),
               float(statement.closing_balance)])
    for cell in ws[ws.max_row]:
        cell.font = TOTAL_FONT

    _format_money_columns(ws, first_data_row, [5, 6, 7])
    _autosize(ws)
    return _to_stream(wb)


def cash_statement_workbook(statement: CashStatement) -> BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = "Cash Statement"

    ws.append(["Cash Statement"])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append([f"Period: {statement.start_date.isoformat()} to {statement.end_date.isoformat()}"])
    ws.append([])

    _write_header(ws, ["SL", "Date", "Time", "Transaction No", "Particulars", "Category", "Method",
                       "Debit", "Credit", "Balance", "Status", "Created By", "Verified By"])
    first_data_row = ws.max_row + 1
    ws.append(["", "", "", "", "Opening balance", "", "", None, None, float(statement.opening_balance)])
    for row in statement.rows:
        ws.append([
            row.sl,
            row.date.isoformat(),
            row.time.strftime("%H:%M:%S") if row.time else "",
            row.transaction_code,
            row.particulars,
            row.category,
            row.payment_method,
            float(row.debit),
            float(row.credit),
            float(row.balance),
            row.status,
            row.created_by or "",
            row.verified_by or "",
        ])
    ws.append(["", "", "", "", "Total", "", "", float(statement.total_debit), float(statement.total_credit),
               float(statement.closing_balance)])
    for cell in ws[ws.max_row]:
        cell.font = TOTAL_FONT

    _format_money_columns(ws, first_data_row, [8, 9, 10])
    _autosize(ws)
    return _to_stream(wb)


def daily_report_workbook(report: DailyReport, generated_by: str, generated_at: datetime) -> BytesIO:
    wb = Workbook()

    ws = wb.active
    ws.title = "Summary"
    ws.append([f"Daily Cash Report: {report.date.isoformat()}"])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append([])
    _write_header(ws, ["Item", "Amount"])
    first_data_row = ws.max_row + 1
    ws.append(["Opening Balance", float(report.opening_balance)])
    ws.append(["Cash Received", float(report.cash_received)])
    ws.append(["Cash Paid", float(report.cash_paid)])
    ws.append(["Closing Balance", float(report.closing_balance)])
    ws[ws.max_row][0].font = TOTAL_FONT
    _format_money_columns(ws, first_data_row, [2])
    ws.append([])
    ws.append(["Generated At", generated_at.strftime("%Y-%m-%d %H:%M:%S")])
    ws.append(["Generated By", generated_by])
    _autosize(ws)

    ws = wb.create_sheet("Transactions")
    _write_header(ws, ["Transaction No", "Time", "Type", "Amount", "Description", "Category",
                       "Created By", "Approved By"])
    first_data_row = ws.max_row + 1
    for tx in report.transactions:
        ws.append([
            tx.transaction_code,
            tx.time.strftime("%H:%M:%S") if tx.time else "",
            tx.transaction_type,
            float(tx.amount),
            tx.description,
            tx.category,
            tx.created_by or "",
            tx.verified_by or "",
        ])
    _format_money_columns(ws, first_data_row, [4])
    _autosize(ws)

    ws = wb.create_sheet("Expense Breakdown")
    _write_header(ws, ["Category", "Payments", "Total"])
    first_data_row = ws.max_row + 1
    for row in report.expense_breakdown:
        ws.append([row.category or "Uncategorized", row.count, float(row.total)])
    ws.append(["Total", sum(row.count for row in report.expense_breakdown),
               float(sum(row.total for row in report.expense_breakdown))])
    for cell in ws[ws.max_row]:
        cell.font = TOTAL_FONT
    _format_money_columns(ws, first_data_row, [3])
    _autosize(ws)

    return _to_stream(wb)
