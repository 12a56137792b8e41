import logging
import os

from dotenv import load_dotenv
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from models.cash_transaction import CashTransactionType
from models.money_receipt import MoneyReceipt
from utils.formatting import format_currency, amount_to_words

load_dotenv()

logger = logging.getLogger(__name__)

COMPANY_NAME = os.getenv("COMPANY_NAME", "Accounts Office")
COMPANY_ADDRESS = os.getenv("COMPANY_ADDRESS", "")


class PDF(FPDF):
    def header(self):
        self.set_font('Helvetica', 'B', 16)
        self.cell(0, 10, COMPANY_NAME, new_x=XPos.LMARGIN, new_y=YPos.NEXT, align='C')
        if COMPANY_ADDRESS:
            self.set_font('Helvetica', '', 10)
            self.cell(0, 6, COMPANY_ADDRESS, new_x=XPos.LMARGIN, new_y=YPos.NEXT, align='C')
        self.ln(6)

    def footer(self):
        self.set_y(-15)
        self.set_font('Helvetica', 'I', 8)
        self.cell(0, 10, f'Page {self.page_no()}', align='C')


def _row(pdf: PDF, label: str, value: str):
    pdf.set_font('Helvetica', 'B', 11)
    pdf.cell(50, 9, label, border=1)
    pdf.set_font('Helvetica', '', 11)
    pdf.cell(0, 9, value, border=1, new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def generate_money_receipt(receipt: MoneyReceipt) -> bytes:
    """
    Render a printable money receipt.

    Args:
        receipt: the stored receipt row, with its cash transaction loaded.

    Returns:
        The PDF document as bytes.
    """
    is_receipt = receipt.transaction_type == CashTransactionType.RECEIPT
    tx = receipt.cash_transaction

    pdf = PDF()
    pdf.add_page()

    pdf.set_font('Helvetica', 'B', 14)
    title = 'MONEY RECEIPT' if is_receipt else 'PAYMENT VOUCHER'
    pdf.cell(0, 10, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT, align='C')
    pdf.ln(4)

    pdf.set_font('Helvetica', '', 11)
    pdf.cell(95, 8, f'Receipt No: {receipt.receipt_no}')
    pdf.cell(0, 8, f'Date: {receipt.date.strftime("%d-%m-%Y")}', new_x=XPos.LMARGIN, new_y=YPos.NEXT, align='R')
    pdf.ln(4)

    _row(pdf, 'Received from' if is_receipt else 'Paid to', receipt.counterpart_name or '-')
    _row(pdf, 'Amount', format_currency(receipt.amount))
    _row(pdf, 'In words', amount_to_words(receipt.amount))
    _row(pdf, 'Description', receipt.description or '-')
    if tx is not None:
        _row(pdf, 'Transaction', tx.transaction_code)
        _row(pdf, 'Payment method', tx.payment_method or '-')
        if tx.reference_number:
            _row(pdf, 'Reference', tx.reference_number)

    pdf.ln(20)
    pdf.set_font('Helvetica', '', 10)
    pdf.cell(95, 8, f'Prepared by: {receipt.created_by or "-"}')
    pdf.cell(0, 8, f'Approved by: {receipt.approved_by or "-"}', align='R')

    logger.debug(f"Rendered money receipt {receipt.receipt_no}")
    return bytes(pdf.output())
