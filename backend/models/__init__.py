from models.account import Account
from models.journal_entry import JournalEntry
from models.journal_entry_line import JournalEntryLine
from models.cash_transaction import CashTransaction, CashTransactionStatus, CashTransactionType
from models.daily_cash_balance import DailyCashBalance
from models.money_receipt import MoneyReceipt
from models.audit_log import AuditLog
from models.expense_category import ExpenseCategory

__all__ = ['Account', 'AuditLog', 'ExpenseCategory', 'CashTransaction', 'CashTransactionStatus', 'CashTransactionType', 'DailyCashBalance', 'JournalEntry', 'JournalEntryLine', 'MoneyReceipt',]
