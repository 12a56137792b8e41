import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from crud.accounts import get_active_accounts, get_all_accounts
from crud.balances import movement_by_account
from models.account import (
    ASSET, LIABILITY, EQUITY, REVENUE_TYPES, EXPENSE_TYPES, signed_movement,
)
from schemas.financial_reports import (
    TrialBalance, TrialBalanceRow,
    ProfitAndLoss, ProfitAndLossRow,
    BalanceSheet, BalanceSheetRow,
)
from utils.money import money, amounts_equal, ZERO
from utils.periods import resolve_period

logger = logging.getLogger(__name__)

BALANCE_SHEET_TYPES = (ASSET, LIABILITY, EQUITY)


def get_trial_balance(db: Session, start_date: Optional[date] = None, end_date: Optional[date] = None) -> TrialBalance:
    """
    Debit and credit movement of every active account within an optional window.

    net_movement is always debit - credit, so normal-credit accounts show a
    negative figure; the cached balance is reported alongside.
    """
    movements = movement_by_account(db, start_date=start_date, end_date=end_date)

    rows = []
    total_debit = ZERO
    total_credit = ZERO
    for account in get_active_accounts(db):
        debit, credit = movements.get(account.id, (ZERO, ZERO))
        total_debit += debit
        total_credit += credit
        rows.append(TrialBalanceRow(
            account_id=account.id,
            account_number=account.account_number,
            account_name=account.account_name,
            account_type=account.account_type,
            total_debit=debit,
            total_credit=credit,
            net_movement=debit - credit,
            balance=money(account.balance),
        ))

    return TrialBalance(
        period_start=start_date,
        period_end=end_date,
        rows=rows,
        total_debit=total_debit,
        total_credit=total_credit,
        is_balanced=amounts_equal(total_debit, total_credit),
    )


def get_profit_and_loss(
    db: Session,
    period: str,
    year: Optional[int] = None,
    month: Optional[int] = None,
    quarter: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> ProfitAndLoss:
    period_start, period_end = resolve_period(period, year, month, quarter, start_date, end_date)
    movements = movement_by_account(db, start_date=period_start, end_date=period_end)

    revenue = []
    expenses = []
    for account in get_all_accounts(db):
        if account.account_type in REVENUE_TYPES:
            section, target = "revenue", revenue
        elif account.account_type in EXPENSE_TYPES:
            section, target = "expense", expenses
        else:
            continue

        debit, credit = movements.get(account.id, (ZERO, ZERO))
        amount = signed_movement(account.account_type, debit, credit)
        # Inactive accounts only show up when they carry movement in the period
        if not account.is_active and amount == 0:
            continue
        target.append(ProfitAndLossRow(
            account_id=account.id,
            account_number=account.account_number,
            account_name=account.account_name,
            account_type=account.account_type,
            section=section,
            amount=amount,
        ))

    total_revenue = sum((row.amount for row in revenue), ZERO)
    total_expenses = sum((row.amount for row in expenses), ZERO)

    return ProfitAndLoss(
        period=period.strip().lower(),
        period_start=period_start,
        period_end=period_end,
        revenue=revenue,
        expenses=expenses,
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        net_profit=total_revenue - total_expenses,
    )


def get_balance_sheet(db: Session, as_of: date) -> BalanceSheet:
    """
    Cumulative position of the balance-sheet accounts up to and including as_of.

    Revenue and expense movement that has not been closed into equity is shown
    as a "Current Period Earnings" equity line, matching the P&L net profit.
    Accounts of type "other" belong to neither statement; each is listed in the
    equity section on its own line (credit - debit), so the sheet balances
    whenever the journal does.
    """
    movements = movement_by_account(db, end_date=as_of)

    sections = {ASSET: [], LIABILITY: [], EQUITY: []}
    earnings = ZERO
    unclassified = []
    for account in get_all_accounts(db):
        debit, credit = movements.get(account.id, (ZERO, ZERO))
        if account.account_type in REVENUE_TYPES or account.account_type in EXPENSE_TYPES:
            earnings += credit - debit
            continue

        if account.account_type in BALANCE_SHEET_TYPES:
            section, target = account.account_type, sections[account.account_type]
            amount = signed_movement(account.account_type, debit, credit)
        else:
            section, target = EQUITY, unclassified
            amount = credit - debit
            if amount == 0:
                continue

        if not account.is_active and amount == 0:
            continue
        target.append(BalanceSheetRow(
            account_id=account.id,
            account_number=account.account_number,
            account_name=account.account_name,
            section=section,
            amount=amount,
        ))

    sections[EQUITY].extend(unclassified)

    if earnings != 0:
        sections[EQUITY].append(BalanceSheetRow(
            account_id=None,
            account_number="",
            account_name="Current Period Earnings",
            section=EQUITY,
            amount=earnings,
        ))

    total_assets = sum((row.amount for row in sections[ASSET]), ZERO)
    total_liabilities = sum((row.amount for row in sections[LIABILITY]), ZERO)
    total_equity = sum((row.amount for row in sections[EQUITY]), ZERO)
    balanced = amounts_equal(total_assets, total_liabilities + total_equity)
    if not balanced:
        logger.warning(
            f"Balance sheet as of {as_of} is out of balance: assets {total_assets}, "
            f"liabilities + equity {total_liabilities + total_equity}"
        )

    return BalanceSheet(
        as_of=as_of,
        assets=sections[ASSET],
        liabilities=sections[LIABILITY],
        equity=sections[EQUITY],
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        total_equity=total_equity,
        balanced=balanced,
    )
