import logging
import os
from datetime import date
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy.orm import Session

from database import SessionLocal
from crud.daily_cash_balance import propagate_daily_cash_balances
from utils.periods import today_local, days_back

load_dotenv()

logger = logging.getLogger(__name__)

EOD_PROPAGATION_DAYS = int(os.getenv("EOD_PROPAGATION_DAYS", "7"))


def run_eod_tasks(start_date: Optional[date] = None):
    """
    Re-derive the daily cash ledger at the end of the day.

    Every daily row from start_date (default: EOD_PROPAGATION_DAYS ago) onwards
    is recomputed from the approved transactions and re-chained, which heals any
    drift left by folded approvals or late edits.

    Args:
        start_date: The date from which to start the propagation.
    """
    today = today_local()
    start_date = start_date or days_back(today, EOD_PROPAGATION_DAYS)
    if start_date > today:
        logger.warning(f"Propagation start date {start_date} is in the future. Aborting.")
        return 0

    logger.info(f"Starting daily cash propagation from {start_date}.")
    db: Session = SessionLocal()
    try:
        updated = propagate_daily_cash_balances(db, start_date)
        db.commit()
        logger.info(f"Successfully propagated {updated} daily cash row(s) from {start_date}.")
        return updated
    except Exception as e:
        logger.error(f"Error during daily cash propagation task: {e}", exc_info=True)
        db.rollback()
        return 0
    finally:
        db.close()
