import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from crud import accounts as crud_accounts
from database import get_db
from schemas.accounts import Account, AccountCreate, AccountUpdate, AccountList, BalanceDrift
from utils.auth_utils import require_permission, get_user_identifier

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/accounts",
    tags=["Accounts"],
)


@router.post("/", response_model=Account, status_code=status.HTTP_201_CREATED)
def create_account(
    account: AccountCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("create", "accounts")),
):
    return crud_accounts.create_account(db, account, get_user_identifier(user))


@router.get("/", response_model=AccountList)
def get_accounts(
    account_type: Optional[str] = None,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "accounts")),
):
    """Active accounts ordered by account number, with cached balance totals per type."""
    return AccountList(
        accounts=crud_accounts.get_active_accounts(db, account_type=account_type),
        totals=crud_accounts.account_totals_by_type(db),
    )


@router.post("/initialize-defaults", response_model=List[Account])
def initialize_default_accounts(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("create", "accounts")),
):
    return crud_accounts.initialize_default_accounts(db, get_user_identifier(user))


@router.get("/balance-drift", response_model=List[BalanceDrift])
def get_balance_drift(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "accounts")),
):
    return crud_accounts.find_balance_drift(db)


@router.post("/recompute-balances")
def recompute_balances(
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("update", "accounts")),
):
    changed = crud_accounts.recompute_account_balances(db)
    logger.info(f"User {get_user_identifier(user)} recomputed cached balances ({changed} changed)")
    return {"accounts_changed": changed}


@router.get("/{account_id}", response_model=Account)
def get_account(
    account_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "accounts")),
):
    return crud_accounts.get_account(db, account_id)


@router.patch("/{account_id}", response_model=Account)
def update_account(
    account_id: int,
    account_update: AccountUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("update", "accounts")),
):
    return crud_accounts.update_account(db, account_id, account_update, get_user_identifier(user))
