from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from database import get_db
from schemas.journal_entry import JournalEntry, JournalEntryCreate
from crud import journal_entry as journal_entry_crud
from utils.auth_utils import require_permission, get_user_identifier

router = APIRouter(
    prefix="/journal-entries",
    tags=["Journal Entries"],
)


@router.post("/", response_model=JournalEntry, status_code=status.HTTP_201_CREATED)
def create_journal_entry(
    entry: JournalEntryCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("create", "journal_entries"))
):
    """
    Post a new journal entry.
    An entry whose debits and credits differ is rejected before anything is written.
    """
    return journal_entry_crud.post_entry(db=db, entry=entry, user_id=get_user_identifier(user))


@router.get("/", response_model=List[JournalEntry])
def get_journal_entries(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "journal_entries"))
):
    """
    Retrieve a list of journal entries, newest first.
    """
    return journal_entry_crud.get_journal_entries(
        db=db,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit
    )


@router.get("/{entry_id}", response_model=JournalEntry)
def get_journal_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_permission("read", "journal_entries"))
):
    """
    Retrieve a single journal entry by its ID.
    """
    return journal_entry_crud.get_journal_entry(db=db, entry_id=entry_id)
