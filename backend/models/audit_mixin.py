from sqlalchemy import Column, DateTime, String

from utils.periods import now_local


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    Ledger rows are never soft-deleted: accounts are deactivated and journal
    entries are immutable once posted, so there is no deleted_at column here.
    """
    # DateTime(timezone=True) ensures the timezone info is persisted in the database.
    created_at = Column(DateTime(timezone=True), default=now_local)
    updated_at = Column(DateTime(timezone=True), onupdate=now_local)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
