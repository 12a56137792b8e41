from sqlalchemy.orm import Session
from models.audit_log import AuditLog
from schemas.audit_log import AuditLogCreate


def create_audit_log(db: Session, log_entry: AuditLogCreate) -> AuditLog:
    """
    Add an audit record to the caller's session.

    Nothing is committed here: the record belongs to the same unit of work as the
    change it describes and disappears with it on rollback.
    """
    db_log_entry = AuditLog(**log_entry.model_dump())
    db.add(db_log_entry)
    db.flush()
    return db_log_entry
