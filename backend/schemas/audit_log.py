from pydantic import BaseModel
from typing import Optional, Dict, Any

class AuditLogCreate(BaseModel):
    actor_id: str
    action: str
    table_name: Optional[str] = None
    record_id: Optional[int] = None
    details: Optional[str] = None
    new_values: Optional[Dict[str, Any]] = None
