from decimal import Decimal
import enum

from sqlalchemy.orm import class_mapper


def sqlalchemy_to_dict(obj):
    """Convert a SQLAlchemy object to a JSON-safe dictionary for audit records."""
    if not obj:
        return None
    mapper = class_mapper(obj.__class__)
    result = {}
    for c in mapper.columns:
        value = getattr(obj, c.key)
        # Dates, times and datetimes as ISO strings
        if hasattr(value, 'isoformat'):
            value = value.isoformat()
        # Money as a string so no precision is lost
        elif isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, enum.Enum):
            value = value.value
        result[c.key] = value
    return result

__all__ = ['sqlalchemy_to_dict']
