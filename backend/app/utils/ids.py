from typing import Optional
from uuid import UUID


def parse_uuid(value: str) -> Optional[UUID]:
    """Parse a UUID string, returning None when it is not one."""
    try:
        return UUID(value)
    except (ValueError, TypeError, AttributeError):
        return None
