"""
Resource Directory
Read-only lookups against the listings directory (the ``properties`` table).
"""
import uuid
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from propertech_scheduling.models.property import Property, property_occupants


@dataclass(frozen=True)
class ResourceInfo:
    exists: bool
    is_open_for_viewing: bool = False
    owner_id: Optional[uuid.UUID] = None
    name: Optional[str] = None


MISSING = ResourceInfo(exists=False)


class ResourceDirectory:
    def __init__(self, db: Session):
        self.db = db

    def get(self, property_id: uuid.UUID) -> ResourceInfo:
        prop = self.db.get(Property, property_id)
        if prop is None:
            return MISSING
        return ResourceInfo(
            exists=True,
            is_open_for_viewing=prop.is_available_for_viewing,
            owner_id=prop.owner_id,
            name=prop.name,
        )

    def occupied_by(self, tenant_id: uuid.UUID) -> List[uuid.UUID]:
        """Property ids the tenant currently occupies."""
        return list(
            self.db.execute(
                select(property_occupants.c.property_id).where(
                    property_occupants.c.tenant_id == tenant_id
                )
            ).scalars()
        )
