"""Domain models for pf_category — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Category:
    id: str
    user_id: str | None              # None = shared default owned by no user
    name: str
    type: str                        # CategoryType value
    description: str | None = None
    created_at: datetime | None = None

    @property
    def is_shared(self) -> bool:
        return self.user_id is None
