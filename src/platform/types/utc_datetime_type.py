"""
https://docs.sqlalchemy.org/en/20/core/custom_types.html#augmenting-existing-types
Timezone-aware UTC DateTime column type

## Problem Solved

`DateTime(timezone=True)` round-trips tzinfo on PostgreSQL, but SQLite has no
timezone storage and hands back naive datetimes. Mixing those with
`datetime.now(timezone.utc)` raises TypeError on comparison.

## Usage

```python
class BookingModel(Base):
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
```

- Writes: aware values are converted to UTC, naive values are rejected
- Reads: naive values from the driver are tagged as UTC
"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError('UTCDateTime requires a timezone-aware datetime')
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect: Any) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
