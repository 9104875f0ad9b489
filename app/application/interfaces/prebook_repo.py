from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class PrebookRecord:
    offer_hash: str
    token: str
    created_at: datetime
    expires_at: datetime
    request_id: str | None = None
    summary: dict[str, Any] | None = None
    raw_supplier_response: Any = None
    id: int | None = field(default=None)


class PrebookRepo:
    async def save(self, record: PrebookRecord) -> PrebookRecord:
        raise NotImplementedError

    async def get_latest_by_token(self, token: str) -> PrebookRecord | None:
        raise NotImplementedError
