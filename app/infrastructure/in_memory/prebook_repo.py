from dataclasses import replace

from app.application.interfaces.prebook_repo import PrebookRecord, PrebookRepo


class InMemoryPrebookRepo(PrebookRepo):
    def __init__(self) -> None:
        self.records: list[PrebookRecord] = []
        self._next_id = 1

    async def save(self, record: PrebookRecord) -> PrebookRecord:
        stored = replace(record, id=self._next_id)
        self._next_id += 1
        self.records.append(stored)
        return stored

    async def get_latest_by_token(self, token: str) -> PrebookRecord | None:
        matches = [record for record in self.records if record.token == token]
        return matches[-1] if matches else None
