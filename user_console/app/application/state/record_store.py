from __future__ import annotations

from collections.abc import Iterable, Iterator

from user_console.app.domain.models.user import UserRecord


class RecordStore:
    """Ordered, id-unique cache of the users the table renders.

    ``replace_all``, ``upsert`` and ``remove_many`` are the only mutation paths.
    Each one bumps ``version`` so derived projections know to recompute.
    """

    def __init__(self, records: Iterable[UserRecord] = ()) -> None:
        self._records: dict[int, UserRecord] = {}
        self.version = 0
        if records:
            self.replace_all(records)

    def replace_all(self, records: Iterable[UserRecord]) -> None:
        fresh: dict[int, UserRecord] = {}
        for record in records:
            fresh[record.id] = record
        self._records = fresh
        self.version += 1

    def upsert(self, record: UserRecord) -> None:
        self._records[record.id] = record
        self.version += 1

    def remove_many(self, ids: Iterable[int]) -> set[int]:
        removed = {user_id for user_id in set(ids) if user_id in self._records}
        for user_id in removed:
            del self._records[user_id]
        self.version += 1
        return removed

    def get(self, user_id: int) -> UserRecord | None:
        return self._records.get(user_id)

    def snapshot(self) -> list[UserRecord]:
        return list(self._records.values())

    def ids(self) -> set[int]:
        return set(self._records)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._records

    def __iter__(self) -> Iterator[UserRecord]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._records)
