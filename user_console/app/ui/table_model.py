from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from user_console.app.application.state.record_store import RecordStore
from user_console.app.domain.models.user import UserRecord, as_utc
from user_console.app.ui.filters import clean_filters, matches_text
from user_console.app.ui.pagination import DEFAULT_PAGE_SIZE, clamp_page_index, page_count

EMPTY_VALUE = "—"


@dataclass(frozen=True)
class ColumnDef:
    key: str
    label: str
    sortable: bool = True
    hideable: bool = True


USER_COLUMNS = (
    ColumnDef("id", "ID"),
    ColumnDef("name", "Name"),
    ColumnDef("email", "Email"),
    ColumnDef("created_at", "Created"),
    ColumnDef("updated_at", "Updated"),
)
DEFAULT_VISIBLE_COLUMNS = ("id", "name", "email")


@dataclass(frozen=True)
class ViewParams:
    sort_by: str | None = None
    sort_dir: str = "asc"
    filters: tuple[tuple[str, str], ...] = ()
    visible_columns: tuple[str, ...] = DEFAULT_VISIBLE_COLUMNS
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def filter_map(self) -> dict[str, str]:
        return dict(self.filters)


@dataclass(frozen=True)
class Projection:
    rows: list[UserRecord]
    filtered: list[UserRecord]
    total: int
    page_index: int
    page_count: int
    page_size: int

    @property
    def row_ids(self) -> list[int]:
        return [record.id for record in self.rows]


def normalize_value(value: Any) -> str:
    if value is None:
        return EMPTY_VALUE
    if isinstance(value, str):
        clean = value.strip()
        return clean or EMPTY_VALUE
    if isinstance(value, datetime):
        return as_utc(value).astimezone().strftime("%Y-%m-%d %H:%M:%S")
    return str(value)


def cell_text(record: UserRecord, key: str) -> str:
    value = getattr(record, key, None)
    text = normalize_value(value)
    return "" if text == EMPTY_VALUE else text


def _sort_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        clean = value.strip()
        return clean.casefold() if clean else None
    if isinstance(value, datetime):
        # naive timestamps count as UTC
        return as_utc(value).timestamp()
    return value


def filter_records(records: Iterable[UserRecord], filters: Mapping[str, str | None]) -> list[UserRecord]:
    active = clean_filters(filters)
    return [
        record
        for record in records
        if all(matches_text(cell_text(record, key), term) for key, term in active.items())
    ]


def sort_records(records: Sequence[UserRecord], sort_by: str | None, sort_dir: str = "asc") -> list[UserRecord]:
    """Stable sort on one column; rows without a value go last in both directions."""
    if not sort_by:
        return list(records)
    present: list[UserRecord] = []
    empty: list[UserRecord] = []
    for record in records:
        (empty if _sort_value(getattr(record, sort_by, None)) is None else present).append(record)
    # sorted() keeps ties in input order even with reverse=True
    ordered = sorted(present, key=lambda record: _sort_value(getattr(record, sort_by)), reverse=sort_dir == "desc")
    return ordered + empty


def project(records: Iterable[UserRecord], params: ViewParams) -> Projection:
    """Filter, sort and paginate ``records`` for ``params`` without touching them."""
    filtered = sort_records(filter_records(records, params.filter_map), params.sort_by, params.sort_dir)
    page_size = max(1, params.page_size)
    pages = page_count(len(filtered), page_size)
    page_index = clamp_page_index(params.page_index, pages)
    start = page_index * page_size
    return Projection(
        rows=filtered[start : start + page_size],
        filtered=filtered,
        total=len(filtered),
        page_index=page_index,
        page_count=pages,
        page_size=page_size,
    )


@dataclass
class TableModel:
    """Users table: view parameters, selection and a cached projection of the store."""

    store: RecordStore
    params: ViewParams = field(default_factory=ViewParams)
    columns: tuple[ColumnDef, ...] = USER_COLUMNS
    _selection: set[int] = field(default_factory=set, init=False, repr=False)
    _cache: tuple[int, ViewParams, Projection] | None = field(default=None, init=False, repr=False)

    def projection(self) -> Projection:
        self._prune_selection()
        version = self.store.version
        if self._cache is not None:
            cached_version, cached_params, cached = self._cache
            if cached_version == version and cached_params == self.params:
                return cached
        result = project(self.store.snapshot(), self.params)
        self._cache = (version, self.params, result)
        return result

    @property
    def rows(self) -> list[UserRecord]:
        return self.projection().rows

    # sorting / filtering

    def set_sort(self, key: str | None, direction: str = "asc") -> bool:
        if key is not None and key not in self._sortable_keys():
            return False
        sort_dir = "desc" if direction == "desc" else "asc"
        self.params = replace(self.params, sort_by=key, sort_dir=sort_dir, page_index=0)
        return True

    def toggle_sort(self, key: str) -> bool:
        descending = self.params.sort_by == key and self.params.sort_dir == "asc"
        return self.set_sort(key, "desc" if descending else "asc")

    def set_filter(self, key: str, term: str | None) -> None:
        filters = self.params.filter_map
        if term:
            filters[key] = term
        else:
            filters.pop(key, None)
        self.params = replace(self.params, filters=tuple(filters.items()), page_index=0)

    def clear_filters(self) -> None:
        self.params = replace(self.params, filters=(), page_index=0)

    # pagination

    def next_page(self) -> None:
        current = self.projection()
        self.params = replace(self.params, page_index=clamp_page_index(current.page_index + 1, current.page_count))

    def prev_page(self) -> None:
        current = self.projection()
        self.params = replace(self.params, page_index=max(0, current.page_index - 1))

    def goto_page(self, page_index: int) -> None:
        current = self.projection()
        self.params = replace(self.params, page_index=clamp_page_index(page_index, current.page_count))

    # column visibility

    def visible_columns(self) -> list[ColumnDef]:
        return [column for column in self.columns if column.key in self.params.visible_columns]

    def toggle_column(self, key: str, visible: bool | None = None) -> bool:
        column = next((column for column in self.columns if column.key == key), None)
        if column is None or not column.hideable:
            return False
        current = self.params.visible_columns
        shown = key in current
        target = (not shown) if visible is None else visible
        if target == shown:
            return True
        if target:
            keys = [column.key for column in self.columns if column.key == key or column.key in current]
        elif len(current) <= 1:
            return False
        else:
            keys = [other for other in current if other != key]
        self.params = replace(self.params, visible_columns=tuple(keys))
        return True

    # selection

    def toggle_row(self, user_id: int, selected: bool | None = None) -> bool:
        if user_id not in self.store:
            return False
        target = (user_id not in self._selection) if selected is None else selected
        if target:
            self._selection.add(user_id)
        else:
            self._selection.discard(user_id)
        return True

    def toggle_all_page_rows(self, selected: bool | None = None) -> None:
        page_ids = self.projection().row_ids
        target = (not self.is_all_page_rows_selected()) if selected is None else selected
        if target:
            self._selection.update(page_ids)
        else:
            self._selection.difference_update(page_ids)

    def is_all_page_rows_selected(self) -> bool:
        page_ids = self.projection().row_ids
        return bool(page_ids) and all(user_id in self._selection for user_id in page_ids)

    def is_some_page_rows_selected(self) -> bool:
        page_ids = self.projection().row_ids
        return any(user_id in self._selection for user_id in page_ids) and not self.is_all_page_rows_selected()

    def is_selected(self, user_id: int) -> bool:
        self._prune_selection()
        return user_id in self._selection

    def selected_ids(self) -> set[int]:
        self._prune_selection()
        return set(self._selection)

    def selected_records(self) -> list[UserRecord]:
        return [record for record in self.projection().filtered if record.id in self._selection]

    def clear_selection(self) -> None:
        self._selection.clear()

    def _prune_selection(self) -> None:
        if self._selection:
            self._selection &= self.store.ids()

    def _sortable_keys(self) -> set[str]:
        return {column.key for column in self.columns if column.sortable}
