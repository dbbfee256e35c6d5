from __future__ import annotations

from user_console.app.domain.models.user import UserRecord
from user_console.app.ui.table_model import ColumnDef, normalize_value


def print_table(
    title: str,
    rows: list[UserRecord],
    columns: list[ColumnDef],
    selected_ids: set[int] | None = None,
) -> None:
    print(f"\n{title}")
    if not rows:
        print("(no results)")
        return

    selected = selected_ids or set()
    widths = []
    for column in columns:
        max_cell = max(len(normalize_value(getattr(row, column.key, None))) for row in rows)
        widths.append(max(len(column.label), max_cell))

    header_line = " | ".join(column.label.ljust(widths[idx]) for idx, column in enumerate(columns))
    separator = "-+-".join("-" * width for width in widths)
    print(f"    {header_line}")
    print(f"    {separator}")

    for row in rows:
        marker = "[x]" if row.id in selected else "[ ]"
        line = " | ".join(
            normalize_value(getattr(row, column.key, None)).ljust(widths[idx]) for idx, column in enumerate(columns)
        )
        print(f"{marker} {line}")
