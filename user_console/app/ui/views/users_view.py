from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

from user_console.app.application.confirmation_flow import ConfirmationFlow
from user_console.app.application.operation_coordinator import OperationCoordinator
from user_console.app.application.operation_tickets import OperationTicket
from user_console.app.ui.components.error_banner import ErrorBanner
from user_console.app.ui.components.mutation_feedback import print_mutation_error, print_mutation_success
from user_console.app.ui.forms import FormState, create_form, edit_form, to_draft, to_patch
from user_console.app.ui.table_model import TableModel
from user_console.app.ui.table_printer import print_table

T = TypeVar("T")
Run = Callable[[Coroutine[Any, Any, T]], T]

MENU = (
    "Users action [r=refresh, s=sort, f=filter, n/p=next/prev page, g=go to page, v=columns, "
    "x=select rows, a=select page, c=create, e=edit, d=delete, b=bulk delete, Enter=back]: "
)


def parse_ids(raw: str) -> list[int]:
    ids: list[int] = []
    for item in raw.split(","):
        item = item.strip()
        if item.isdigit():
            ids.append(int(item))
    return ids


class UsersView:
    def __init__(
        self,
        coordinator: OperationCoordinator,
        table: TableModel,
        confirmation: ConfirmationFlow,
        run: Run,
    ) -> None:
        self.coordinator = coordinator
        self.table = table
        self.confirmation = confirmation
        self.run = run

    def render(self) -> None:
        self.refresh()
        while True:
            self.render_table()
            option = input(MENU).strip().lower()
            if not option:
                return
            self.handle(option)

    def refresh(self) -> bool:
        print("[loading] loading users...")
        ticket = self._run_ticket(self.coordinator.load())
        if ticket.failed:
            ErrorBanner.show(ticket.error_detail or "Failed to load users.")
        return ticket.succeeded

    def render_table(self) -> None:
        projection = self.table.projection()
        print_table(
            f"-- Users ({projection.total}) --",
            projection.rows,
            self.table.visible_columns(),
            selected_ids=self.table.selected_ids(),
        )
        params = self.table.params
        if params.filters:
            active = ", ".join(f"{key}~{term}" for key, term in params.filters)
            print(f"[filters] {active}")
        if params.sort_by:
            print(f"[sort] {params.sort_by} {params.sort_dir}")
        print(f"[page] {projection.page_index + 1}/{projection.page_count}")
        print(f"[selection] selected={len(self.table.selected_ids())}")

    def handle(self, option: str) -> None:
        handlers = {
            "r": self.refresh,
            "s": self._sort,
            "f": self._filter,
            "n": self.table.next_page,
            "p": self.table.prev_page,
            "g": self._goto_page,
            "v": self._toggle_column,
            "x": self._select_rows,
            "a": self._select_page,
            "c": self.create_user,
            "e": self.edit_user,
            "d": self.delete_user,
            "b": self.bulk_delete,
        }
        handler = handlers.get(option)
        if handler is None:
            print(f"[blocked] Unknown option: {option}")
            return
        handler()

    def create_user(self) -> None:
        form = create_form()
        form.open()
        while form.is_open:
            form.update("name", input("Name: ").strip())
            form.update("email", input("Email: ").strip())
            form.update("password", input("Password (min 8 characters): "))
            form.update("confirm_password", input("Confirm password: "))
            self._submit(form, "user.create", lambda: self.coordinator.create(to_draft(form)))

    def edit_user(self) -> None:
        user_ids = parse_ids(input("User ID: "))
        record = self.table.store.get(user_ids[0]) if user_ids else None
        if record is None:
            print("[blocked] Enter the ID of a loaded user.")
            return
        form = edit_form(record)
        while form.is_open:
            form.update("name", input(f"Name [{record.name}]: ").strip() or record.name)
            form.update("email", input(f"Email [{record.email}]: ").strip() or record.email)
            form.update("current_password", input("Current password (blank keeps the password): "))
            if form.values["current_password"] or input("Change password? [y/N]: ").strip().lower() == "y":
                form.update("new_password", input("New password (min 8 characters): "))
                form.update("confirm_password", input("Confirm new password: "))
            else:
                form.update("new_password", "")
                form.update("confirm_password", "")
            self._submit(form, "user.edit", lambda: self.coordinator.edit(record.id, to_patch(form)))

    def delete_user(self) -> None:
        user_ids = parse_ids(input("User ID: "))
        record = self.table.store.get(user_ids[0]) if user_ids else None
        if record is None:
            print("[blocked] Enter the ID of a loaded user.")
            return
        if not self.confirmation.open_single(record):
            print("[blocked] Another confirmation is already open.")
            return
        self._confirm("user.delete")

    def bulk_delete(self) -> None:
        records = self.table.selected_records()
        if not records:
            print("[blocked] No users selected for bulk delete.")
            return
        if not self.confirmation.open_bulk(records):
            print("[blocked] Another confirmation is already open.")
            return
        for record in records:
            print(f"- {record.id} :: {record.name} <{record.email}>")
        ticket = self._confirm("user.bulk_delete")
        if ticket is not None and ticket.succeeded:
            self.table.clear_selection()

    def _submit(self, form: FormState, operation: str, call: Callable[[], Coroutine[Any, Any, OperationTicket]]) -> None:
        if not form.begin_submit():
            print("[loading] Processing... avoid double submit.")
            return
        print(f"[loading] Processing... ({operation})")
        ticket = self._run_ticket(call())
        form.apply_ticket(ticket)
        if ticket.succeeded:
            print_mutation_success(operation, ticket)
            return
        print_mutation_error(operation, ticket)
        if input("Retry? [y/N]: ").strip().lower() != "y":
            form.close()

    def _confirm(self, operation: str) -> OperationTicket | None:
        target = self.confirmation.target
        if target is not None:
            print(target.prompt())
        if input("Confirm? [y/N]: ").strip().lower() != "y":
            self.confirmation.cancel()
            print("Delete cancelled.")
            return None
        print(f"[loading] Deleting... ({operation})")
        ticket = self.run(self.confirmation.confirm())
        if ticket is None:
            return None
        if self.confirmation.alert:
            ErrorBanner.show(self.confirmation.alert, title="Alert")
            input("Press Enter to continue...")
            self.confirmation.dismiss_alert()
        else:
            print_mutation_success(operation, ticket)
        return ticket

    def _run_ticket(self, call: Coroutine[Any, Any, OperationTicket]) -> OperationTicket:
        ticket = self.run(call)
        self.coordinator.acknowledge(ticket)
        return ticket

    def _sort(self) -> None:
        key = input("Sort by column (id/name/email/created_at/updated_at): ").strip()
        if not self.table.toggle_sort(key):
            print(f"[blocked] Column cannot be sorted: {key}")

    def _filter(self) -> None:
        key = input("Filter column (name/email, Enter=clear all): ").strip()
        if not key:
            self.table.clear_filters()
            return
        self.table.set_filter(key, input(f"Filter {key} (empty=no filter): ").strip())

    def _goto_page(self) -> None:
        raw = input("Page: ").strip()
        if raw.isdigit() and int(raw) > 0:
            self.table.goto_page(int(raw) - 1)

    def _toggle_column(self) -> None:
        key = input("Toggle column: ").strip()
        if not self.table.toggle_column(key):
            print(f"[blocked] Column cannot be toggled: {key}")

    def _select_rows(self) -> None:
        for user_id in parse_ids(input("User IDs separated by comma: ")):
            if not self.table.toggle_row(user_id):
                print(f"[blocked] User {user_id} is not loaded.")

    def _select_page(self) -> None:
        self.table.toggle_all_page_rows()
